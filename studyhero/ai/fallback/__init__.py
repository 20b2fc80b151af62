"""Deterministic content used when every remote provider fails."""

from studyhero.ai.fallback.curriculum import build_weekly_schedule, default_subjects_for_board, generate_fallback_quiz, generate_fallback_study_plan, topic_from_prompt
from studyhero.ai.fallback.lessons import generate_fallback_lesson, generate_fallback_lesson_with_sources

__all__ = [
  "build_weekly_schedule",
  "default_subjects_for_board",
  "generate_fallback_lesson",
  "generate_fallback_lesson_with_sources",
  "generate_fallback_quiz",
  "generate_fallback_study_plan",
  "topic_from_prompt",
]
