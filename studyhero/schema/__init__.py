"""Pydantic models for requests and generated content."""

from studyhero.schema.content import (
  REQUIRED_LESSON_FIELDS,
  Activity,
  Example,
  LessonContent,
  LessonWithSources,
  QuizContent,
  QuizQuestion,
  TextbookReference,
  VisualAid,
  WebContentSource,
)
from studyhero.schema.requests import GenerationContext, GenerationRequest, LessonSearchParams
from studyhero.schema.study_plans import BoardSubjects, DailyActivity, StudyChapter, StudyItem, StudyLesson, StudyPlan, WeeklyPlan, WeeklyTest

__all__ = [
  "REQUIRED_LESSON_FIELDS",
  "Activity",
  "BoardSubjects",
  "DailyActivity",
  "Example",
  "GenerationContext",
  "GenerationRequest",
  "LessonContent",
  "LessonSearchParams",
  "LessonWithSources",
  "QuizContent",
  "QuizQuestion",
  "StudyChapter",
  "StudyItem",
  "StudyLesson",
  "StudyPlan",
  "TextbookReference",
  "VisualAid",
  "WebContentSource",
  "WeeklyPlan",
  "WeeklyTest",
]
