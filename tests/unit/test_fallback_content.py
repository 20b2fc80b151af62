from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from studyhero.ai.fallback import (
  build_weekly_schedule,
  default_subjects_for_board,
  generate_fallback_lesson,
  generate_fallback_lesson_with_sources,
  generate_fallback_quiz,
  generate_fallback_study_plan,
  topic_from_prompt,
)
from studyhero.ai.fallback.curriculum import plan_stage_description
from studyhero.ai.fallback.lessons import template_for
from studyhero.schema.content import REQUIRED_LESSON_FIELDS
from studyhero.schema.study_plans import StudyItem


@pytest.mark.parametrize(
  ("subject", "template"),
  [
    ("Mathematics", "_math_lesson"),
    ("Applied Maths", "_math_lesson"),
    ("Physics", "_physics_lesson"),
    ("CHEMISTRY", "_chemistry_lesson"),
    ("Biology", "_biology_lesson"),
    ("World History", "_history_lesson"),
    ("Social Studies", "_history_lesson"),
    ("Computer Science", "_computer_lesson"),
    ("Art", "_generic_lesson"),
  ],
)
def test_template_dispatch_by_subject_keyword(subject, template):
  assert template_for(subject).__name__ == template


def test_dispatch_order_prefers_earlier_keywords():
  # "math" is checked before "physics".
  assert template_for("Mathematical Physics").__name__ == "_math_lesson"


@pytest.mark.parametrize("subject", ["Mathematics", "Physics", "Chemistry", "Biology", "History", "Computer Science", "Music"])
def test_every_template_fills_required_fields(subject):
  payload = generate_fallback_lesson(subject, "core ideas").to_payload()

  for field in REQUIRED_LESSON_FIELDS:
    assert payload[field], field
  assert payload["title"] == f"{subject}: Core ideas"


def test_fallback_lesson_is_deterministic():
  first = generate_fallback_lesson("Biology", "Photosynthesis").to_payload()
  second = generate_fallback_lesson("Biology", "Photosynthesis").to_payload()

  assert first == second


def test_fallback_lesson_capitalises_inputs_and_substitutes_topic():
  lesson = generate_fallback_lesson("chemistry", "acids and bases")

  assert lesson.title == "Chemistry: Acids and bases"
  assert any("Acids and bases" in point for point in lesson.key_points)


def test_generic_template_summary():
  lesson = generate_fallback_lesson("Music", "Rhythm")

  assert lesson.summary == "Rhythm is a fundamental concept in Music that provides a foundation for advanced study."


def test_blank_inputs_use_defaults():
  assert generate_fallback_lesson("", "  ").title == "General Studies: Core Concepts"


def test_fallback_lesson_with_sources():
  lesson = generate_fallback_lesson_with_sources("Physics", "Light", "CBSE")

  assert lesson.title == "Physics: Light"
  assert [source.relevance for source in lesson.sources] == [95, 88, 85]
  assert lesson.sources[0].url == "https://www.cbse.edu/resources/physics-curriculum"
  assert lesson.sources[2].url == "https://www.teacherportal.com/physics/lessons/light"


def test_fallback_lesson_with_sources_without_topic():
  lesson = generate_fallback_lesson_with_sources("Physics", None, "ICSE")

  assert lesson.sources[2].url.endswith("/lessons/general")


def test_topic_from_prompt_keeps_long_words():
  assert topic_from_prompt("Please explain the process of photosynthesis in plants") == ["please", "explain", "process", "photosynthesis", "plants"]
  assert topic_from_prompt("one two three four five six seven eight nine ten", limit=3) == ["three", "seven", "eight"]


def test_fallback_quiz_rotates_correct_option():
  quiz = generate_fallback_quiz("Physics", "Motion", question_count=6)

  assert [question.id for question in quiz.questions] == ["q1", "q2", "q3", "q4", "q5", "q6"]
  for index, question in enumerate(quiz.questions):
    assert len(question.options) == 4
    assert question.options.index(question.correct_answer) == index % 4
    assert question.explanation.startswith(f"Option {'ABCD'[index % 4]} is correct.")


def test_fallback_quiz_is_deterministic():
  assert generate_fallback_quiz("Biology", "Cells").to_payload() == generate_fallback_quiz("Biology", "Cells").to_payload()


def test_fallback_study_plan_outlines():
  now = datetime(2026, 1, 5, tzinfo=timezone.utc)

  maths = generate_fallback_study_plan("Mathematics", "CBSE", "10", now=now)
  science = generate_fallback_study_plan("Science", "CBSE", "8", now=now)
  other = generate_fallback_study_plan("Geography", "ICSE", "9", now=now)

  assert [chapter.title for chapter in maths.chapters] == ["Numbers and Operations", "Algebra Basics", "Geometry"]
  assert [chapter.title for chapter in science.chapters] == ["Matter and Energy", "Life Sciences", "Earth and Space"]
  assert [chapter.title for chapter in other.chapters] == ["Introduction", "Core Principles", "Advanced Topics"]
  assert maths.last_updated == now.isoformat()
  assert maths.to_payload()["className"] == "10"


def test_plan_stage_description_clamps_steps():
  assert plan_stage_description(1, "Physics") == "Analyzing Physics curriculum"
  assert plan_stage_description(5, "Physics") == "Finalizing study plan"
  assert plan_stage_description(9, "Physics") == "Finalizing study plan"


@pytest.mark.parametrize(
  ("board", "first_optional"),
  [("CBSE", "Computer Science"), ("icse", "Computer Science"), ("State Board", "Computer Applications"), ("IB", "Computer Science")],
)
def test_default_subjects_for_board(board, first_optional):
  subjects = default_subjects_for_board(board)

  assert subjects.compulsory_subjects[0] == "Mathematics"
  assert subjects.optional_subjects[0] == first_optional


def test_international_is_the_default_board():
  assert default_subjects_for_board("Cambridge").compulsory_subjects == ["Mathematics", "Science", "English Language", "Social Studies"]


def test_weekly_schedule_layout():
  start = date(2026, 3, 2)

  plans = build_weekly_schedule(start)

  assert [plan.week_number for plan in plans] == [1, 2, 3, 4]
  first = plans[0]
  assert first.start_date == "2026-03-02"
  assert first.end_date == "2026-03-08"
  assert [day.date for day in first.daily_activities] == ["2026-03-02", "2026-03-03", "2026-03-04", "2026-03-05", "2026-03-06"]
  assert [len(day.items) for day in first.daily_activities] == [2, 1, 2, 1, 2]
  assert first.daily_activities[0].items[0].title == "Day 1 Study: Mathematics"
  assert first.weekly_test.due_date == "2026-03-08"
  assert first.weekly_test.title == "Week 1 Comprehensive Test"
  assert plans[1].start_date == "2026-03-09"


def test_weekly_schedule_spreads_given_items():
  items = [StudyItem(id="a", title="Fractions"), StudyItem(id="b", title="Decimals")]

  plans = build_weekly_schedule(date(2026, 3, 2), weeks=1, items=items)

  titles = [day.items[0].title for day in plans[0].daily_activities]
  assert titles == ["Fractions", "Decimals", "Fractions", "Decimals", "Fractions"]
  assert plans[0].daily_activities[1].items[0].due_date == "2026-03-03"
  assert plans[0].daily_activities[1].items[0].id != "b"
