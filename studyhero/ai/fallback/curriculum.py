"""Deterministic quizzes, study plans and schedules used when providers fail."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

from studyhero.ai.fallback.lessons import DEFAULT_TOPIC, capitalize_first
from studyhero.schema.content import QuizContent, QuizQuestion
from studyhero.schema.study_plans import BoardSubjects, DailyActivity, StudyChapter, StudyItem, StudyLesson, StudyPlan, WeeklyPlan, WeeklyTest
from studyhero.utils.ids import generate_item_id

_OPTION_LABELS = ("A", "B", "C", "D")
_WEEKDAY_SUBJECTS = ("Mathematics", "Physics", "Chemistry", "Biology", "History")


def topic_from_prompt(prompt: str, *, limit: int = 10) -> list[str]:
  """Return up to `limit` keywords (words longer than four characters) from a prompt."""
  words = re.findall(r"[a-z0-9']+", prompt.lower())
  return [word for word in words if len(word) > 4][:limit]


def _quiz_templates(subject: str, topic: str) -> list[tuple[str, str, list[str], str]]:
  """(question, correct answer, distractors, explanation) tuples cycled by the quiz fallback."""
  return [
    (
      f"Which statement best describes {topic}?",
      f"{topic} is a core idea in {subject} with clear rules and applications",
      [f"{topic} is unrelated to {subject}", f"{topic} only matters in advanced research", f"{topic} has no practical applications"],
      f"{topic} is part of the {subject} curriculum because it has clear rules and real applications.",
    ),
    (
      f"Why is {topic} important when studying {subject}?",
      f"It builds a foundation for more advanced {subject} topics",
      ["It is only needed for memorising dates", "It replaces all earlier topics", "It is never assessed"],
      f"Later {subject} topics build on the ideas introduced in {topic}.",
    ),
    (
      f"What is the best first step when solving a problem about {topic}?",
      "Identify what is given and what needs to be found",
      ["Guess the answer immediately", "Skip the definitions", "Copy a previous answer"],
      "Listing the known information and the goal keeps the solution organised.",
    ),
    (
      f"Which of the following is a good way to revise {topic}?",
      f"Practise varied questions and explain {topic} in your own words",
      ["Read the chapter title only", "Avoid practice questions", "Study it once the night before the exam"],
      "Active practice and self-explanation lead to lasting understanding.",
    ),
  ]


def generate_fallback_quiz(subject: str, topic: str, question_count: int = 5) -> QuizContent:
  """Return a deterministic multiple-choice quiz; the correct option rotates with the question index."""
  subject_name = capitalize_first(subject.strip() or "General Studies")
  topic_name = capitalize_first(topic.strip() or DEFAULT_TOPIC)
  templates = _quiz_templates(subject_name, topic_name)

  questions: list[QuizQuestion] = []
  for index in range(max(question_count, 0)):
    question, correct, distractors, explanation = templates[index % len(templates)]
    slot = index % len(_OPTION_LABELS)
    options = list(distractors)
    options.insert(slot, correct)
    questions.append(
      QuizQuestion(
        id=f"q{index + 1}",
        question=question,
        options=options,
        correct_answer=correct,
        explanation=f"Option {_OPTION_LABELS[slot]} is correct. {explanation}",
      )
    )
  return QuizContent(questions=questions)


def _chapter(title: str, *lessons: tuple[str, str]) -> StudyChapter:
  return StudyChapter(title=title, lessons=[StudyLesson(title=name, type=kind) for name, kind in lessons])


def fallback_chapters(subject: str) -> list[StudyChapter]:
  """Return the chapter outline for a subject; Mathematics and Science have dedicated outlines."""
  normalized = subject.strip().lower()
  if normalized == "mathematics":
    return [
      _chapter("Numbers and Operations", ("Number Systems", "lesson"), ("Operations Practice", "practice"), ("Quiz: Numbers", "quiz")),
      _chapter("Algebra Basics", ("Equations and Expressions", "lesson"), ("Solving Linear Equations", "practice"), ("Algebra Test", "quiz")),
      _chapter("Geometry", ("Shapes and Properties", "lesson"), ("Geometry Problems", "practice"), ("Final Assessment", "quiz")),
    ]
  if normalized == "science":
    return [
      _chapter("Matter and Energy", ("Properties of Matter", "lesson"), ("Energy Transformations", "lesson"), ("Science Quiz 1", "quiz")),
      _chapter("Life Sciences", ("Cell Structure", "lesson"), ("Plant and Animal Systems", "practice"), ("Biology Test", "quiz")),
      _chapter("Earth and Space", ("Planet Earth", "lesson"), ("Solar System", "practice"), ("Final Exam", "quiz")),
    ]
  return [
    _chapter("Introduction", ("Basic Concepts", "lesson"), ("Fundamentals Quiz", "quiz")),
    _chapter("Core Principles", ("Key Theories", "lesson"), ("Applied Problems", "practice"), ("Chapter Assessment", "quiz")),
    _chapter("Advanced Topics", ("Complex Concepts", "lesson"), ("Problem Solving", "practice"), ("Final Evaluation", "quiz")),
  ]


def generate_fallback_study_plan(subject: str, board: str, class_name: str, *, now: datetime | None = None) -> StudyPlan:
  timestamp = (now or datetime.now(timezone.utc)).isoformat()
  return StudyPlan(subject=subject, board=board, class_name=class_name, chapters=fallback_chapters(subject), last_updated=timestamp)


def plan_stage_description(step: int, subject: str) -> str:
  """Stage labels reported while a study plan is assembled locally (steps 1..5)."""
  stages = (
    f"Analyzing {subject} curriculum",
    f"Structuring {subject} lessons",
    "Creating practice exercises",
    "Generating visual aids",
    "Finalizing study plan",
  )
  return stages[min(max(step, 1), len(stages)) - 1]


_BOARD_SUBJECTS: dict[str, tuple[list[str], list[str]]] = {
  "cbse": (["Mathematics", "Science", "English", "Social Studies", "Hindi"], ["Computer Science", "Sanskrit", "Physical Education", "Art", "Music"]),
  "icse": (["Mathematics", "Physics", "Chemistry", "Biology", "English", "Hindi"], ["Computer Science", "Physical Education", "Art", "Economics", "Geography"]),
  "state board": (["Mathematics", "Science", "English", "Social Science", "Hindi"], ["Computer Applications", "Physical Education", "Art Education", "Music"]),
}
_INTERNATIONAL_SUBJECTS: tuple[list[str], list[str]] = (
  ["Mathematics", "Science", "English Language", "Social Studies"],
  ["Computer Science", "Foreign Language", "Physical Education", "Art & Design", "Music", "Economics"],
)


def default_subjects_for_board(board: str) -> BoardSubjects:
  """Return the standard subject lists for a board; unknown boards get the international set."""
  compulsory, optional = _BOARD_SUBJECTS.get(board.strip().lower(), _INTERNATIONAL_SUBJECTS)
  return BoardSubjects(compulsory_subjects=list(compulsory), optional_subjects=list(optional))


def _daily_items(day_index: int, day: date, items: list[StudyItem] | None) -> list[StudyItem]:
  if items:
    source = items[day_index % len(items)]
    return [source.model_copy(update={"id": generate_item_id(), "due_date": day.isoformat(), "status": "future"})]

  subject = _WEEKDAY_SUBJECTS[day_index % len(_WEEKDAY_SUBJECTS)]
  planned = [
    StudyItem(
      id=generate_item_id(),
      title=f"Day {day_index + 1} Study: {subject}",
      description=f"Study session for {subject}",
      type="lesson",
      status="future",
      due_date=day.isoformat(),
      content=f"Lesson content for {subject}",
      estimated_time_in_minutes=30 + 5 * day_index,
      subject=subject,
    )
  ]
  # Quizzes on the first, third and fifth day of the week.
  if day_index % 2 == 0:
    planned.append(
      StudyItem(
        id=generate_item_id(),
        title=f"{subject} Quiz",
        description=f"Quick quiz on {subject} concepts",
        type="quiz",
        status="future",
        due_date=day.isoformat(),
        content=f"Quiz content for {subject}",
        estimated_time_in_minutes=15,
        subject=subject,
      )
    )
  return planned


def build_weekly_schedule(start: date, *, weeks: int = 4, items: list[StudyItem] | None = None) -> list[WeeklyPlan]:
  """Lay out `weeks` seven-day blocks from `start`: five study days, then a comprehensive test due on the seventh day.

  Dates and titles depend only on the arguments; item ids are freshly generated.

  When `items` are given they are spread over the days round-robin; otherwise a
  rotation of core subjects is used.
  """
  plans: list[WeeklyPlan] = []
  for week in range(1, weeks + 1):
    week_start = start + timedelta(days=(week - 1) * 7)
    week_end = week_start + timedelta(days=6)
    cursor = (week - 1) * 5

    daily = []
    for day_offset in range(5):
      day = week_start + timedelta(days=day_offset)
      daily.append(DailyActivity(date=day.isoformat(), items=_daily_items(cursor + day_offset if items else day_offset, day, items)))

    weekly_test = WeeklyTest(
      id=generate_item_id(),
      title=f"Week {week} Comprehensive Test",
      description="Weekly assessment covering all subjects studied this week",
      due_date=week_end.isoformat(),
      week_number=week,
    )
    plans.append(WeeklyPlan(week_number=week, start_date=week_start.isoformat(), end_date=week_end.isoformat(), daily_activities=daily, weekly_test=weekly_test))
  return plans
