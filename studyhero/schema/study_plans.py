"""Study plan and weekly schedule models."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from studyhero.schema.content import CamelModel

StudyItemType = Literal["lesson", "quiz", "practice"]
StudyItemStatus = Literal["completed", "current", "future"]


class StudyLesson(CamelModel):
  title: str
  type: StudyItemType = "lesson"


class StudyChapter(CamelModel):
  title: str
  lessons: list[StudyLesson] = Field(default_factory=list)


class StudyPlan(CamelModel):
  """Chapter outline for one subject."""

  subject: str
  board: str
  class_name: str
  chapters: list[StudyChapter]
  last_updated: str


class BoardSubjects(CamelModel):
  compulsory_subjects: list[str]
  optional_subjects: list[str]


class StudyItem(CamelModel):
  id: str
  title: str
  description: str = ""
  type: StudyItemType = "lesson"
  status: StudyItemStatus = "future"
  due_date: str = ""
  content: str | None = None
  estimated_time_in_minutes: int = 30
  subject: str | None = None


class DailyActivity(CamelModel):
  date: str
  items: list[StudyItem] = Field(default_factory=list)


class WeeklyTest(CamelModel):
  id: str
  title: str
  description: str
  type: str = "quiz"
  status: str = "future"
  due_date: str
  estimated_time_in_minutes: int = 60
  subject: str = "All Subjects"
  is_weekly_test: bool = True
  week_number: int


class WeeklyPlan(CamelModel):
  week_number: int
  start_date: str
  end_date: str
  daily_activities: list[DailyActivity] = Field(default_factory=list)
  weekly_test: WeeklyTest
