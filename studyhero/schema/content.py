"""Lesson and quiz payload models shared by providers, fallbacks and the cache."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Fields a lesson payload must carry before it is accepted from a provider.
REQUIRED_LESSON_FIELDS: tuple[str, ...] = ("title", "keyPoints", "explanation", "examples", "visualAids", "activities", "summary")


class CamelModel(BaseModel):
  """Base for camelCase JSON payloads; unknown keys from models are ignored."""

  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

  def to_payload(self) -> dict[str, Any]:
    """Return the camelCase JSON-ready dict used for prompts and cache entries."""
    return self.model_dump(mode="json", by_alias=True)


class Example(CamelModel):
  title: str
  content: str


class VisualAid(CamelModel):
  title: str
  description: str
  visual_type: str = "diagram"


class Activity(CamelModel):
  title: str
  instructions: str
  learning_outcome: str = ""


class TextbookReference(CamelModel):
  chapter: str
  page_numbers: str = ""
  description: str = ""


class WebContentSource(CamelModel):
  url: str
  title: str
  relevance: int = Field(default=0, ge=0, le=100)
  snippet: str = ""

  @field_validator("relevance", mode="before")
  @classmethod
  def normalize_relevance(cls, value: Any) -> int:
    """Accept 0..100 scores, 0..1 fractions and numeric strings; clamp to 0..100."""
    if value is None or isinstance(value, bool):
      return 0
    if isinstance(value, int):
      score = float(value)
    else:
      try:
        score = float(str(value).strip().rstrip("%"))
      except ValueError:
        return 0
      if 0 < score <= 1 and not str(value).strip().endswith("%"):
        score *= 100
    return max(0, min(100, round(score)))


class LessonContent(CamelModel):
  """A complete lesson as rendered by the lesson page."""

  title: str
  key_points: list[str] = Field(default_factory=list)
  explanation: list[str] = Field(default_factory=list)
  examples: list[Example] = Field(default_factory=list)
  visual_aids: list[VisualAid] = Field(default_factory=list)
  activities: list[Activity] = Field(default_factory=list)
  summary: str = ""
  interesting_facts: list[str] = Field(default_factory=list)
  textbook_references: list[TextbookReference] = Field(default_factory=list)


class LessonWithSources(LessonContent):
  """A lesson annotated with the web resources it was compiled from."""

  sources: list[WebContentSource] = Field(default_factory=list)


class QuizQuestion(CamelModel):
  id: str
  question: str
  options: list[str]
  correct_answer: str
  explanation: str = ""


class QuizContent(CamelModel):
  questions: list[QuizQuestion]
