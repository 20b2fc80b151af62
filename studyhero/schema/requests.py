"""Inputs accepted by the content generation layer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Difficulty = Literal["basic", "intermediate", "advanced"]


class GenerationContext(BaseModel):
  """Curriculum context attached to a generation call."""

  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

  subject: str
  topic: str = ""
  class_name: str | None = None
  board: str | None = None
  difficulty: Difficulty | None = None
  include_visuals: bool = True
  include_activities: bool = True

  def header(self) -> str | None:
    """Return the bracketed annotation prepended to prompts, or None without a subject."""
    if not self.subject.strip():
      return None

    parts = [f"Subject: {self.subject}"]
    if self.topic:
      parts.append(f"Topic: {self.topic}")
    if self.class_name:
      parts.append(f"Class: {self.class_name}")
    if self.board:
      parts.append(f"Board: {self.board}")
    return f"[Context: {', '.join(parts)}]"


class GenerationRequest(BaseModel):
  """A single prompt plus its optional curriculum context."""

  prompt: str
  context: GenerationContext | None = None


class LessonSearchParams(BaseModel):
  """Parameters for a lesson researched across educational sources."""

  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

  subject: str
  board: str
  class_name: str | None = None
  topic: str | None = None
  # Bypass the cached result and search again.
  deep_search: bool = False

  def to_context(self) -> GenerationContext:
    return GenerationContext(subject=self.subject, topic=self.topic or "", class_name=self.class_name, board=self.board)
