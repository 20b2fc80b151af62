"""Lenient JSON parsing helpers for LLM outputs."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any

_FENCE_RE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}
_PY_LITERALS = {"True": "true", "False": "false", "None": "null"}
# Upper bound on candidate spans tried per response so pathological text stays cheap.
_MAX_SPANS = 25


def looks_like_json(text: str) -> bool:
  """Return True when text is structurally JSON (object or array at the top)."""
  stripped = text.strip()
  return stripped.startswith("{") or stripped.startswith("[")


def strip_json_fences(text: str) -> str:
  """Return the body of the first fenced code block, or the stripped text when unfenced."""
  match = _FENCE_RE.search(text)
  if match is None:
    return text.strip()
  return match.group(1).strip()


def safe_parse(text: str | None) -> Any | None:
  """Best-effort JSON extraction; returns None when nothing parseable is found."""
  if not text:
    return None

  try:
    return parse_json_with_fallback(text)
  except json.JSONDecodeError:
    return None


def parse_json_with_fallback(raw: str) -> Any:
  """Parse JSON, recovering from code fences, surrounding prose and common LLM slips."""
  last_error: json.JSONDecodeError | None = None

  # Prefer strict parsing so valid JSON is preserved without mutation.
  try:
    return json.loads(raw)
  except json.JSONDecodeError as exc:
    last_error = exc

  for candidate in _candidates(raw):
    try:
      return _loads_with_repair(candidate)
    except json.JSONDecodeError as exc:
      last_error = exc

  raise last_error


def _candidates(raw: str) -> Iterator[str]:
  """Yield fenced bodies first, then balanced spans found in the raw text."""
  seen: set[str] = set()
  for match in _FENCE_RE.finditer(raw):
    body = match.group(1).strip()
    if body and body not in seen:
      seen.add(body)
      yield body
      # A fenced block may still carry prose around the payload.
      for span in iter_json_spans(body):
        if span not in seen:
          seen.add(span)
          yield span

  for span in iter_json_spans(raw):
    if span not in seen:
      seen.add(span)
      yield span


def _loads_with_repair(candidate: str) -> Any:
  try:
    return json.loads(candidate)
  except json.JSONDecodeError:
    pass

  # Let the final decode error propagate so callers can report it.
  return json.loads(repair_json_text(candidate))


def iter_json_spans(raw: str) -> Iterator[str]:
  """Yield balanced top-level {...} / [...] spans in order of appearance."""
  start = 0
  produced = 0
  while produced < _MAX_SPANS:
    opening = _next_opening(raw, start)
    if opening is None:
      return

    end = _matching_close(raw, opening)
    if end is None:
      # Unbalanced from here; a later opener may still close properly.
      start = opening + 1
      continue

    produced += 1
    yield raw[opening : end + 1]
    start = end + 1


def _next_opening(raw: str, start: int) -> int | None:
  for index in range(start, len(raw)):
    if raw[index] in _CLOSERS:
      return index
  return None


def _matching_close(raw: str, opening: int) -> int | None:
  """Return the index closing the bracket at `opening`, honouring strings and escapes."""
  stack = [_CLOSERS[raw[opening]]]
  in_string = False
  escape = False

  for index in range(opening + 1, len(raw)):
    char = raw[index]

    if in_string:
      if escape:
        escape = False
      elif char == "\\":
        escape = True
      elif char == '"':
        in_string = False
      continue

    if char == '"':
      in_string = True
    elif char in _CLOSERS:
      stack.append(_CLOSERS[char])
    elif char in "}]":
      if char != stack[-1]:
        return None
      stack.pop()
      if not stack:
        return index

  return None


def repair_json_text(raw: str) -> str:
  """Fix trailing commas, bare keys, Python literals and missing commas outside strings."""
  output: list[str] = []
  in_string = False
  escape = False
  # Last structural character emitted outside of strings.
  last = ""
  comma_at: int | None = None
  index = 0

  while index < len(raw):
    char = raw[index]

    if in_string:
      output.append(char)
      if escape:
        escape = False
      elif char == "\\":
        escape = True
      elif char == '"':
        in_string = False
        last = '"'
      index += 1
      continue

    if char.isspace():
      output.append(char)
      index += 1
      continue

    # Values that follow a finished value with no separator get a comma.
    if last in {'"', "}", "]", "v"} and (char in '"{[-_' or char.isalnum()):
      output.append(",")
      last = ","

    if char == '"':
      output.append(char)
      in_string = True
      index += 1
      continue

    if char.isalpha() or char == "_":
      end = index
      while end < len(raw) and (raw[end].isalnum() or raw[end] in "_-"):
        end += 1
      word = raw[index:end]
      lookahead = end
      while lookahead < len(raw) and raw[lookahead].isspace():
        lookahead += 1

      if last in {"{", ","} and lookahead < len(raw) and raw[lookahead] == ":":
        output.append(f'"{word}"')
        last = '"'
      else:
        output.append(_PY_LITERALS.get(word, word))
        last = "v"
      index = end
      continue

    if char.isdigit() or char == "-":
      end = index + 1
      while end < len(raw) and (raw[end].isalnum() or raw[end] in ".+-"):
        end += 1
      output.append(raw[index:end])
      last = "v"
      index = end
      continue

    if char in "}]" and last == "," and comma_at is not None:
      del output[comma_at]
    elif char == ",":
      comma_at = len(output)
    output.append(char)
    last = char
    index += 1

  return "".join(output)
