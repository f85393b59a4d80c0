"""
Normalization Result Models

Dataclasses describing what the normalizer produces:

- NormalizedResult: the display-ready text plus the structured flag returned
  by POST /api/format
- Structured / GenericJson / PlainText: the tagged variant produced by the
  classifier, evaluated once and consumed by both the normalizer and the
  renderer
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Union


MAX_JSON_DEPTH = 500


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _exceeds_depth(text: str, limit: int) -> bool:
    """Return True if brackets outside string literals nest deeper than limit."""
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
            if depth > limit:
                return True
        elif ch in "]}":
            depth -= 1
    return False


def loads_strict(text: str) -> Any:
    """
    Parse standard JSON only.

    NaN, Infinity and -Infinity are rejected, as is anything nested deeper
    than MAX_JSON_DEPTH. Every rejection is a ValueError.
    """
    if _exceeds_depth(text, MAX_JSON_DEPTH):
        raise ValueError(f"JSON nested deeper than {MAX_JSON_DEPTH} levels")
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as e:
        raise ValueError("JSON nested too deeply") from e


def pretty_json(value: Any) -> str:
    """Serialize a value as two-space indented JSON, keeping non-ASCII text."""
    return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)


@dataclass(frozen=True)
class NormalizedResult:
    """
    Display-ready workflow output.

    Attributes:
        text: Pretty-printed JSON or plain prose
        is_structured: True when text is JSON; advisory for the renderer
    """
    text: str
    is_structured: bool


@dataclass(frozen=True)
class Structured:
    """A parsed MeetingSynthesis record."""
    record: dict
    kind: ClassVar[str] = "structured"

    def to_normalized(self) -> NormalizedResult:
        return NormalizedResult(text=pretty_json(self.record), is_structured=True)


@dataclass(frozen=True)
class GenericJson:
    """Valid JSON that is not a MeetingSynthesis."""
    value: Any
    kind: ClassVar[str] = "json"

    def to_normalized(self) -> NormalizedResult:
        return NormalizedResult(text=pretty_json(self.value), is_structured=True)


@dataclass(frozen=True)
class PlainText:
    """Text that did not parse as JSON, already fence-stripped and trimmed."""
    text: str
    kind: ClassVar[str] = "plain"

    def to_normalized(self) -> NormalizedResult:
        return NormalizedResult(text=self.text, is_structured=False)


Classification = Union[Structured, GenericJson, PlainText]
