"""MeetingSynthesis model for the structured output of the notes workflow.

The workflow is an LLM, so the record it returns is only loosely shaped. The
validators here coerce rather than reject: a sub-field of the wrong type is
treated as absent, and the renderer shows a placeholder for it.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Field order used for display. Keys are the record's field names.
FIRST_LEVEL_FIELDS = (
    "what_was_covered",
    "commitments_made",
    "new_information",
    "customer_uncertainties",
    "open_items",
)

SECOND_LEVEL_FIELDS = (
    "mental_model_gaps",
    "customer_confidence_signals",
    "approach_limitations",
)

THIRD_LEVEL_FIELDS = (
    "structural_recommendation",
)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _as_record(value: Any) -> Optional[dict]:
    return value if isinstance(value, dict) else None


class FirstLevel(BaseModel):
    """Factual recap: what happened in the meeting, one bullet per item."""
    model_config = ConfigDict(extra="allow")

    what_was_covered: Optional[List[Any]] = Field(
        default=None,
        description="Topics covered during the meeting"
    )
    commitments_made: Optional[List[Any]] = Field(
        default=None,
        description="Commitments made by either party"
    )
    new_information: Optional[List[Any]] = Field(
        default=None,
        description="Information learned for the first time"
    )
    customer_uncertainties: Optional[List[Any]] = Field(
        default=None,
        description="Open doubts or hesitations raised by the customer"
    )
    open_items: Optional[List[Any]] = Field(
        default=None,
        description="Items left unresolved"
    )

    @field_validator(*FIRST_LEVEL_FIELDS, mode="before")
    @classmethod
    def lists_only(cls, v: Any) -> Optional[list]:
        """Anything that is not a list renders as an empty section."""
        return v if isinstance(v, list) else None


class SecondLevel(BaseModel):
    """Interpretive recap: free-text observations about the conversation."""
    model_config = ConfigDict(extra="allow")

    mental_model_gaps: Optional[str] = None
    customer_confidence_signals: Optional[str] = None
    approach_limitations: Optional[str] = None

    @field_validator(*SECOND_LEVEL_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _as_text(v)


class ThirdLevel(BaseModel):
    """Strategic recap: a single structural recommendation."""
    model_config = ConfigDict(extra="allow")

    structural_recommendation: Optional[str] = None

    @field_validator(*THIRD_LEVEL_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _as_text(v)


class MeetingRecap(BaseModel):
    """Three-level meeting recap. Every level is optional."""
    model_config = ConfigDict(extra="allow")

    first_level: Optional[FirstLevel] = None
    second_level: Optional[SecondLevel] = None
    third_level: Optional[ThirdLevel] = None

    @field_validator("first_level", "second_level", "third_level", mode="before")
    @classmethod
    def records_only(cls, v: Any) -> Optional[dict]:
        return _as_record(v)


class MeetingSynthesis(BaseModel):
    """Structured note summary produced by the formatting workflow.

    A payload is a MeetingSynthesis when both ``bluf`` and ``meeting_recap``
    are present and truthy (see ``is_meeting_synthesis``). Extra keys are
    allowed so the source record can be echoed back unchanged.
    """
    model_config = ConfigDict(extra="allow")

    bluf: str = Field(
        description="Bottom Line Up Front: a one-paragraph summary"
    )
    meeting_recap: MeetingRecap = Field(
        description="Three-level recap of the meeting"
    )

    @field_validator("bluf", mode="before")
    @classmethod
    def coerce_bluf(cls, v: Any) -> str:
        return _as_text(v) or ""

    @field_validator("meeting_recap", mode="before")
    @classmethod
    def coerce_recap(cls, v: Any) -> dict:
        return _as_record(v) or {}


def is_meeting_synthesis(value: Any) -> bool:
    """Return True if value is a dict with truthy ``bluf`` and ``meeting_recap``."""
    return (
        isinstance(value, dict)
        and bool(value.get("bluf"))
        and bool(value.get("meeting_recap"))
    )
