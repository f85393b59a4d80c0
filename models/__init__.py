"""Data models for the notes formatter service."""
from .meeting_synthesis import (
    MeetingSynthesis,
    MeetingRecap,
    FirstLevel,
    SecondLevel,
    ThirdLevel,
    is_meeting_synthesis,
)
from .normalized_result import (
    NormalizedResult,
    Structured,
    GenericJson,
    PlainText,
    Classification,
    pretty_json,
)
from .format_request import (
    FormatRequest,
    FormatResponse,
    ErrorResponse,
    RenderRequest,
    RenderResponse,
)

__all__ = [
    # Meeting synthesis
    "MeetingSynthesis",
    "MeetingRecap",
    "FirstLevel",
    "SecondLevel",
    "ThirdLevel",
    "is_meeting_synthesis",
    # Normalization
    "NormalizedResult",
    "Structured",
    "GenericJson",
    "PlainText",
    "Classification",
    "pretty_json",
    # Request/response
    "FormatRequest",
    "FormatResponse",
    "ErrorResponse",
    "RenderRequest",
    "RenderResponse",
]
