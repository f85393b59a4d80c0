"""
Notes Formatting Request/Response Models

This module defines the Pydantic models for the notes endpoints:
POST /api/format, POST /api/render and POST /api/render/download.
"""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, field_validator


class FormatRequest(BaseModel):
    """
    Request body for the notes formatting endpoint.

    Attributes:
        raw_notes: Raw notes to format (required, must not be empty or whitespace-only)
    """
    raw_notes: str = Field(
        ...,
        description="Raw notes to format"
    )

    @field_validator('raw_notes')
    @classmethod
    def raw_notes_must_not_be_empty(cls, v: str) -> str:
        """Validate that raw_notes is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError("Missing raw_notes in request body")
        return v


class FormatResponse(BaseModel):
    """
    Response from the notes formatting endpoint.

    Attributes:
        formatted_notes: Display-ready text (pretty-printed JSON or prose)
        is_structured: True when formatted_notes is JSON; advisory only
    """
    formatted_notes: str = Field(
        ...,
        description="Display-ready formatted notes"
    )
    is_structured: bool = Field(
        default=False,
        description="Whether formatted_notes holds JSON"
    )


class ErrorResponse(BaseModel):
    """Error envelope returned by every notes endpoint on failure."""
    error: str = Field(..., description="Short error summary")
    message: Optional[str] = Field(
        default=None,
        description="Detail suitable for display"
    )


class RenderRequest(BaseModel):
    """Request body for the render endpoints."""
    text: str = Field(
        default="",
        description="Formatted notes as returned by /api/format"
    )
    is_structured: bool = Field(
        default=False,
        description="Advisory hint from /api/format"
    )


class RenderResponse(BaseModel):
    """
    Rendered view of a formatting result.

    Attributes:
        view: Which layout was rendered
        html: HTML fragment for the result container
        record: Parsed MeetingSynthesis record (structured view only)
        record_json: Pretty-printed record for "Copy JSON" (structured view only)
        plain_text: Text for "Copy" / "Copy Text"
        download_filename: Suggested filename for "Download JSON" (structured view only)
    """
    view: Literal["structured", "plain"]
    html: str
    record: Optional[Dict[str, Any]] = None
    record_json: Optional[str] = None
    plain_text: str
    download_filename: Optional[str] = None
