"""Renderer for formatted notes.

Turns a normalized result into the HTML fragment shown in the result panel.
The ``is_structured`` hint from /api/format is advisory: the text is
re-classified here, and only a parsed MeetingSynthesis gets the structured
layout. Everything else is shown as escaped plain text.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from models.format_request import RenderResponse
from models.meeting_synthesis import (
    FIRST_LEVEL_FIELDS,
    SECOND_LEVEL_FIELDS,
    THIRD_LEVEL_FIELDS,
    MeetingSynthesis,
)
from models.normalized_result import Structured, pretty_json
from services.normalizer_service import classify_text
from utils.fence_utils import strip_code_fences
from utils.text_utils import flatten_html_text, nl2br, title_from_field

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

PLACEHOLDER_LIST = "None"
PLACEHOLDER_TEXT = "Not provided"
PLAIN_TEXT_LABEL = "Formatted Notes"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["nl2br"] = nl2br


class RenderError(Exception):
    """Raised when an operation needs a structured view but got plain text."""
    pass


@dataclass
class FieldView:
    title: str
    items: Optional[List[str]] = None
    text: Optional[str] = None


@dataclass
class LevelView:
    title: str
    kind: str  # "list" or "text"
    fields: List[FieldView]


@dataclass
class RenderResult:
    """
    Outcome of a render, carrying everything the result actions need.

    The copy and download actions read from this object rather than from
    any state left behind by an earlier render.
    """
    view: str
    html: str
    plain_text: str
    record: Optional[dict] = None
    rendered_at: Optional[datetime] = None

    @property
    def is_structured(self) -> bool:
        return self.view == "structured"

    @property
    def record_json(self) -> Optional[str]:
        """Pretty-printed record for "Copy JSON"."""
        if self.record is None:
            return None
        return pretty_json(self.record)

    @property
    def download_filename(self) -> Optional[str]:
        if self.record is None:
            return None
        stamp = (self.rendered_at or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
        return f"meeting-synthesis-{stamp}.json"

    def download_payload(self) -> bytes:
        """
        Bytes for "Download JSON".

        Raises:
            RenderError: If the result is not a structured view
        """
        if self.record is None:
            raise RenderError("Only structured results can be downloaded as JSON")
        return self.record_json.encode("utf-8")

    def to_response(self) -> RenderResponse:
        return RenderResponse(
            view=self.view,
            html=self.html,
            record=self.record,
            record_json=self.record_json,
            plain_text=self.plain_text,
            download_filename=self.download_filename,
        )


def _present(text: Optional[str]) -> Optional[str]:
    return text if text and text.strip() else None


def _list_items(values: Optional[list]) -> List[str]:
    return [item if isinstance(item, str) else str(item) for item in (values or [])]


def build_levels(synthesis: MeetingSynthesis) -> List[LevelView]:
    """Lay out the three recap levels in display order."""
    recap = synthesis.meeting_recap
    first = recap.first_level
    second = recap.second_level
    third = recap.third_level

    return [
        LevelView(
            title=title_from_field("first_level"),
            kind="list",
            fields=[
                FieldView(
                    title=title_from_field(name),
                    items=_list_items(getattr(first, name) if first else None),
                )
                for name in FIRST_LEVEL_FIELDS
            ],
        ),
        LevelView(
            title=title_from_field("second_level"),
            kind="text",
            fields=[
                FieldView(
                    title=title_from_field(name),
                    text=_present(getattr(second, name) if second else None),
                )
                for name in SECOND_LEVEL_FIELDS
            ],
        ),
        LevelView(
            title=title_from_field("third_level"),
            kind="text",
            fields=[
                FieldView(
                    title=title_from_field(name),
                    text=_present(getattr(third, name) if third else None),
                )
                for name in THIRD_LEVEL_FIELDS
            ],
        ),
    ]


def render_structured(record: dict) -> RenderResult:
    """Render a MeetingSynthesis record as the multi-section view."""
    synthesis = MeetingSynthesis.model_validate(record)
    template = _env.get_template("partials/structured_view.html")
    html = template.render(
        bluf_title=title_from_field("bluf"),
        bluf=_present(synthesis.bluf),
        recap_title=title_from_field("meeting_recap"),
        levels=build_levels(synthesis),
        placeholder_list=PLACEHOLDER_LIST,
        placeholder_text=PLACEHOLDER_TEXT,
    )
    return RenderResult(
        view="structured",
        html=html,
        plain_text=flatten_html_text(html),
        record=record,
        rendered_at=datetime.now(timezone.utc),
    )


def render_plain(text: str) -> RenderResult:
    """Render text as an escaped block with a copy control."""
    template = _env.get_template("partials/plain_view.html")
    html = template.render(label=PLAIN_TEXT_LABEL, text=text)
    return RenderResult(view="plain", html=html, plain_text=text)


def render_result(text: str, is_structured: bool = False) -> RenderResult:
    """
    Render a formatting result.

    Args:
        text: formatted_notes from /api/format (or any workflow output)
        is_structured: Advisory hint from /api/format; never decides the view

    Returns:
        RenderResult for the structured or plain-text view
    """
    classification = classify_text(text)

    if isinstance(classification, Structured):
        result = render_structured(classification.record)
    else:
        # Generic JSON is shown as its fence-stripped source text.
        result = render_plain(strip_code_fences(text or ""))

    if is_structured != result.is_structured:
        logger.info(
            f"Render hint disagrees with content: hint_structured={is_structured}, "
            f"kind={classification.kind}, view={result.view}"
        )
    return result
