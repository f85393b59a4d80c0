"""Normalizer for workflow output.

Turns whatever the workflow returned (plain prose, a JSON string, JSON wrapped
in a markdown code fence, or an already-parsed object) into a single
NormalizedResult for the browser.

Classification happens in one place, ``classify_text``; the renderer calls
the same function so producer and consumer cannot drift apart.
"""
import logging
from typing import Any

from models.meeting_synthesis import is_meeting_synthesis
from models.normalized_result import (
    Classification,
    GenericJson,
    NormalizedResult,
    PlainText,
    Structured,
    loads_strict,
    pretty_json,
)
from services.workflow_service import WorkflowOutput
from utils.fence_utils import has_code_fence, strip_code_fences

logger = logging.getLogger(__name__)


def classify_value(value: Any) -> Classification:
    """Classify an already-parsed JSON value."""
    if is_meeting_synthesis(value):
        return Structured(record=value)
    return GenericJson(value=value)


def classify_text(text: str) -> Classification:
    """
    Strip code fences from text and classify what is left.

    A JSON parse failure is not an error here; it means the text is prose.

    Args:
        text: Raw or previously normalized workflow output

    Returns:
        Structured, GenericJson or PlainText
    """
    cleaned = strip_code_fences(text or "")
    try:
        parsed = loads_strict(cleaned)
    except ValueError:
        return PlainText(text=cleaned)
    return classify_value(parsed)


def normalize_output(raw: Any) -> NormalizedResult:
    """
    Normalize raw workflow output for display.

    Objects are checked for the MeetingSynthesis shape directly and never go
    through fence stripping. Strings are fence-stripped and parsed.

    Args:
        raw: String or parsed object returned by the workflow

    Returns:
        NormalizedResult with display-ready text and the structured flag
    """
    if isinstance(raw, str):
        if has_code_fence(raw):
            logger.debug("Workflow output is wrapped in a code fence")
        classification = classify_text(raw)
    elif isinstance(raw, (dict, list)):
        classification = classify_value(raw)
    else:
        # Scalars (numbers, booleans, null) are shown as JSON text.
        return NormalizedResult(text=pretty_json(raw), is_structured=False)

    logger.info(f"Workflow output classified: kind={classification.kind}")
    return classification.to_normalized()


def normalize_workflow_output(output: WorkflowOutput) -> NormalizedResult:
    """
    Normalize the output extracted from a workflow run.

    When nothing could be extracted, the entire upstream payload is returned
    as pretty-printed JSON and marked non-structured.
    """
    if output.source == "fallback":
        return NormalizedResult(text=pretty_json(output.value), is_structured=False)
    return normalize_output(output.value)
