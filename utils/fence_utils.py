"""
Markdown Code-Fence Utilities

LLM workflows frequently wrap their JSON output in a markdown code block
(```json ... ```). This module removes those delimiters so the payload can be
handed to the JSON parser.

The substitutions run as a fixed, ordered sequence. Each one is a no-op when
its pattern is absent, so the sequence is safe to apply to any string.
"""

import re
from typing import List, Tuple


FENCE = "```"

# Order matters: the brace-anchored patterns run first so that a fenced JSON
# object keeps its braces, then the generic leading/trailing fence removals
# handle everything else.
_FENCE_SUBSTITUTIONS: List[Tuple[re.Pattern, str]] = [
    # ```json{  /  ```json\n{  ->  {
    (re.compile(r"^\s*```[\w+-]*\s*\{"), "{"),
    # }\n```  ->  }
    (re.compile(r"\}\s*```\s*$"), "}"),
    # ```markdown\n
    (re.compile(r"^\s*```[\w+-]*[ \t]*\r?\n"), ""),
    # ```\n
    (re.compile(r"^\s*```\r?\n"), ""),
    # \n```
    (re.compile(r"\r?\n```\s*$"), ""),
    # ```text (no newline)
    (re.compile(r"^\s*```[\w+-]+"), ""),
    # trailing ``` (no newline)
    (re.compile(r"```\s*$"), ""),
]


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code-fence markers surrounding a payload.

    Args:
        text: Raw text, possibly wrapped in a fenced code block

    Returns:
        The text with leading/trailing fence markers removed and surrounding
        whitespace trimmed
    """
    if not text:
        return ""

    cleaned = text
    for pattern, replacement in _FENCE_SUBSTITUTIONS:
        cleaned = pattern.sub(replacement, cleaned, count=1)

    return cleaned.strip()


def has_code_fence(text: str) -> bool:
    """Return True if the text starts or ends with a fence marker."""
    stripped = (text or "").strip()
    return stripped.startswith(FENCE) or stripped.endswith(FENCE)
