"""Text helpers shared by the renderer."""
from bs4 import BeautifulSoup
from markupsafe import Markup, escape


# Tokens rendered in upper case rather than title case.
UPPERCASE_TOKENS = {"bluf"}


def title_from_field(field_name: str) -> str:
    """
    Derive a display title from a record field name.

    ``customer_confidence_signals`` -> ``Customer Confidence Signals``;
    ``bluf`` -> ``BLUF``.
    """
    words = []
    for segment in field_name.split("_"):
        if segment.lower() in UPPERCASE_TOKENS:
            words.append(segment.upper())
        else:
            words.append(segment[:1].upper() + segment[1:].lower())
    return " ".join(words)


def nl2br(value: str) -> Markup:
    """Escape text for HTML and turn its line breaks into <br> tags."""
    normalized = str(value).replace("\r\n", "\n").replace("\r", "\n")
    return Markup("<br>").join(escape(line) for line in normalized.split("\n"))


def flatten_html_text(html: str, exclude_selector: str = '[data-role="actions"]') -> str:
    """
    Flatten an HTML fragment into plain text.

    Elements matching ``exclude_selector`` (the action buttons) are dropped
    first. Each remaining text node ends up on its own line; blank lines are
    removed.
    """
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.select(exclude_selector):
        element.decompose()

    lines = []
    for line in soup.get_text(separator="\n").splitlines():
        line = " ".join(line.split())
        if line:
            lines.append(line)
    return "\n".join(lines)
