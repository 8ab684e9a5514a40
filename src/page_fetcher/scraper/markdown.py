"""HTML to Markdown conversion with a narrow escaping strategy.

Conversion is delegated to ``markdownify`` with fixed style choices: ATX
headings, fenced code blocks, ``*`` emphasis, ``**`` strong, ``-`` bullets,
``---`` rules and inline links.

``markdownify`` escapes generously by default.  The escaping strategy here is
injected at construction and is deliberately narrower so that ordinary
prose does not come out littered with backslashes.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from bs4 import BeautifulSoup
from markdownify import ASTERISK, ATX, MarkdownConverter

Escaper = Callable[[str], str]

# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

_ESCAPE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\\"), r"\\\\"),
    (re.compile(r"^(\d+)\.", re.MULTILINE), r"\1\\."),
    (re.compile(r"([*_`\[\]()])"), r"\\\1"),
    (re.compile(r"^#", re.MULTILINE), r"\\#"),
)


def escape_markdown(text: str) -> str:
    """Escape Markdown markers in a text node.

    Escapes backslashes; ordered-list markers (``1.``) at line start;
    ``*``, ``_``, backticks, square brackets and parentheses; and ``#`` at
    line start.  Nothing else is touched.
    """
    for pattern, replacement in _ESCAPE_RULES:
        text = pattern.sub(replacement, text)
    return text


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_DOUBLE_ESCAPED = re.compile(r"(?<!\\)\\\\([*_`\[\]()#])")
_EMPTY_LINK = re.compile(r"(?<!!)\[\]\([^)]*\)")
_BLANK_LINE = re.compile(r"^[ \t]+$", re.MULTILINE)


def clean_markdown(markdown: str) -> str:
    """Normalise converter output.

    Collapses runs of three or more newlines to two, strips trailing spaces
    and tabs from every line, un-escapes double-escaped markers, removes
    empty links ``[](...)`` and blanks whitespace-only lines.  A marker is
    un-escaped only when exactly two backslashes precede it, so an escaped
    literal backslash (``\\\\\\*``) keeps its marker escaped.
    """
    text = _EXCESS_NEWLINES.sub("\n\n", markdown)
    text = _TRAILING_SPACE.sub("", text)
    text = _DOUBLE_ESCAPED.sub(r"\\\1", text)
    text = _EMPTY_LINK.sub("", text)
    text = _BLANK_LINE.sub("", text)
    # Link removal can leave new blank runs behind.
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------

CONVERTER_OPTIONS: dict[str, Any] = {
    "heading_style": ATX,
    "bullets": "-",
    "strong_em_symbol": ASTERISK,
    "code_language": "",
}


class PageMarkdownConverter(MarkdownConverter):
    """``MarkdownConverter`` with the page style and a pluggable escaper.

    Args:
        escaper: Text-node escaping function.  Defaults to
            :func:`escape_markdown`.
        **options: Extra ``markdownify`` options overriding
            :data:`CONVERTER_OPTIONS`.
    """

    def __init__(self, escaper: Escaper = escape_markdown, **options: Any) -> None:
        super().__init__(**{**CONVERTER_OPTIONS, **options})
        self.escaper = escaper

    def escape(self, text: str, *args: Any, **kwargs: Any) -> str:  # noqa: ARG002
        if not text:
            return ""
        return self.escaper(text)


def soup_to_markdown(soup: BeautifulSoup, converter: PageMarkdownConverter | None = None) -> str:
    """Convert a parsed document to cleaned Markdown."""
    converter = converter or PageMarkdownConverter()
    return clean_markdown(converter.convert_soup(soup))
