"""Content extraction from fetched page markup.

Three transformations of the raw HTML returned by the browser:

- :func:`extract_text` — visible body text with scripts and styles removed.
- :func:`extract_json` — JSON payload, unwrapped from the ``<pre>`` block
  browsers render JSON responses into.
- :func:`extract_markdown` — main-content Markdown.  Primary extractor:
  ``trafilatura`` (boilerplate removal plus title/author metadata).
  Fallback: strip non-content elements from the full document and convert
  everything that remains.  The Markdown path never raises.
"""

from __future__ import annotations

import html as html_module
import json
import logging
import re
import urllib.parse
from dataclasses import dataclass

import trafilatura
from bs4 import BeautifulSoup

from page_fetcher.core.exceptions import ContentParseError
from page_fetcher.scraper.config import FALLBACK_STRIP_TAGS, INVALID_JSON_MESSAGE
from page_fetcher.scraper.markdown import (
    PageMarkdownConverter,
    clean_markdown,
    soup_to_markdown,
)

logger = logging.getLogger(__name__)

_PARSER = "lxml"

_WHITESPACE_RUN = re.compile(r"\s+")
_PRE_BLOCK = re.compile(r"<pre[^>]*>(.*?)</pre>", re.IGNORECASE | re.DOTALL)

# ---------------------------------------------------------------------------
# Output dataclass
# ---------------------------------------------------------------------------


@dataclass
class MainContent:
    """Result of main-content extraction.

    Attributes:
        html: HTML fragment of the main content, or ``None`` if nothing was
            extracted.
        title: Page title, or ``None`` if not detected.
        author: Author / byline, or ``None`` if not detected.
    """

    html: str | None
    title: str | None
    author: str | None


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


def extract_text(content: str) -> str:
    """Return the body text of ``content`` with whitespace runs collapsed.

    ``script`` and ``style`` elements are removed before reading the text.
    """
    soup = BeautifulSoup(content, _PARSER)
    for tag in soup(["script", "style"]):
        if not tag.decomposed:
            tag.decompose()
    root = soup.body if soup.body is not None else soup
    return _WHITESPACE_RUN.sub(" ", root.get_text()).strip()


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not a JSON value")


def _json_candidate(content: str) -> str:
    blocks = _PRE_BLOCK.findall(content)
    if len(blocks) == 1:
        return html_module.unescape(blocks[0]).strip()
    return content


def extract_json(content: str, content_type: str = "") -> str:
    """Parse the JSON payload of ``content`` and re-serialise it compactly.

    Browsers wrap a JSON response in an HTML document with a single ``<pre>``
    block; when exactly one such block is present its text is parsed,
    otherwise the raw markup is.

    Raises:
        ContentParseError: The candidate payload is not valid JSON.
    """
    if "json" not in content_type.lower():
        logger.debug("scraper: content-type %r is not JSON; parsing anyway", content_type)
    candidate = _json_candidate(content)
    try:
        value = json.loads(candidate, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ContentParseError(INVALID_JSON_MESSAGE) from exc
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


def _absolutize_links(soup: BeautifulSoup, base_url: str) -> None:
    """Resolve relative ``href`` / ``src`` attributes against ``base_url``."""
    for attr in ("href", "src"):
        for tag in soup.find_all(attrs={attr: True}):
            value = tag.get(attr)
            if isinstance(value, str) and not value.startswith(("#", "data:", "javascript:")):
                tag[attr] = urllib.parse.urljoin(base_url, value)


def extract_main_content(content: str, url: str) -> MainContent:
    """Isolate the primary readable content of a page with trafilatura.

    Relative links are resolved against ``url`` before extraction so they
    survive into the Markdown output.
    """
    soup = BeautifulSoup(content, _PARSER)
    _absolutize_links(soup, url)
    anchored = str(soup)

    fragment = trafilatura.extract(
        anchored,
        url=url,
        output_format="html",
        include_comments=False,
        include_tables=True,
        include_links=True,
        include_formatting=True,
    )

    title: str | None = None
    author: str | None = None
    meta = trafilatura.extract_metadata(anchored, default_url=url)
    if meta:
        title = getattr(meta, "title", None) or None
        author = getattr(meta, "author", None) or None

    return MainContent(html=fragment or None, title=title, author=author)


def _primary_markdown(content: str, url: str, converter: PageMarkdownConverter) -> str | None:
    main = extract_main_content(content, url)
    if not main.html:
        return None

    fragment = BeautifulSoup(main.html, _PARSER)
    for tag in fragment(["head"]):
        tag.decompose()
    body = converter.convert_soup(fragment)

    lines: list[str] = []
    if main.title:
        lines.append(f"# {main.title}")
    if main.author:
        lines.append(f"*{main.author}*")
    lines.append(body)
    markdown = clean_markdown("\n\n".join(lines))
    return markdown or None


def _fallback_markdown(content: str, converter: PageMarkdownConverter) -> str:
    soup = BeautifulSoup(content, _PARSER)
    for tag in soup(list(FALLBACK_STRIP_TAGS)):
        if not tag.decomposed:
            tag.decompose()
    for tag in soup.find_all("link"):
        if "stylesheet" in (tag.get("rel") or []):
            tag.decompose()
    for tag in soup.find_all(attrs={"style": True}):
        del tag["style"]
    root = soup.body if soup.body is not None else soup
    return soup_to_markdown(BeautifulSoup(str(root), _PARSER), converter)


def extract_markdown(
    content: str,
    url: str,
    converter: PageMarkdownConverter | None = None,
) -> str:
    """Convert the main content of a page to cleaned Markdown.

    Uses trafilatura as the primary extractor and prepends the page title
    (``# Title``) and author (``*Author*``) when detected.  Falls back to
    converting the whole stripped document when extraction yields nothing
    or fails.

    Args:
        content: Raw page markup.
        url: Source URL (base for relative links).
        converter: Optional pre-configured converter.

    Returns:
        Markdown text.  Never raises for extraction or conversion failures.
    """
    converter = converter or PageMarkdownConverter()

    try:
        markdown = _primary_markdown(content, url, converter)
        if markdown:
            return markdown
        logger.info("scraper: main-content extraction empty for %s; using fallback", url)
    except Exception as exc:  # noqa: BLE001
        logger.warning("scraper: main-content extraction failed for %s: %s", url, exc)

    try:
        return _fallback_markdown(content, converter)
    except Exception as exc:  # noqa: BLE001
        logger.warning("scraper: fallback markdown conversion failed for %s: %s", url, exc)
        return extract_text(content)
