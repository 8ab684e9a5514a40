"""Unit tests for the Markdown converter, escaper and post-processing."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from page_fetcher.scraper.markdown import (
    PageMarkdownConverter,
    clean_markdown,
    escape_markdown,
    soup_to_markdown,
)


def _convert(html: str, converter: PageMarkdownConverter | None = None) -> str:
    return soup_to_markdown(BeautifulSoup(html, "lxml"), converter)


class TestEscapeMarkdown:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("snake_case", r"snake\_case"),
            ("a*b", r"a\*b"),
            ("`code`", r"\`code\`"),
            ("[x](y)", r"\[x\]\(y\)"),
            ("# heading", r"\# heading"),
            ("1. first", r"1\. first"),
            ("2024. was a year", r"2024\. was a year"),
            ("back\\slash", "back\\\\slash"),
            ("1.5 litres", r"1\.5 litres"),
            ("12.", r"12\."),
        ],
    )
    def test_escaped_markers(self, text: str, expected: str) -> None:
        assert escape_markdown(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["price 3.14", "a # b", "+ - > ! | ~", "plain text"],
    )
    def test_untouched_text(self, text: str) -> None:
        assert escape_markdown(text) == text

    def test_line_start_rules_apply_per_line(self) -> None:
        assert escape_markdown("intro\n# tag\n3. step") == "intro\n\\# tag\n3\\. step"


class TestCleanMarkdown:
    def test_collapses_blank_runs(self) -> None:
        assert clean_markdown("a\n\n\n\n\nb") == "a\n\nb"

    def test_strips_trailing_whitespace(self) -> None:
        assert clean_markdown("a  \nb\t\nc") == "a\nb\nc"

    def test_undoes_double_escaping(self) -> None:
        assert clean_markdown("a \\\\* b \\\\# c") == "a \\* b \\# c"

    def test_removes_empty_links_but_keeps_images(self) -> None:
        assert clean_markdown("see [](https://x.test/) ![](pic.png)") == "see  ![](pic.png)"

    def test_escaped_backslash_before_marker_is_kept(self) -> None:
        assert clean_markdown(r"a \\\* b") == r"a \\\* b"

    def test_literal_backslash_star_round_trips_escaped(self) -> None:
        assert clean_markdown(escape_markdown(r"a literal \* star")) == r"a literal \\\* star"

    def test_blanks_whitespace_only_lines(self) -> None:
        assert clean_markdown("a\n \t \n\n\nb") == "a\n\nb"

    def test_trims_the_document(self) -> None:
        assert clean_markdown("\n\n  text  \n\n") == "text"


class TestPageMarkdownConverter:
    def test_atx_headings(self) -> None:
        assert _convert("<h1>Top</h1><h3>Sub</h3>") == "# Top\n\n### Sub"

    def test_dash_bullets(self) -> None:
        assert _convert("<ul><li>one</li><li>two</li></ul>") == "- one\n- two"

    def test_emphasis_uses_asterisks(self) -> None:
        assert _convert("<p><strong>bold</strong> and <em>it</em></p>") == "**bold** and *it*"

    def test_horizontal_rule(self) -> None:
        assert "---" in _convert("<p>a</p><hr><p>b</p>")

    def test_fenced_code_is_not_escaped(self) -> None:
        markdown = _convert("<pre><code>x_1 = [1]</code></pre>")
        assert "```\nx_1 = [1]\n```" in markdown

    def test_inline_links(self) -> None:
        assert _convert('<p><a href="https://x.test/a">A</a></p>') == "[A](https://x.test/a)"

    def test_default_escaper_is_narrow(self) -> None:
        markdown = _convert("<p>snake_case + [note] - done!</p>")
        assert markdown == r"snake\_case + \[note\] - done!"

    def test_literal_backslash_before_marker(self) -> None:
        assert _convert(r"<p>a literal \* star</p>") == r"a literal \\\* star"

    def test_escaper_is_injectable(self) -> None:
        converter = PageMarkdownConverter(escaper=str.upper)
        assert _convert("<p>quiet</p>", converter) == "QUIET"

    def test_options_override_defaults(self) -> None:
        converter = PageMarkdownConverter(bullets="*")
        assert _convert("<ul><li>one</li></ul>", converter) == "* one"
