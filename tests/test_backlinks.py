"""Tests for the backlink graph and the section injector."""

from __future__ import annotations

import pytest

from conftest import make_book
from mdbook_backlinks.backlinks import BacklinkGraph, build_backlink_graph
from mdbook_backlinks.book import walk_chapters
from mdbook_backlinks.injector import block_closer, inject_backlinks, render_backlinks_section
from mdbook_backlinks.models import BacklinkEntry, External, Internal, RawLink
from mdbook_backlinks.parser import extract_links


def _link(source: str, target: str, text: str = "t") -> tuple[RawLink, Internal]:
    return RawLink(source=source, text=text, target=target, offset=0), Internal(target)


# =============================================================================
# TestBuildBacklinkGraph
# =============================================================================


class TestBuildBacklinkGraph:
    """Tests for build_backlink_graph."""

    def test_inverts_links(self):
        """Each internal link becomes an entry on its target."""
        graph = build_backlink_graph([_link("a.md", "b.md", "to b"), _link("c.md", "b.md", "see b")])

        assert graph["b.md"] == (
            BacklinkEntry(source="a.md", text="to b"),
            BacklinkEntry(source="c.md", text="see b"),
        )
        assert "a.md" not in graph

    def test_external_links_ignored(self):
        raw = RawLink(source="a.md", text="site", target="https://example.com", offset=0)

        graph = build_backlink_graph([(raw, External())])

        assert len(graph) == 0

    def test_self_links_excluded(self):
        """A chapter never appears in its own backlinks."""
        graph = build_backlink_graph([_link("a.md", "a.md"), _link("b.md", "a.md")])

        assert graph.sources("a.md") == ["b.md"]

    def test_self_link_only_gives_no_entry(self):
        graph = build_backlink_graph([_link("a.md", "a.md")])

        assert "a.md" not in graph

    def test_deduplicates_by_source_first_wins(self):
        """Several links from one chapter give one entry with the first text."""
        graph = build_backlink_graph(
            [_link("a.md", "b.md", "first"), _link("a.md", "b.md", "second")]
        )

        assert len(graph["b.md"]) == 1
        assert graph["b.md"][0].text == "first"

    def test_discovery_order_kept(self):
        """Entries follow the order links were fed in, not sorted order."""
        graph = build_backlink_graph(
            [_link("z.md", "t.md"), _link("a.md", "t.md"), _link("m.md", "t.md")]
        )

        assert graph.sources("t.md") == ["z.md", "a.md", "m.md"]

    def test_empty_text_falls_back_to_title(self):
        graph = build_backlink_graph([_link("a.md", "b.md", "")], titles={"a.md": "Chapter A"})

        assert graph["b.md"][0].text == "Chapter A"

    def test_entry_equality_ignores_text(self):
        assert BacklinkEntry("a.md", "one") == BacklinkEntry("a.md", "two")
        assert BacklinkEntry("a.md", "one") != BacklinkEntry("b.md", "one")

    def test_graph_is_read_only(self):
        graph = build_backlink_graph([_link("a.md", "b.md")])

        with pytest.raises(TypeError):
            graph._entries["c.md"] = ()  # type: ignore[index]

    def test_empty_lists_are_not_keys(self):
        graph = BacklinkGraph({"a.md": [], "b.md": [BacklinkEntry("a.md", "x")]})

        assert list(graph) == ["b.md"]
        assert graph.sources("a.md") == []


# =============================================================================
# TestRenderBacklinksSection
# =============================================================================


class TestRenderBacklinksSection:
    """Tests for render_backlinks_section."""

    def test_format(self):
        """A rule, then a quoted heading and one bullet per entry."""
        section = render_backlinks_section(
            "b/x.md",
            [BacklinkEntry("index.md", "x"), BacklinkEntry("b/y.md", "why")],
        )

        assert section == (
            "\n\n---\n\n"
            "> #### Backlinks\n"
            ">\n"
            "> - [x](../index.md)\n"
            "> - [why](y.md)\n"
        )

    def test_escapes_brackets_in_text(self):
        section = render_backlinks_section("a.md", [BacklinkEntry("b.md", "see [1]")])

        assert "> - [see \\[1\\]](b.md)" in section

    def test_text_stays_literal(self):
        """Characters that would start inline markup are escaped."""
        text = "<b> *x* _y_ ![i](j) `c` &amp; [1]"
        section = render_backlinks_section("a.md", [BacklinkEntry("b.md", text)])

        links = list(extract_links(section))

        assert [(link.text, link.target) for link in links] == [(text, "b.md")]

    def test_wraps_paths_with_spaces(self):
        section = render_backlinks_section("a.md", [BacklinkEntry("my notes.md", "notes")])

        assert "> - [notes](<my notes.md>)" in section


# =============================================================================
# TestInjectBacklinks
# =============================================================================


class TestInjectBacklinks:
    """Tests for inject_backlinks."""

    def test_appends_only_where_needed(self):
        book = make_book({"a.md": "Alpha", "b.md": "Beta"})
        chapters = walk_chapters(book)
        graph = build_backlink_graph([_link("a.md", "b.md", "beta")])

        injected = inject_backlinks(chapters, graph)

        assert injected == 1
        assert chapters[0].content == "Alpha"
        assert chapters[1].content.startswith("Beta\n\n---\n")
        assert chapters[1].content.endswith("> - [beta](a.md)\n")

    def test_writes_through_to_book(self):
        """Edits land in the host chapter objects."""
        book = make_book({"a.md": "Alpha", "b.md": "Beta"})
        chapters = walk_chapters(book)

        inject_backlinks(chapters, build_backlink_graph([_link("a.md", "b.md")]))

        assert "#### Backlinks" in book.sections[1].chapter.content

    def test_empty_graph_changes_nothing(self):
        book = make_book({"a.md": "Alpha\n", "b.md": "Beta"})
        chapters = walk_chapters(book)

        assert inject_backlinks(chapters, BacklinkGraph()) == 0
        assert [c.content for c in chapters] == ["Alpha\n", "Beta"]


# =============================================================================
# TestBlockCloser
# =============================================================================


class TestBlockCloser:
    """Tests for block_closer."""

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("```rust\nfn main() {}\n", "```"),
            ("```rust\nfn main() {}", "\n```"),
            ("````\n```\n", "````"),
            ("~~~\ncode\n", "~~~"),
            ("<!-- todo\n", "-->"),
            ("<![CDATA[ data\n", "]]>"),
            ("<!DOCTYPE html\n", ">"),
            ("<STYLE>\np {}\n", "</style>"),
        ],
    )
    def test_open_block_is_closed(self, content: str, expected: str):
        assert block_closer(content) == expected

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "plain text",
            "```\ncode\n```",
            "   ```\ncode\n  ```   \n",
            "<!-- a -->\n",
            "<pre>\nx\n</pre>\n",
            "<div>\nopen div\n",
            "- ```\n  in a list\n",
            "```\ncode\n```\n\nafter",
        ],
    )
    def test_nothing_to_close(self, content: str):
        assert block_closer(content) == ""
