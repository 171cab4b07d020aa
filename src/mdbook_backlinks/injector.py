"""Rendering of backlink sections into chapter content."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from markdown_it.token import Token

from .backlinks import BacklinkGraph
from .config import BACKLINKS_HEADING, BACKLINKS_HEADING_LEVEL
from .models import BacklinkEntry, ChapterRecord
from .parser.markdown import ParseError, tokenize
from .parser.paths import format_link_destination, relative_link

log = logging.getLogger(__name__)

# ASCII punctuation that can start inline markup inside link text
_LINK_TEXT_SPECIALS = re.compile(r"([\\`*_<>\[\]!&])")

# HTML block openers that only end at an explicit closer, with that closer.
# Other HTML blocks end at a blank line.
_HTML_BLOCK_CLOSERS = (
    (re.compile(r"<!--"), "-->"),
    (re.compile(r"<\?"), "?>"),
    (re.compile(r"<!\[CDATA\["), "]]>"),
    (re.compile(r"<![A-Za-z]"), ">"),
    (re.compile(r"<(script|pre|style|textarea)(?=[\s>]|$)", re.IGNORECASE), None),
)


def _escape_link_text(text: str) -> str:
    return _LINK_TEXT_SPECIALS.sub(r"\\\1", text)


def _fence_closer(token: Token, lines: list[str]) -> str | None:
    markup = token.markup
    if not token.map or token.map[1] - token.map[0] < 2:
        return markup
    last = lines[token.map[1] - 1] if token.map[1] - 1 < len(lines) else ""
    closing = re.compile(rf" {{0,3}}{re.escape(markup[0])}{{{len(markup)},}}[ \t]*")
    if closing.fullmatch(last):
        return None
    return markup


def _html_block_closer(token: Token) -> str | None:
    source = token.content.lstrip(" ")
    for opener, closer in _HTML_BLOCK_CLOSERS:
        match = opener.match(source)
        if not match:
            continue
        if closer is None:
            closer = f"</{match.group(1).lower()}>"
        if closer.lower() in source[match.end():].lower():
            return None
        return closer
    return None


def block_closer(content: str, identifier: str = "<string>") -> str:
    """Text that closes a block left open at the end of a chapter.

    A fenced code block or an HTML block such as a comment may run to the end
    of the document; anything appended after it would be swallowed.

    Args:
        content: Chapter markdown.
        identifier: Chapter identifier, used in error messages.

    Returns:
        The closing line (with its leading newline), or "" when nothing is open.
    """
    try:
        tokens = tokenize(content, identifier)
    except ParseError as e:
        log.warning("Cannot check %s for open blocks: %s", e.identifier, e.message)
        return ""

    if not tokens or tokens[-1].level != 0:
        return ""

    last = tokens[-1]
    if last.type == "fence":
        closer = _fence_closer(last, content.splitlines())
    elif last.type == "html_block":
        closer = _html_block_closer(last)
    else:
        closer = None

    if not closer:
        return ""
    return ("" if content.endswith("\n") else "\n") + closer


def render_backlinks_section(target: str, entries: Sequence[BacklinkEntry]) -> str:
    """Render the backlinks block for one chapter.

    The block is a thematic break followed by a block quote holding the
    heading and one bullet per entry. Link paths are relative to the
    directory of ``target``.

    Args:
        target: Identifier of the chapter the block is written into.
        entries: Backlinks of that chapter, in display order.

    Returns:
        Markdown text, starting with the separating blank lines.
    """
    heading = "#" * BACKLINKS_HEADING_LEVEL
    lines = [
        "",
        "",
        "---",
        "",
        f"> {heading} {BACKLINKS_HEADING}",
        ">",
    ]
    for entry in entries:
        destination = format_link_destination(relative_link(entry.source, target))
        lines.append(f"> - [{_escape_link_text(entry.text)}]({destination})")

    return "\n".join(lines) + "\n"


def inject_backlinks(chapters: Iterable[ChapterRecord], graph: BacklinkGraph) -> int:
    """Append a backlinks block to every chapter that has backlinks.

    Chapters without backlinks are not touched. Call once per run.

    Args:
        chapters: Flattened chapters of the book.
        graph: Completed backlink graph.

    Returns:
        Number of chapters that received a block.
    """
    injected = 0
    for record in chapters:
        entries = graph.get(record.identifier)
        if not entries:
            continue
        record.content += block_closer(record.content, record.identifier)
        # The leading blank lines keep the rule from being read as a setext
        # heading underline.
        record.content += render_backlinks_section(record.identifier, entries)
        injected += 1
        log.debug("Added %d backlinks to %s", len(entries), record.identifier)
    return injected
