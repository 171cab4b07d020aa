"""Link extraction from chapter markdown.

Links are found by tokenizing with markdown-it rather than by pattern
matching, so code spans and code blocks are never scanned and reference-style
links are resolved against the chapter's own definitions.
"""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterator, Sequence

from markdown_it.token import Token

from ..models import RawLink
from .markdown import tokenize

_NEWLINE = re.compile(r"\n")
_WHITESPACE_RUN = re.compile(r"\s+")


def _line_starts(content: str) -> list[int]:
    return [0] + [m.end() for m in _NEWLINE.finditer(content)]


def _link_text(children: Sequence[Token]) -> str:
    """Flatten the tokens between link_open and link_close to plain text."""
    parts: list[str] = []
    for child in children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
    return _WHITESPACE_RUN.sub(" ", "".join(parts)).strip()


def _iter_inline_links(children: Sequence[Token]) -> Iterator[tuple[str, str]]:
    """Yield (text, href) for each link in an inline token's children."""
    href: str | None = None
    inner: list[Token] = []

    for child in children:
        if child.type == "link_open":
            href = str(child.attrGet("href") or "")
            inner = []
        elif child.type == "link_close":
            if href is not None:
                yield _link_text(inner), href
            href = None
        elif href is not None:
            inner.append(child)


def extract_links(content: str, source: str = "") -> Iterator[RawLink]:
    """Extract markdown links from a chapter.

    Recognizes inline links, reference-style links (full, collapsed and
    shortcut) and autolinks. Images, code spans and code blocks are ignored.
    Malformed link syntax is left alone.

    The result is a generator; call again to rescan.

    Args:
        content: Markdown content of the chapter.
        source: Identifier of the chapter, copied into each RawLink.

    Yields:
        RawLink per link, in document order.

    Raises:
        ParseError: If the markdown cannot be tokenized.
    """
    tokens = tokenize(content, source)
    starts = _line_starts(content)
    # Character offset -> byte offset is only needed for non-ASCII content
    is_ascii = content.isascii()

    for token in tokens:
        if token.type != "inline" or not token.children:
            continue

        if token.map:
            block_start = starts[min(token.map[0], len(starts) - 1)]
            block_end = starts[token.map[1]] if token.map[1] < len(starts) else len(content)
        else:
            block_start, block_end = 0, len(content)
        cursor = block_start

        for text, href in _iter_inline_links(token.children):
            position = block_start
            if text:
                needle = "[" + text
                found = content.find(needle, cursor, block_end)
                if found != -1:
                    position = found
                    cursor = found + len(needle)

            offset = position if is_ascii else len(content[:position].encode("utf-8"))
            yield RawLink(source=source, text=text, target=href, offset=offset)


def line_of_offset(content: str, offset: int) -> int:
    """Return the 1-based line number containing a RawLink byte offset."""
    data = content.encode("utf-8")
    starts = [0] + [m.end() for m in re.finditer(rb"\n", data)]
    return bisect.bisect_right(starts, offset)
