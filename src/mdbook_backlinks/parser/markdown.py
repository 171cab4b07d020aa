"""Markdown tokenization shared by the link extractor."""

from __future__ import annotations

from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.token import Token


class ParseError(Exception):
    """Raised when a chapter's markdown cannot be tokenized."""

    def __init__(self, identifier: str, message: str) -> None:
        self.identifier = identifier
        self.message = message
        super().__init__(f"{identifier}: {message}")


@lru_cache(maxsize=1)
def _get_parser() -> MarkdownIt:
    # CommonMark plus the extensions mdBook turns on that can contain links
    md = MarkdownIt("commonmark")
    md.enable(["table", "strikethrough"])
    return md


def tokenize(content: str, identifier: str = "<string>") -> list[Token]:
    """Tokenize markdown content.

    Each call uses a fresh environment, so reference definitions never leak
    from one chapter into another.

    Args:
        content: Markdown source.
        identifier: Chapter identifier, used in error messages.

    Returns:
        Block-level tokens; inline content is in each token's ``children``.

    Raises:
        ParseError: If markdown-it fails on the input.
    """
    try:
        return _get_parser().parse(content, {})
    except Exception as e:
        raise ParseError(identifier, f"Failed to tokenize markdown: {e}") from e
