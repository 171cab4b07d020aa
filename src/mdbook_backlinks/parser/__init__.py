"""Markdown link extraction and resolution."""

from .links import extract_links
from .markdown import ParseError, tokenize
from .paths import relative_link, resolve_link

__all__ = [
    "extract_links",
    "ParseError",
    "tokenize",
    "relative_link",
    "resolve_link",
]
