"""Resolution of link targets to chapter identifiers."""

from __future__ import annotations

import posixpath
from collections.abc import Container
from urllib.parse import unquote, urlsplit

from ..models import External, Internal, RawLink, ResolvedLink

_NEEDS_ANGLE_BRACKETS = frozenset(" ()")


def _strip_target(target: str) -> str | None:
    """Reduce a link target to its path part.

    Returns None for absolute URLs and network-path references.
    """
    parts = urlsplit(target.strip())
    if parts.scheme or parts.netloc:
        return None
    return unquote(parts.path)


def resolve_link(link: RawLink, known: Container[str]) -> ResolvedLink:
    """Classify a link as pointing at a chapter of the book or not.

    The fragment and query are dropped, the remaining path is taken relative
    to the directory of the linking chapter and normalized.

    Args:
        link: Link extracted from the chapter ``link.source``.
        known: Identifiers of every chapter in the book.

    Returns:
        Internal(identifier) on a match, External otherwise.
    """
    path = _strip_target(link.target)
    if not path or path.startswith("/"):
        return External()

    base = posixpath.dirname(link.source)
    resolved = posixpath.normpath(posixpath.join(base, path))
    if resolved == ".." or resolved.startswith("../"):
        return External()

    if resolved in known:
        return Internal(resolved)
    return External()


def relative_link(source: str, target: str) -> str:
    """Path that leads from chapter ``target`` back to chapter ``source``.

    This is the inverse of resolve_link: the result, resolved from
    ``target``'s directory, gives ``source`` again.

    Args:
        source: Identifier of the linking chapter.
        target: Identifier of the chapter the link will be written into.

    Returns:
        A relative path using forward slashes.
    """
    start = posixpath.dirname(target) or "."
    return posixpath.relpath(source, start)


def format_link_destination(path: str) -> str:
    """Quote a path for use as an inline link destination."""
    if any(ch in _NEEDS_ANGLE_BRACKETS for ch in path):
        return f"<{path}>"
    return path
