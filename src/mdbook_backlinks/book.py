"""Flattening of the book's nested chapter structure."""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable, Iterator

from .models import Book, BookItem, ChapterItem, ChapterRecord

log = logging.getLogger(__name__)


def normalize_identifier(source_path: str) -> str:
    """Normalize a chapter source path to its identifier form.

    - Backslashes become forward slashes (mdBook on Windows)
    - ``.`` segments and leading ``./`` are removed

    Args:
        source_path: Source path as sent by the host.

    Returns:
        Canonical identifier, e.g. ``"guide/intro.md"``.
    """
    path = source_path.replace("\\", "/")
    return posixpath.normpath(path)


def _iter_items(items: Iterable[BookItem]) -> Iterator[ChapterRecord]:
    for item in items:
        if not isinstance(item, ChapterItem):
            # Separators and part titles carry no content
            continue

        chapter = item.chapter
        if chapter.source_path:
            yield ChapterRecord(identifier=normalize_identifier(chapter.source_path), chapter=chapter)
        else:
            log.debug("Skipping draft chapter %r", chapter.name)

        yield from _iter_items(chapter.sub_items)


def walk_chapters(book: Book) -> list[ChapterRecord]:
    """Flatten a book into its chapters in reading order.

    Parents come before their children. Draft chapters (no source file) are
    left out but their sub-chapters are still visited.

    Args:
        book: The book sent by mdBook.

    Returns:
        Chapter records, one per chapter backed by a source file.
    """
    return list(_iter_items(book.top_level))
