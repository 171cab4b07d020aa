"""The backlinks preprocessor: scan every chapter, then inject.

mdBook runs the preprocessor with ``[context, book]`` as JSON on stdin and
expects the processed book as JSON on stdout.
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any

from pydantic import ValidationError

from .backlinks import BacklinkGraph, build_backlink_graph
from .book import walk_chapters
from .config import PREPROCESSOR_NAME, SUPPORTED_MDBOOK_SERIES, warn_unknown_options
from .errors import BookDecodeError
from .injector import inject_backlinks
from .models import Book, ChapterRecord, External, PreprocessorContext, RawLink, ResolvedLink
from .parser import ParseError, extract_links, resolve_link
from .parser.links import line_of_offset

log = logging.getLogger(__name__)


def _scan_chapters(chapters: list[ChapterRecord]) -> list[tuple[RawLink, ResolvedLink]]:
    """Extract and resolve the links of every chapter, in walk order."""
    known = {record.identifier for record in chapters}
    resolved: list[tuple[RawLink, ResolvedLink]] = []

    for record in chapters:
        try:
            links = list(extract_links(record.content, record.identifier))
        except ParseError as e:
            log.warning("Skipping links in %s: %s", e.identifier, e.message)
            continue

        for link in links:
            result = resolve_link(link, known)
            if isinstance(result, External):
                log.debug(
                    "%s:%d: not a chapter link: %s",
                    record.identifier,
                    line_of_offset(record.content, link.offset),
                    link.target,
                )
            resolved.append((link, result))

    return resolved


def collect_backlinks(chapters: list[ChapterRecord]) -> BacklinkGraph:
    """Phase one: build the backlink graph for the whole book."""
    titles = {record.identifier: record.title for record in chapters}
    return build_backlink_graph(_scan_chapters(chapters), titles)


def process_book(book: Book) -> Book:
    """Add backlink sections to every chapter that is linked from elsewhere.

    Args:
        book: The book sent by mdBook. It is modified in place.

    Returns:
        The same book, with only chapter contents changed.
    """
    chapters = walk_chapters(book)
    graph = collect_backlinks(chapters)
    injected = inject_backlinks(chapters, graph)
    log.info("Added backlinks to %d of %d chapters", injected, len(chapters))
    return book


def run(context: PreprocessorContext, book: Book) -> Book:
    """Run the preprocessor for one mdBook invocation."""
    warn_unknown_options(context)
    log.debug("Running %s preprocessor for renderer %r", PREPROCESSOR_NAME, context.renderer)
    return process_book(book)


def _parse_series(version: str) -> tuple[int, int] | None:
    parts = version.split(".")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def check_mdbook_version(version: str) -> bool:
    """Warn if the host is an mdBook release we were not written against.

    Returns:
        True when the version is a known series.
    """
    series = _parse_series(version)
    if series in SUPPORTED_MDBOOK_SERIES:
        return True

    supported = ", ".join(f"{major}.{minor}" for major, minor in SUPPORTED_MDBOOK_SERIES)
    log.warning(
        "The %s preprocessor supports mdbook %s, but is being called from version %s",
        PREPROCESSOR_NAME,
        supported,
        version or "<unknown>",
    )
    return False


def parse_input(raw: str) -> tuple[PreprocessorContext, Book]:
    """Decode the ``[context, book]`` pair sent by mdBook.

    Raises:
        BookDecodeError: If the input is not valid JSON of the expected shape.
    """
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BookDecodeError(f"Unable to parse the input: {e}") from e

    if not isinstance(payload, list) or len(payload) != 2:
        raise BookDecodeError("Expected a JSON array of [context, book]")

    try:
        context = PreprocessorContext.model_validate(payload[0])
        book = Book.model_validate(payload[1])
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        raise BookDecodeError(f"Invalid {e.title}:\n" + "\n".join(errors)) from e

    return context, book


def dump_book(book: Book) -> str:
    """Encode a book for mdBook, keeping exactly the fields it sent."""
    return book.model_dump_json(by_alias=True, exclude_unset=True)


def handle_preprocessing(stdin: IO[str], stdout: IO[str]) -> None:
    """Read ``[context, book]`` from stdin and write the processed book.

    Nothing is written to stdout if the input cannot be decoded.

    Raises:
        BookDecodeError: On malformed input.
    """
    context, book = parse_input(stdin.read())
    check_mdbook_version(context.mdbook_version)

    processed = run(context, book)
    stdout.write(dump_book(processed))
    stdout.flush()
