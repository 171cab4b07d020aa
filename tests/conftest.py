"""Shared test fixtures for the mdbook-backlinks test suite.

Design:
- chapter()/book_json() build the JSON mdBook sends, so tests exercise the
  same decoding path the real preprocessor uses
- make_book() builds a Book from a {source_path: content} mapping
- runner: CliRunner for CLI tests
"""

import json
import logging
from typing import Any

import pytest
from click.testing import CliRunner

from mdbook_backlinks.book import walk_chapters
from mdbook_backlinks.models import Book

# ─────────────────────────────────────────────────────────────────────────────
# Book builders
# ─────────────────────────────────────────────────────────────────────────────


def chapter(
    name: str,
    source_path: str | None,
    content: str = "",
    sub_items: list[Any] | None = None,
) -> dict[str, Any]:
    """One {"Chapter": {...}} item as mdBook serializes it."""
    return {
        "Chapter": {
            "name": name,
            "content": content,
            "number": None,
            "sub_items": sub_items or [],
            "path": source_path,
            "source_path": source_path,
            "parent_names": [],
        }
    }


def book_json(*items: Any) -> dict[str, Any]:
    """A book in the mdBook 0.4 shape."""
    return {"sections": list(items), "__non_exhaustive": None}


def context_json(version: str = "0.4.40", **preprocessor_options: Any) -> dict[str, Any]:
    table: dict[str, Any] = {"command": "mdbook-backlinks"}
    table.update(preprocessor_options)
    return {
        "root": "/tmp/book",
        "config": {
            "book": {"title": "Test", "src": "src"},
            "preprocessor": {"backlinks": table},
        },
        "renderer": "html",
        "mdbook_version": version,
    }


def make_book(files: dict[str, str]) -> Book:
    """Build a flat book with one top-level chapter per file, in dict order."""
    items = [chapter(path.rsplit("/", 1)[-1], path, content) for path, content in files.items()]
    return Book.model_validate(book_json(*items))


def chapter_contents(book: Book) -> dict[str, str]:
    return {record.identifier: record.content for record in walk_chapters(book)}


def stdin_payload(book: dict[str, Any], context: dict[str, Any] | None = None) -> str:
    return json.dumps([context or context_json(), book])


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with stdout and stderr kept apart."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers so each CLI invocation logs to its own stderr."""
    logger = logging.getLogger("mdbook_backlinks")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def scenario_book() -> Book:
    """index.md links down into b/, b/y.md links back up."""
    return make_book(
        {
            "index.md": "see [x](b/x.md)",
            "b/x.md": "root doc",
            "b/y.md": "[back](../index.md)",
        }
    )
