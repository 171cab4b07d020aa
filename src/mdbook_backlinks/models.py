"""Models for the mdBook book structure and the backlink pipeline.

The pydantic models mirror the JSON mdBook sends to preprocessors. Every
model allows extra fields so that whatever the host sends comes back out
unchanged; only ``Chapter.content`` is ever modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field

_HOST_MODEL_CONFIG = ConfigDict(extra="allow", populate_by_name=True)


# ─────────────────────────────────────────────────────────────────────────────
# Host models
# ─────────────────────────────────────────────────────────────────────────────


class Chapter(BaseModel):
    """A chapter as serialized by mdBook."""

    model_config = _HOST_MODEL_CONFIG

    name: str
    content: str = ""
    number: list[int] | None = None
    sub_items: list[BookItem] = Field(default_factory=list)
    path: str | None = None  # Rendered path, None for draft chapters
    source_path: str | None = None  # Source file relative to src/, None for drafts
    parent_names: list[str] = Field(default_factory=list)


class ChapterItem(BaseModel):
    """``{"Chapter": {...}}``"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    chapter: Chapter = Field(alias="Chapter")


class PartTitleItem(BaseModel):
    """``{"PartTitle": "..."}``"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    part_title: str = Field(alias="PartTitle")


# The bare string "Separator" needs no model of its own.
BookItem = Union[ChapterItem, PartTitleItem, Literal["Separator"]]


class Book(BaseModel):
    """The book passed to preprocessors.

    mdBook 0.4 sends the top-level items as ``sections``; 0.5 renamed the key
    to ``items``. Whichever one arrives is the one written back.
    """

    model_config = _HOST_MODEL_CONFIG

    sections: list[BookItem] | None = None
    items: list[BookItem] | None = None
    # mdBook 0.4 marks Book as non-exhaustive with a unit field that must be
    # sent back.
    non_exhaustive: None = Field(default=None, alias="__non_exhaustive")

    @property
    def top_level(self) -> list[BookItem]:
        if self.items is not None:
            return self.items
        return self.sections or []


class PreprocessorContext(BaseModel):
    """Context object sent alongside the book."""

    model_config = _HOST_MODEL_CONFIG

    root: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    renderer: str = ""
    mdbook_version: str = ""


Chapter.model_rebuild()
ChapterItem.model_rebuild()


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline records
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ChapterRecord:
    """One chapter in the flattened book.

    ``content`` reads and writes through to the host chapter so that edits
    made by the injector end up in the book that is sent back.
    """

    identifier: str  # Normalized source path, unique within the book
    chapter: Chapter = field(repr=False)

    @property
    def title(self) -> str:
        return self.chapter.name

    @property
    def content(self) -> str:
        return self.chapter.content

    @content.setter
    def content(self, value: str) -> None:
        self.chapter.content = value


class RawLink(NamedTuple):
    """A link as written in a chapter, before resolution."""

    source: str
    text: str
    target: str
    offset: int  # UTF-8 byte offset into the chapter content


@dataclass(frozen=True)
class Internal:
    """The link points at another chapter of this book."""

    target: str


@dataclass(frozen=True)
class External:
    """The link points outside the book (URL, dangling path, empty target)."""


ResolvedLink = Union[Internal, External]


@dataclass(frozen=True)
class BacklinkEntry:
    """One chapter linking to a target.

    Two entries are equal when they come from the same source chapter; the
    display text does not take part in comparisons.
    """

    source: str
    text: str = field(compare=False)
