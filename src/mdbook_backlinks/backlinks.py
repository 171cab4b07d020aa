"""Backlink graph: the inverse of the chapter link relation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .models import BacklinkEntry, Internal, RawLink, ResolvedLink

log = logging.getLogger(__name__)


class BacklinkGraph(Mapping[str, tuple[BacklinkEntry, ...]]):
    """Read-only mapping from chapter identifier to the chapters linking to it.

    Only chapters with at least one backlink are keys. Entries are in the
    order they were discovered.
    """

    def __init__(self, entries: Mapping[str, Iterable[BacklinkEntry]] | None = None) -> None:
        frozen = {target: tuple(items) for target, items in (entries or {}).items() if items}
        self._entries = MappingProxyType(frozen)

    def __getitem__(self, target: str) -> tuple[BacklinkEntry, ...]:
        return self._entries[target]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BacklinkGraph({dict(self._entries)!r})"

    def sources(self, target: str) -> list[str]:
        """Identifiers of the chapters linking to target."""
        return [entry.source for entry in self._entries.get(target, ())]


def build_backlink_graph(
    links: Iterable[tuple[RawLink, ResolvedLink]],
    titles: Mapping[str, str] | None = None,
) -> BacklinkGraph:
    """Invert resolved links into a backlink graph.

    Links must arrive in chapter walk order, then extraction order within a
    chapter; that order is kept in the result.

    - External links are dropped
    - A chapter linking to itself is not a backlink
    - Each source appears at most once per target; its first link wins

    Args:
        links: (raw link, resolution) pairs for the whole book.
        titles: Chapter titles by identifier, used as the display text when a
            link has none.

    Returns:
        The completed graph.
    """
    titles = titles or {}
    backlinks: dict[str, list[BacklinkEntry]] = {}
    seen: set[tuple[str, str]] = set()

    for raw, resolved in links:
        if not isinstance(resolved, Internal):
            continue

        target = resolved.target
        if target == raw.source:
            continue

        key = (target, raw.source)
        if key in seen:
            continue
        seen.add(key)

        text = raw.text or titles.get(raw.source, raw.source)
        backlinks.setdefault(target, []).append(BacklinkEntry(source=raw.source, text=text))

    log.debug("Built backlink graph with %d targets", len(backlinks))
    return BacklinkGraph(backlinks)
