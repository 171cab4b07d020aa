"""Configuration for mdbook-backlinks.

The preprocessor has no options of its own; this module holds the constants
that shape its output and the check of its table in book.toml.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import PreprocessorContext

log = logging.getLogger(__name__)

# Name under which the preprocessor is registered in book.toml
# ([preprocessor.backlinks]).
PREPROCESSOR_NAME = "backlinks"

# Injected section
BACKLINKS_HEADING = "Backlinks"
BACKLINKS_HEADING_LEVEL = 4

# mdBook release series whose book JSON we know how to read.
SUPPORTED_MDBOOK_SERIES = ((0, 4), (0, 5))

# Keys mdBook itself understands in every [preprocessor.*] table.
STANDARD_PREPROCESSOR_KEYS = frozenset({"command", "renderers", "before", "after", "optional"})

LOG_LEVEL_ENV = "MDBOOK_BACKLINKS_LOG_LEVEL"


def warn_unknown_options(context: PreprocessorContext) -> list[str]:
    """Warn about keys in [preprocessor.backlinks] that nothing reads.

    The preprocessor has no options; only the keys mdBook itself interprets
    are expected in its table.

    Args:
        context: Context object sent by mdBook.

    Returns:
        The unknown keys, sorted.
    """
    table: Any = context.config.get("preprocessor", {})
    if isinstance(table, dict):
        table = table.get(PREPROCESSOR_NAME, {})
    if not isinstance(table, dict):
        table = {}

    unknown = sorted(key for key in table if key not in STANDARD_PREPROCESSOR_KEYS)
    for key in unknown:
        log.warning("Ignoring unknown option preprocessor.%s.%s", PREPROCESSOR_NAME, key)
    return unknown
