"""Error types for mdbook-backlinks."""

from __future__ import annotations

import json
from typing import Any


class BacklinksError(Exception):
    """Base class for errors raised by this package."""

    code = "BACKLINKS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_json(self) -> str:
        return format_error_json(self.code, self.message, self.details)


class BookDecodeError(BacklinksError):
    """Raised when the host sends input we cannot decode.

    No partial output is safe to return in this case.
    """

    code = "BOOK_DECODE_ERROR"


def format_error_json(code: str, message: str, details: dict | None = None) -> str:
    payload: dict[str, Any] = {"error": code, "message": message}
    if details:
        payload["details"] = details
    return json.dumps(payload)
