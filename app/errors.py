"""Exception types raised by the catalog engine and the Kodik client."""

from __future__ import annotations

from enum import Enum
from typing import Any, Sequence


class CatalogError(Exception):
    """Base class for catalog failures."""


class DecodeFailure(str, Enum):
    MISSING_IDENTIFIER = "missing_identifier"


class DecodeError(CatalogError):
    """Raised when a raw upstream record cannot be turned into a record."""

    def __init__(self, reason: DecodeFailure, raw: Any = None) -> None:
        super().__init__(f"Cannot decode upstream record: {reason.value}")
        self.reason = reason
        self.raw = raw


class NotFoundError(CatalogError, LookupError):
    """Raised when an identifier is absent from every upstream lookup."""

    def __init__(self, identifier: str, examples: Sequence[str] = ()) -> None:
        self.identifier = identifier
        self.examples = list(examples)
        message = f"Material with id {identifier} not found"
        if self.examples:
            message = f"{message} (examples: {', '.join(self.examples)})"
        super().__init__(message)


class UpstreamError(CatalogError):
    """Network failure, non-2xx status or malformed payload from Kodik."""

    retryable = True

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeout(UpstreamError):
    """The upstream call did not complete within the configured timeout."""
