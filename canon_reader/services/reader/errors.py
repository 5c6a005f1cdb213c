""" Typed errors for the reader engine. """

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple


@dataclass(eq=False)
class ReaderError(Exception):
    """Base class for all reader-domain errors."""

    message: str
    ref: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)
    code: str = "reader_error"
    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:  # pragma: no cover - simple passthrough
        return self.message


@dataclass(eq=False)
class ParseError(ReaderError):
    """Malformed reference string; blocks navigation."""

    code: str = "reader.parse_error"
    status: HTTPStatus = HTTPStatus.BAD_REQUEST


@dataclass(eq=False)
class StructureMismatchError(ReaderError):
    """Ordinal depth does not match the book's declared structure."""

    code: str = "reader.structure_mismatch"
    status: HTTPStatus = HTTPStatus.BAD_REQUEST


@dataclass(eq=False)
class FetchError(ReaderError):
    """Storage or network failure; the loaded window stays intact."""

    code: str = "reader.fetch_failed"
    status: HTTPStatus = HTTPStatus.BAD_GATEWAY


@dataclass(eq=False)
class BoundaryNotFound(ReaderError):
    """No adjacent section or book exists. Never surfaced to the user."""

    code: str = "reader.boundary"
    status: HTTPStatus = HTTPStatus.NOT_FOUND


@dataclass(eq=False)
class StaleResponseDiscarded(ReaderError):
    """A response arrived for a window generation that no longer exists."""

    code: str = "reader.stale_response"
    status: HTTPStatus = HTTPStatus.CONFLICT


@dataclass(eq=False)
class ReaderConfigInvalid(ReaderError):
    code: str = "reader.config_invalid"
    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR


def to_http_payload(error: ReaderError) -> Tuple[int, Dict[str, Any]]:
    """Convert a reader error into an HTTP payload tuple."""

    status_code = int(error.status)
    body: Dict[str, Any] = {
        "error": {
            "code": error.code,
            "message": error.message,
            "ref": error.ref,
            "detail": error.detail or None,
        }
    }
    return status_code, body
