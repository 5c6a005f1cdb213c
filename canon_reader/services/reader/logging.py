"""Structured logging helpers for the reader engine."""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping, Optional

from .metrics import (
    record_page_failed,
    record_page_loaded,
    record_sizes_reset,
    record_stale_discarded,
    record_window_changed,
)

_LOGGER = logging.getLogger("canon_reader.reader")


def _emit(level: int, event: str, *, extra: Optional[Mapping[str, Any]] = None) -> None:
    payload: MutableMapping[str, Any] = {"event": event, "source": "reader"}
    if extra:
        payload.update(extra)
    _LOGGER.log(level, event, extra=payload)


def log_page_loaded(section_prefix: str, edge: str, segments: int, duration_ms: float) -> None:
    record_page_loaded(edge=edge, segments=segments, duration_ms=duration_ms)
    _emit(
        logging.DEBUG,
        "reader.page.loaded",
        extra={
            "ref": section_prefix,
            "edge": edge,
            "segments": segments,
            "duration_ms": duration_ms,
        },
    )


def log_fetch_failed(section_prefix: str, edge: str, error: Exception) -> None:
    record_page_failed(edge=edge)
    _emit(
        logging.WARNING,
        "reader.fetch.failed",
        extra={"ref": section_prefix, "edge": edge, "error": str(error)},
    )


def log_window_changed(kind: str, generation: int, segments: int, pages: int) -> None:
    record_window_changed(segments=segments)
    _emit(
        logging.DEBUG,
        "reader.window.changed",
        extra={"kind": kind, "generation": generation, "segments": segments, "pages": pages},
    )


def log_stale_discarded(section_prefix: str, edge: str, generation: int, current: int) -> None:
    record_stale_discarded(edge=edge)
    _emit(
        logging.DEBUG,
        "reader.window.stale_discarded",
        extra={
            "ref": section_prefix,
            "edge": edge,
            "generation": generation,
            "current_generation": current,
        },
    )


def log_sizes_reset(reason: str, from_index: int) -> None:
    record_sizes_reset(reason=reason)
    _emit(logging.DEBUG, "reader.sizes.reset", extra={"reason": reason, "from_index": from_index})
