"""Utilities for loading reader configuration from mappings or TOML files."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from .config_schema import ReaderConfig, load_reader_config
from .errors import ReaderConfigInvalid


def _raise_invalid(error: ValidationError) -> ReaderConfigInvalid:
    return ReaderConfigInvalid(
        "Invalid reader configuration",
        detail={"errors": error.errors(include_url=False), "type": "validation_error"},
    )


def parse_reader_config(raw: Mapping[str, Any] | None) -> ReaderConfig:
    """Validate a raw mapping into ``ReaderConfig``."""

    try:
        return load_reader_config(raw)
    except ValidationError as exc:
        raise _raise_invalid(exc) from exc


def read_reader_config(path: str | Path | None) -> ReaderConfig:
    """Read ``ReaderConfig`` from a TOML file; defaults when ``path`` is empty.

    The file may hold the sections at the top level or under a ``[reader]`` table.
    """

    if not path:
        return ReaderConfig()

    file_path = Path(path)
    try:
        with file_path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ReaderConfigInvalid(
            f"Reader config file not found: {file_path}",
            detail={"path": str(file_path), "type": "missing_file"},
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ReaderConfigInvalid(
            f"Reader config file is not valid TOML: {file_path}",
            detail={"path": str(file_path), "type": "decode_error", "error": str(exc)},
        ) from exc

    section = document.get("reader", document)
    return parse_reader_config(section)


__all__ = ["parse_reader_config", "read_reader_config"]
