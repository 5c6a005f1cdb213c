"""Typed configuration for the reader engine."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator


class WindowConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_pages: PositiveInt = Field(default=5)


class LoaderConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cross_book_collections: list[str] = Field(default_factory=lambda: ["tanakh"])

    @field_validator("cross_book_collections")
    @classmethod
    def normalize_collections(cls, value: list[str]) -> list[str]:
        return [item.strip().lower() for item in value if item.strip()]


class SizingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_height: float = Field(default=60.0, gt=0)
    line_height_factor: float = Field(default=1.8, gt=0)
    padding: float = Field(default=80.0, ge=0)
    chars_per_line_stacked: PositiveInt = Field(default=70)
    chars_per_line_side_by_side: PositiveInt = Field(default=40)

    @model_validator(mode="after")
    def validate_columns(self) -> "SizingConfig":
        if self.chars_per_line_side_by_side > self.chars_per_line_stacked:
            raise ValueError("side_by_side columns cannot be wider than the stacked column")
        return self


class ListConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    overscan: int = Field(default=10, ge=0)
    viewport_height: float = Field(default=800.0, gt=0)
    viewport_width: float = Field(default=1024.0, gt=0)


class PrefetchConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    forward_threshold: float = Field(default=0.8, gt=0.0, lt=1.0)
    backward_threshold_px: float = Field(default=200.0, ge=0)


class ReaderConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    window: WindowConfig = Field(default_factory=WindowConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    sizing: SizingConfig = Field(default_factory=SizingConfig)
    virtual_list: ListConfig = Field(default_factory=ListConfig)
    prefetch: PrefetchConfig = Field(default_factory=PrefetchConfig)


def load_reader_config(raw: Mapping[str, Any] | None) -> ReaderConfig:
    """Load ``ReaderConfig`` from a raw mapping safely."""

    data = raw or {}
    return ReaderConfig.model_validate(data)


__all__ = [
    "ReaderConfig",
    "WindowConfig",
    "LoaderConfig",
    "SizingConfig",
    "ListConfig",
    "PrefetchConfig",
    "load_reader_config",
]
