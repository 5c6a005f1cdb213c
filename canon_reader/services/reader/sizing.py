"""Height estimation for reader rows before they are measured."""

from __future__ import annotations

import math

from .config_schema import SizingConfig
from .display import DisplaySettings, LayoutMode
from .types import Segment


class SizeEstimator:
    """
    Estimates a segment's rendered height from text length and display settings.

    ``lines = ceil(chars / chars_per_line)`` and the height is
    ``max(min_height, lines * font_size * line_height_factor + padding)``.
    Side-by-side layout uses a narrower column, so the same text wraps onto
    more lines.
    """

    def __init__(self, config: SizingConfig | None = None) -> None:
        self._config = config or SizingConfig()

    @property
    def config(self) -> SizingConfig:
        return self._config

    def chars_per_line(self, layout_mode: LayoutMode) -> int:
        if layout_mode is LayoutMode.SIDE_BY_SIDE:
            return self._config.chars_per_line_side_by_side
        return self._config.chars_per_line_stacked

    def estimate(self, segment: Segment, settings: DisplaySettings) -> float:
        chars = len(segment.primary_text or "") + len(segment.secondary_text or "")
        lines = math.ceil(chars / self.chars_per_line(settings.layout_mode))
        height = lines * settings.font_size * self._config.line_height_factor + self._config.padding
        return max(self._config.min_height, height)
