"""Display settings for the reader and their change notifications."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, List

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Theme(str, Enum):
    PAPER = "paper"
    SEPIA = "sepia"
    DARK = "dark"


class LayoutMode(str, Enum):
    STACKED = "stacked"
    SIDE_BY_SIDE = "side_by_side"


class DisplaySettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    theme: Theme = Theme.PAPER
    layout_mode: LayoutMode = LayoutMode.STACKED
    font_size: int = Field(default=16, ge=10, le=48)


SettingsListener = Callable[[DisplaySettings, DisplaySettings], None]


class ReaderSettings:
    """
    Holds the current :class:`DisplaySettings` and notifies subscribers.

    Listeners receive ``(previous, current)`` and are called only when a value
    actually changed.
    """

    def __init__(self, initial: DisplaySettings | None = None) -> None:
        self._current = initial or DisplaySettings()
        self._listeners: List[SettingsListener] = []

    @property
    def current(self) -> DisplaySettings:
        return self._current

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def update(self, **changes: Any) -> DisplaySettings:
        previous = self._current
        updated = DisplaySettings.model_validate({**previous.model_dump(), **changes})
        if updated == previous:
            return previous
        self._current = updated
        logger.debug(
            "Display settings changed",
            extra={"changes": {key: value for key, value in changes.items() if getattr(previous, key) != value}},
        )
        for listener in list(self._listeners):
            listener(previous, updated)
        return updated
