"""Headless variable-size virtual list.

Keeps item heights and offsets for the loaded window, works out which rows
are visible for a scroll offset, and materializes only those rows plus an
overscan margin. Offsets are computed lazily up to the last item that has
been asked for, the way variable-size list widgets do it in the browser.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional, Protocol, Sequence, Tuple

from .config_schema import ListConfig
from .display import DisplaySettings, ReaderSettings
from .logging import log_sizes_reset
from .sizing import SizeEstimator
from .types import Edge, Segment, StructuredReference

logger = logging.getLogger(__name__)

Align = Literal["auto", "smart", "center", "start", "end"]
_ALIGNMENTS = ("auto", "smart", "center", "start", "end")


@dataclass(frozen=True)
class ViewportState:
    scroll_offset: float
    visible_start_index: int
    visible_stop_index: int
    overscan_start_index: int
    overscan_stop_index: int
    scroll_direction: Edge = Edge.FORWARD


@dataclass(frozen=True)
class RenderedItem:
    index: int
    segment: Segment
    offset: float
    size: float


@dataclass(frozen=True)
class Anchor:
    """Top visible row plus how far the viewport has scrolled past its top edge."""

    ref: StructuredReference
    delta: float


class ListHandle(Protocol):
    """Imperative control surface handed to the UI chrome."""

    def scroll_to(self, offset: float) -> None: ...

    def scroll_to_item(self, index: int, align: Align = "auto") -> None: ...

    def reset_after_index(self, index: int, should_force_update: bool = True) -> None: ...


class _ListHandle:
    def __init__(self, owner: "VirtualList") -> None:
        self._owner = owner

    def scroll_to(self, offset: float) -> None:
        self._owner.scroll_to(offset)

    def scroll_to_item(self, index: int, align: Align = "auto") -> None:
        self._owner.scroll_to_item(index, align)

    def reset_after_index(self, index: int, should_force_update: bool = True) -> None:
        self._owner.reset_after_index(index, should_force_update)


VisibleRefListener = Callable[[StructuredReference], None]


class VirtualList:
    def __init__(
        self,
        estimator: SizeEstimator,
        settings: ReaderSettings,
        config: ListConfig | None = None,
    ) -> None:
        self._estimator = estimator
        self._settings = settings
        self._config = config or ListConfig()
        self._items: Tuple[Segment, ...] = ()
        self._sizes: Dict[int, float] = {}
        self._offsets: List[float] = []
        self._height = self._config.viewport_height
        self._width = self._config.viewport_width
        self._scroll_offset = 0.0
        self._direction = Edge.FORWARD
        self._viewport = ViewportState(0.0, 0, -1, 0, -1)
        self._last_visible_ref: Optional[StructuredReference] = None
        self._listeners: List[VisibleRefListener] = []
        self._handle = _ListHandle(self)
        self._unsubscribe_settings = settings.subscribe(self._on_settings_changed)

    # ------------------------------------------------------------ properties -
    @property
    def items(self) -> Tuple[Segment, ...]:
        return self._items

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def handle(self) -> ListHandle:
        return self._handle

    @property
    def scroll_offset(self) -> float:
        return self._scroll_offset

    @property
    def viewport_height(self) -> float:
        return self._height

    @property
    def viewport(self) -> ViewportState:
        return self._viewport

    @property
    def total_size(self) -> float:
        if not self._items:
            return 0.0
        last = len(self._items) - 1
        return self.get_item_offset(last) + self.get_item_size(last)

    def close(self) -> None:
        self._unsubscribe_settings()

    # ---------------------------------------------------------------- sizing -
    def get_item_size(self, index: int) -> float:
        size = self._sizes.get(index)
        if size is None:
            size = self._estimator.estimate(self._items[index], self._settings.current)
            self._sizes[index] = size
        return size

    def set_item_size(self, index: int, measured: float) -> None:
        """Feed back a rendered row's real height."""

        if measured <= 0 or self._sizes.get(index) == measured:
            return
        self._sizes[index] = measured
        del self._offsets[index + 1:]
        self._update_viewport()

    def get_item_offset(self, index: int) -> float:
        if not self._offsets and self._items:
            self._offsets.append(0.0)
        while len(self._offsets) <= index:
            previous = len(self._offsets) - 1
            self._offsets.append(self._offsets[previous] + self.get_item_size(previous))
        return self._offsets[index]

    def reset_after_index(self, index: int, should_force_update: bool = True, *, reason: str = "manual") -> None:
        """Drop cached sizes and offsets for ``index`` and everything after it."""

        index = max(0, index)
        for key in [key for key in self._sizes if key >= index]:
            del self._sizes[key]
        del self._offsets[index + 1 if index > 0 else 0:]
        log_sizes_reset(reason, index)
        if should_force_update:
            self._update_viewport()

    def set_items(self, items: Sequence[Segment]) -> None:
        """Swap the item sequence; any change of identity clears every cached size."""

        items = tuple(items)
        if items == self._items:
            return
        self._items = items
        self.reset_after_index(0, should_force_update=False, reason="items")
        self.scroll_to(self._scroll_offset)

    def resize(self, height: float, width: Optional[float] = None) -> None:
        self._height = max(0.0, height)
        if width is not None and width != self._width:
            self._width = width
            self.reset_after_index(0, should_force_update=False, reason="width")
        self.scroll_to(self._scroll_offset)

    def _on_settings_changed(self, previous: DisplaySettings, current: DisplaySettings) -> None:
        self.reset_after_index(0, reason="display")

    # ------------------------------------------------------------- scrolling -
    def scroll_to(self, offset: float) -> ViewportState:
        max_offset = max(0.0, self.total_size - self._height)
        offset = min(max(0.0, offset), max_offset)
        if offset != self._scroll_offset:
            self._direction = Edge.FORWARD if offset > self._scroll_offset else Edge.BACKWARD
        self._scroll_offset = offset
        return self._update_viewport()

    def scroll_to_item(self, index: int, align: Align = "auto") -> ViewportState:
        if align not in _ALIGNMENTS:
            raise ValueError(f"Unknown alignment '{align}'")
        if not self._items:
            return self._viewport
        index = min(max(0, index), len(self._items) - 1)
        return self.scroll_to(self._offset_for_index(index, align))

    def _offset_for_index(self, index: int, align: Align) -> float:
        item_offset = self.get_item_offset(index)
        item_size = self.get_item_size(index)
        height = self._height
        max_offset = max(0.0, min(self.total_size - height, item_offset))
        min_offset = max(0.0, item_offset - height + item_size)
        scroll_offset = self._scroll_offset

        if align == "smart":
            if min_offset - height <= scroll_offset <= max_offset + height:
                align = "auto"
            else:
                align = "center"

        if align == "start":
            return max_offset
        if align == "end":
            return min_offset
        if align == "center":
            middle = round(min_offset + (max_offset - min_offset) / 2)
            if middle < height / 2:
                return 0.0
            return float(middle)
        if min_offset <= scroll_offset <= max_offset:
            return scroll_offset
        if scroll_offset < min_offset:
            return min_offset
        return max_offset

    def index_at_offset(self, offset: float) -> int:
        """Index of the row covering ``offset``."""

        if not self._items:
            return 0
        self.get_item_offset(len(self._items) - 1)
        position = bisect.bisect_right(self._offsets, offset) - 1
        return min(max(0, position), len(self._items) - 1)

    def _update_viewport(self) -> ViewportState:
        count = len(self._items)
        if count == 0:
            self._viewport = ViewportState(self._scroll_offset, 0, -1, 0, -1, self._direction)
            return self._viewport

        start = self.index_at_offset(self._scroll_offset)
        bottom = self._scroll_offset + self._height
        stop = start
        while stop < count - 1 and self.get_item_offset(stop) + self.get_item_size(stop) < bottom:
            stop += 1

        overscan = self._config.overscan
        self._viewport = ViewportState(
            scroll_offset=self._scroll_offset,
            visible_start_index=start,
            visible_stop_index=stop,
            overscan_start_index=max(0, start - overscan),
            overscan_stop_index=min(count - 1, stop + overscan),
            scroll_direction=self._direction,
        )
        return self._viewport

    # ------------------------------------------------------------- rendering -
    def render(self) -> List[RenderedItem]:
        """Materialize the visible rows plus overscan."""

        viewport = self._viewport
        rendered = [
            RenderedItem(
                index=index,
                segment=self._items[index],
                offset=self.get_item_offset(index),
                size=self.get_item_size(index),
            )
            for index in range(viewport.overscan_start_index, viewport.overscan_stop_index + 1)
        ]
        self.on_items_rendered(viewport)
        return rendered

    def subscribe_visible_ref(self, listener: VisibleRefListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def on_items_rendered(self, viewport: ViewportState) -> None:
        if viewport.visible_stop_index < viewport.visible_start_index:
            return
        ref = self._items[viewport.visible_start_index].ref
        if ref == self._last_visible_ref:
            return
        self._last_visible_ref = ref
        for listener in list(self._listeners):
            listener(ref)

    # --------------------------------------------------------------- anchors -
    def index_of(self, ref: StructuredReference) -> Optional[int]:
        for index, segment in enumerate(self._items):
            if segment.ref == ref:
                return index
        return None

    def capture_anchor(self) -> Optional[Anchor]:
        if not self._items:
            return None
        index = self._viewport.visible_start_index
        return Anchor(ref=self._items[index].ref, delta=self._scroll_offset - self.get_item_offset(index))

    def restore_anchor(self, anchor: Anchor) -> bool:
        """Scroll so ``anchor.ref`` sits where it was when captured."""

        index = self.index_of(anchor.ref)
        if index is None:
            logger.debug("Anchor row left the window", extra={"ref": anchor.ref.serialize()})
            return False
        self.scroll_to(self.get_item_offset(index) + anchor.delta)
        return True
