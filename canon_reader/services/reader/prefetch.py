"""Scroll-driven prefetch and scroll anchoring."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from .config_schema import PrefetchConfig
from .errors import ReaderError
from .types import Edge, FetchStatus, StructuredReference
from .virtual_list import VirtualList
from .window import WindowChange, WindowController

logger = logging.getLogger(__name__)

VisibleRefCallback = Callable[[StructuredReference], None]
BoundaryCallback = Callable[[Edge], None]
EdgeErrorCallback = Callable[[Edge, ReaderError], None]


class PrefetchController:
    """
    Watches the scroll position and asks the window for more pages.

    Forward loads start once the scroll offset passes ``forward_threshold`` of
    the total height, or the viewport bottom reaches the end of the loaded
    rows; backward loads start within ``backward_threshold_px`` of the
    top. Whenever rows are inserted or removed above the viewport, the row that
    was at the top of the screen is put back at the same screen position.
    """

    def __init__(
        self,
        window: WindowController,
        virtual_list: VirtualList,
        config: PrefetchConfig | None = None,
        *,
        on_visible_ref_changed: Optional[VisibleRefCallback] = None,
        on_boundary_reached: Optional[BoundaryCallback] = None,
        on_edge_error: Optional[EdgeErrorCallback] = None,
    ) -> None:
        self._window = window
        self._list = virtual_list
        self._config = config or PrefetchConfig()
        self._on_boundary_reached = on_boundary_reached
        self._on_edge_error = on_edge_error
        self._pending: Dict[Edge, asyncio.Task] = {}
        self._unsubscribers: List[Callable[[], None]] = [window.subscribe(self._on_window_change)]
        if on_visible_ref_changed is not None:
            self._unsubscribers.append(virtual_list.subscribe_visible_ref(on_visible_ref_changed))
        self._list.set_items(window.segments)

    @property
    def pending(self) -> Dict[Edge, asyncio.Task]:
        return {edge: task for edge, task in self._pending.items() if not task.done()}

    def on_scroll(self, offset: float) -> List[Edge]:
        """Handle a scroll event; returns the edges a load was started for."""

        viewport = self._list.scroll_to(offset)
        self._list.on_items_rendered(viewport)
        return self.check()

    def check(self) -> List[Edge]:
        triggered: List[Edge] = []
        offset = self._list.scroll_offset
        total = self._list.total_size

        near_end = offset > self._config.forward_threshold * total or offset + self._list.viewport_height >= total
        if total > 0 and near_end and self._can_load(Edge.FORWARD):
            self._start(Edge.FORWARD, self._window.request_next)
            triggered.append(Edge.FORWARD)

        if offset < self._config.backward_threshold_px and self._can_load(Edge.BACKWARD):
            self._start(Edge.BACKWARD, self._window.request_previous)
            triggered.append(Edge.BACKWARD)

        return triggered

    async def drain(self) -> None:
        """Wait until no load is in flight."""

        while True:
            tasks = list(self.pending.values())
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()

    def _can_load(self, edge: Edge) -> bool:
        task = self._pending.get(edge)
        if task is not None and not task.done():
            return False
        if self._window.status(edge) is not FetchStatus.IDLE:
            return False
        return self._window.has_next_page if edge is Edge.FORWARD else self._window.has_prev_page

    def _start(self, edge: Edge, request: Callable[[], Awaitable[bool]]) -> None:
        task = asyncio.create_task(request(), name=f"reader-prefetch-{edge.value}")
        task.add_done_callback(self._on_task_done)
        self._pending[edge] = task

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Prefetch task failed", exc_info=exc, extra={"task": task.get_name()})

    def _on_window_change(self, change: WindowChange) -> None:
        if change.kind == "reset":
            self._list.set_items(self._window.segments)
            self._list.scroll_to_item(self._window.focus_index, "start")
            self._report_boundary(Edge.BACKWARD)
            self._report_boundary(Edge.FORWARD)
            return

        if change.kind in ("append", "prepend", "evict"):
            anchor = self._list.capture_anchor() if change.front_changed else None
            self._list.set_items(self._window.segments)
            if anchor is not None:
                self._list.restore_anchor(anchor)
            if change.kind != "evict" and change.edge is not None:
                self._report_boundary(change.edge)
            return

        if change.kind == "boundary" and change.edge is not None:
            self._report_boundary(change.edge)
            return

        if change.kind == "status" and change.edge is not None:
            edge_state = self._window.edge(change.edge)
            if edge_state.status is FetchStatus.ERROR and edge_state.error is not None and self._on_edge_error:
                self._on_edge_error(change.edge, edge_state.error)

    def _report_boundary(self, edge: Edge) -> None:
        has_more = self._window.has_next_page if edge is Edge.FORWARD else self._window.has_prev_page
        if not has_more and self._on_boundary_reached is not None:
            self._on_boundary_reached(edge)
