"""The loaded window of pages and its per-edge fetch state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from canon_reader.core.logging_config import generation_var

from .config_schema import WindowConfig
from .errors import BoundaryNotFound, ReaderError, StaleResponseDiscarded
from .loader import PageLoader
from .logging import log_stale_discarded, log_window_changed
from .types import Edge, FetchStatus, Page, Segment, StructuredReference

logger = logging.getLogger(__name__)


@dataclass
class EdgeState:
    """Fetch state of one end of the window.

    ``cursor`` is the section to load next on this edge; ``None`` means the
    corpus boundary was reached. ``token`` changes whenever the edge is
    re-armed, so a response for an older cursor can be recognised.
    """

    status: FetchStatus = FetchStatus.IDLE
    cursor: Optional[StructuredReference] = None
    error: Optional[ReaderError] = None
    token: int = 0

    @property
    def has_more(self) -> bool:
        return self.cursor is not None


@dataclass(frozen=True)
class WindowChange:
    kind: str
    generation: int
    edge: Optional[Edge] = None
    section_prefix: Optional[str] = None
    added: int = 0
    removed: int = 0

    @property
    def front_changed(self) -> bool:
        """True when segments were inserted or removed before the old first item."""
        return self.kind == "prepend" or (self.kind == "evict" and self.edge is Edge.BACKWARD)


@dataclass(frozen=True)
class WindowState:
    segments: Tuple[Segment, ...]
    section_prefixes: Tuple[str, ...]
    has_next_page: bool
    has_prev_page: bool
    fetch_status: Dict[Edge, FetchStatus]
    generation: int
    focus_index: int = 0
    errors: Dict[Edge, Optional[ReaderError]] = field(default_factory=dict)


WindowListener = Callable[[WindowChange], None]


class WindowController:
    """
    Owns the ordered, de-duplicated window of pages.

    Each edge runs ``IDLE -> LOADING -> IDLE`` on success and
    ``LOADING -> ERROR`` on failure; only :meth:`retry` leaves ``ERROR``.
    Forward and backward edges fetch independently, one request per edge at
    a time. :meth:`navigate` bumps the generation so responses started
    before it are dropped on arrival.
    """

    def __init__(self, loader: PageLoader, config: WindowConfig | None = None) -> None:
        self._loader = loader
        self._config = config or WindowConfig()
        self._pages: List[Page] = []
        self._segments: Tuple[Segment, ...] = ()
        self._edges: Dict[Edge, EdgeState] = {Edge.FORWARD: EdgeState(), Edge.BACKWARD: EdgeState()}
        self._generation = 0
        self._focus_index = 0
        self._listeners: List[WindowListener] = []

    # ------------------------------------------------------------------ state -
    @property
    def generation(self) -> int:
        return self._generation

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return self._segments

    @property
    def pages(self) -> Tuple[Page, ...]:
        return tuple(self._pages)

    @property
    def has_next_page(self) -> bool:
        return self._edges[Edge.FORWARD].has_more

    @property
    def has_prev_page(self) -> bool:
        return self._edges[Edge.BACKWARD].has_more

    @property
    def focus_index(self) -> int:
        return self._focus_index

    def status(self, edge: Edge) -> FetchStatus:
        return self._edges[edge].status

    def edge(self, edge: Edge) -> EdgeState:
        return self._edges[edge]

    @property
    def state(self) -> WindowState:
        return WindowState(
            segments=self._segments,
            section_prefixes=tuple(page.section_prefix for page in self._pages),
            has_next_page=self.has_next_page,
            has_prev_page=self.has_prev_page,
            fetch_status={edge: state.status for edge, state in self._edges.items()},
            generation=self._generation,
            focus_index=self._focus_index,
            errors={edge: state.error for edge, state in self._edges.items()},
        )

    def index_of(self, ref: StructuredReference) -> Optional[int]:
        for index, segment in enumerate(self._segments):
            if segment.ref == ref:
                return index
        return None

    def _focus_for(self, ref: StructuredReference) -> int:
        """First segment at or below ``ref``; a section-level ref focuses the top."""

        if len(ref.ordinals) <= 1:
            return 0
        depth = len(ref.ordinals)
        for index, segment in enumerate(self._segments):
            if segment.ref.ordinals[:depth] == ref.ordinals:
                return index
        return 0

    def subscribe(self, listener: WindowListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------- navigation -
    async def navigate(self, target: Union[StructuredReference, str]) -> WindowState:
        """Replace the window with the section containing ``target``.

        The current window stays in place until the new section has loaded;
        on failure the error propagates and both edges return to ``IDLE``,
        unless a later navigation has already replaced this one.
        """

        ref = target if isinstance(target, StructuredReference) else self._loader.resolver.parse(target, allow_partial=True)
        self._generation += 1
        generation = self._generation
        generation_var.set(generation)
        for state in self._edges.values():
            state.status = FetchStatus.LOADING
            state.error = None
            state.token += 1

        try:
            page = await self._loader.load_page(ref, edge="initial")
        except ReaderError:
            if generation != self._generation:
                log_stale_discarded(ref.serialize(), "initial", generation, self._generation)
                return self.state
            for state in self._edges.values():
                state.status = FetchStatus.IDLE
            raise

        if generation != self._generation:
            log_stale_discarded(page.section_prefix, "initial", generation, self._generation)
            return self.state

        self._pages = [page]
        self._edges[Edge.FORWARD] = EdgeState(cursor=page.next_cursor, token=self._edges[Edge.FORWARD].token)
        self._edges[Edge.BACKWARD] = EdgeState(cursor=page.prev_cursor, token=self._edges[Edge.BACKWARD].token)
        self._rebuild()
        self._focus_index = self._focus_for(ref)
        self._notify(WindowChange("reset", generation, section_prefix=page.section_prefix, added=len(self._segments)))
        return self.state

    async def request_next(self) -> bool:
        return await self._request(Edge.FORWARD)

    async def request_previous(self) -> bool:
        return await self._request(Edge.BACKWARD)

    async def retry(self, edge: Edge) -> bool:
        state = self._edges[edge]
        if state.status is not FetchStatus.ERROR:
            return False
        state.status = FetchStatus.IDLE
        state.error = None
        self._notify(WindowChange("status", self._generation, edge=edge))
        return await self._request(edge)

    # ---------------------------------------------------------------- loading -
    async def _request(self, edge: Edge) -> bool:
        state = self._edges[edge]
        if state.status is not FetchStatus.IDLE or state.cursor is None:
            return False

        # Gate is closed before the first await
        state.status = FetchStatus.LOADING
        generation, token, cursor = self._generation, state.token, state.cursor
        prefix = cursor.serialize()
        self._notify(WindowChange("status", generation, edge=edge, section_prefix=prefix))

        page: Optional[Page] = None
        failure: Optional[ReaderError] = None
        try:
            page = await self._loader.load_page(cursor, edge=edge.value)
        except ReaderError as exc:
            failure = exc

        try:
            self._ensure_current(edge, generation, token, prefix)
        except StaleResponseDiscarded as stale:
            log_stale_discarded(prefix, edge.value, generation, stale.detail["current"])
            if generation == self._generation and state.status is FetchStatus.LOADING:
                # Eviction re-armed this edge while the fetch was out
                state.status = FetchStatus.IDLE
                self._notify(WindowChange("status", generation, edge=edge))
            return False

        if isinstance(failure, BoundaryNotFound):
            state.cursor = None
            state.status = FetchStatus.IDLE
            self._notify(WindowChange("boundary", generation, edge=edge))
            return False
        if failure is not None:
            state.status = FetchStatus.ERROR
            state.error = failure
            self._notify(WindowChange("status", generation, edge=edge, section_prefix=prefix))
            return False

        state.status = FetchStatus.IDLE
        state.error = None
        self._merge(edge, page)
        return True

    def _ensure_current(self, edge: Edge, generation: int, token: int, section_prefix: str) -> None:
        if generation == self._generation and token == self._edges[edge].token:
            return
        raise StaleResponseDiscarded(
            "Response belongs to a window that no longer exists",
            ref=section_prefix,
            detail={"edge": edge.value, "generation": generation, "current": self._generation},
        )

    def _merge(self, edge: Edge, page: Page) -> None:
        state = self._edges[edge]
        state.cursor = page.next_cursor if edge is Edge.FORWARD else page.prev_cursor

        if any(existing.section_prefix == page.section_prefix for existing in self._pages):
            logger.debug("Page already in window", extra={"ref": page.section_prefix, "edge": edge.value})
            return
        if not self._keeps_order(edge, page):
            logger.warning(
                "Discarding out-of-order page",
                extra={"ref": page.section_prefix, "edge": edge.value},
            )
            return

        if edge is Edge.FORWARD:
            self._pages.append(page)
            kind = "append"
        else:
            self._pages.insert(0, page)
            self._focus_index += len(page.segments)
            kind = "prepend"
        self._rebuild()
        self._notify(WindowChange(kind, self._generation, edge=edge, section_prefix=page.section_prefix, added=len(page.segments)))
        self._evict(opposite=Edge.BACKWARD if edge is Edge.FORWARD else Edge.FORWARD)

    def _keeps_order(self, edge: Edge, page: Page) -> bool:
        if page.is_empty or not self._segments:
            return True
        if edge is Edge.FORWARD:
            return page.segments[0].sort_key > self._segments[-1].sort_key
        return page.segments[-1].sort_key < self._segments[0].sort_key

    def _evict(self, opposite: Edge) -> None:
        while len(self._pages) > self._config.max_pages:
            evicted = self._pages.pop(0 if opposite is Edge.BACKWARD else -1)
            state = self._edges[opposite]
            # Re-arm the edge so the evicted section can be loaded again
            state.cursor = self._loader.section_for(evicted.section_prefix)
            if state.status is not FetchStatus.LOADING:
                state.status = FetchStatus.IDLE
            state.error = None
            state.token += 1
            if opposite is Edge.BACKWARD:
                self._focus_index = max(0, self._focus_index - len(evicted.segments))
            self._rebuild()
            self._notify(WindowChange(
                "evict",
                self._generation,
                edge=opposite,
                section_prefix=evicted.section_prefix,
                removed=len(evicted.segments),
            ))

    def _rebuild(self) -> None:
        self._segments = tuple(segment for page in self._pages for segment in page.segments)

    def _notify(self, change: WindowChange) -> None:
        if change.kind != "status":
            log_window_changed(change.kind, change.generation, len(self._segments), len(self._pages))
        for listener in list(self._listeners):
            listener(change)
