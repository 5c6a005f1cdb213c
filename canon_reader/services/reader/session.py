"""Wiring of one reader view: resolver, loader, window, list and prefetch."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

from .config_schema import ReaderConfig
from .display import DisplaySettings, ReaderSettings
from .loader import PageLoader
from .prefetch import BoundaryCallback, EdgeErrorCallback, PrefetchController, VisibleRefCallback
from .refs import ReferenceResolver
from .sizing import SizeEstimator
from .types import StructuredReference
from .virtual_list import VirtualList
from .window import WindowController, WindowState

if TYPE_CHECKING:  # pragma: no cover
    from canon_reader.services.catalog import BookCatalog
    from canon_reader.services.text_store import TextStore


class ReaderSession:
    def __init__(
        self,
        catalog: "BookCatalog",
        store: "TextStore",
        config: ReaderConfig | None = None,
        settings: Optional[ReaderSettings] = None,
        *,
        on_visible_ref_changed: Optional[VisibleRefCallback] = None,
        on_boundary_reached: Optional[BoundaryCallback] = None,
        on_edge_error: Optional[EdgeErrorCallback] = None,
    ) -> None:
        self.config = config or ReaderConfig()
        self.settings = settings or ReaderSettings(DisplaySettings())
        self.resolver = ReferenceResolver(catalog)
        self.loader = PageLoader(store, self.resolver, self.config.loader)
        self.window = WindowController(self.loader, self.config.window)
        self.list = VirtualList(SizeEstimator(self.config.sizing), self.settings, self.config.virtual_list)
        self.prefetch = PrefetchController(
            self.window,
            self.list,
            self.config.prefetch,
            on_visible_ref_changed=on_visible_ref_changed,
            on_boundary_reached=on_boundary_reached,
            on_edge_error=on_edge_error,
        )

    async def open(self, ref: Union[str, StructuredReference]) -> WindowState:
        """Navigate to a wire-format or display reference."""

        target = ref if isinstance(ref, StructuredReference) else self.resolver.resolve(ref)
        return await self.window.navigate(target)

    def close(self) -> None:
        self.prefetch.close()
        self.list.close()
