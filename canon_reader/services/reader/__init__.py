"""Virtualized reader engine."""

from .config_loader import parse_reader_config, read_reader_config
from .config_schema import ReaderConfig, load_reader_config
from .display import DisplaySettings, LayoutMode, ReaderSettings, Theme
from .errors import (
    BoundaryNotFound,
    FetchError,
    ParseError,
    ReaderConfigInvalid,
    ReaderError,
    StaleResponseDiscarded,
    StructureMismatchError,
)
from .loader import PageLoader
from .prefetch import PrefetchController
from .refs import ReferenceResolver
from .session import ReaderSession
from .sizing import SizeEstimator
from .types import Edge, FetchStatus, Page, SectionCursor, Segment, StructureType, StructuredReference
from .virtual_list import Anchor, ListHandle, RenderedItem, ViewportState, VirtualList
from .window import WindowChange, WindowController, WindowState

__all__ = [
    "Anchor",
    "BoundaryNotFound",
    "DisplaySettings",
    "Edge",
    "FetchError",
    "FetchStatus",
    "LayoutMode",
    "ListHandle",
    "Page",
    "PageLoader",
    "ParseError",
    "PrefetchController",
    "ReaderConfig",
    "ReaderConfigInvalid",
    "ReaderError",
    "ReaderSession",
    "ReaderSettings",
    "ReferenceResolver",
    "RenderedItem",
    "SectionCursor",
    "Segment",
    "SizeEstimator",
    "StaleResponseDiscarded",
    "StructureMismatchError",
    "StructureType",
    "StructuredReference",
    "Theme",
    "ViewportState",
    "VirtualList",
    "WindowChange",
    "WindowController",
    "WindowState",
    "load_reader_config",
    "parse_reader_config",
    "read_reader_config",
]
