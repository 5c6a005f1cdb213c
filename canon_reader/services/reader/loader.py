"""Cursor-based page loading for the reader window."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union

from .config_schema import LoaderConfig
from .errors import BoundaryNotFound, FetchError, ReaderError
from .logging import log_fetch_failed, log_page_loaded
from .refs import ReferenceResolver
from .types import Edge, Page, SectionCursor, Segment, StructuredReference

if TYPE_CHECKING:  # pragma: no cover
    from canon_reader.services.catalog import BookMeta
    from canon_reader.services.text_store import TextStore

CursorLike = Union[SectionCursor, StructuredReference, str]


class PageLoader:
    """
    Loads one section of text and works out where the neighbouring sections are.

    The loader is stateless: it does not deduplicate, cache or retry. Storage
    failures surface as :class:`FetchError`; a missing neighbour is reported as a
    ``None`` cursor on the page.
    """

    def __init__(
        self,
        store: "TextStore",
        resolver: ReferenceResolver,
        config: LoaderConfig | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._config = config or LoaderConfig()

    @property
    def resolver(self) -> ReferenceResolver:
        return self._resolver

    async def load_page(self, cursor: CursorLike, *, edge: str = "initial") -> Page:
        section = self.section_for(cursor)
        book = self._book(section)
        prefix = section.serialize()
        if not book.has_section(section.section):
            raise BoundaryNotFound(
                f"'{prefix}' is outside {book.title}",
                ref=prefix,
                detail={"first_section": book.first_section, "last_section": book.last_section},
            )

        start_ts = perf_counter()
        try:
            records = await self._store.fetch_section(prefix)
        except ReaderError:
            raise
        except Exception as exc:
            log_fetch_failed(prefix, edge, exc)
            raise FetchError(
                f"Failed to load '{prefix}'",
                ref=prefix,
                detail={"edge": edge, "error": str(exc)},
            ) from exc

        try:
            segments = self._build_segments(records, book, section)
        except FetchError as exc:
            log_fetch_failed(prefix, edge, exc)
            raise
        duration_ms = (perf_counter() - start_ts) * 1000.0
        log_page_loaded(prefix, edge, len(segments), duration_ms)

        return Page(
            book_slug=book.slug,
            section_prefix=prefix,
            segments=tuple(segments),
            next_cursor=self._optional_neighbour(section, Edge.FORWARD),
            prev_cursor=self._optional_neighbour(section, Edge.BACKWARD),
        )

    def section_for(self, cursor: CursorLike) -> StructuredReference:
        """Normalize any cursor form to a section-level reference."""

        if isinstance(cursor, SectionCursor):
            ref = self._resolver.parse(cursor.section_prefix, allow_partial=True)
        elif isinstance(cursor, StructuredReference):
            ref = cursor
        else:
            ref = self._resolver.parse(cursor, allow_partial=True)
        return self._resolver.section_ref(ref)

    def neighbour(self, section: StructuredReference, edge: Edge) -> StructuredReference:
        """Section adjacent to ``section`` in canonical order.

        Raises :class:`BoundaryNotFound` at the true edge of the corpus, or at
        the edge of a book whose collection does not scroll across books.
        """

        book = self._book(section)
        step = 1 if edge is Edge.FORWARD else -1
        candidate = section.section + step
        if book.has_section(candidate):
            return section.with_ordinals((candidate,))

        if book.collection in self._config.cross_book_collections:
            catalog = self._resolver.catalog
            adjacent = catalog.next_book(book.slug) if edge is Edge.FORWARD else catalog.prev_book(book.slug)
            if adjacent is not None:
                target = adjacent.first_section if edge is Edge.FORWARD else adjacent.last_section
                bare = StructuredReference(adjacent.slug, (target,), adjacent.structure_type)
                return bare.with_ordinals((target,))

        raise BoundaryNotFound(
            f"No section {edge.value} of '{section.serialize()}'",
            ref=section.serialize(),
            detail={"edge": edge.value, "book": book.slug},
        )

    def _optional_neighbour(self, section: StructuredReference, edge: Edge) -> Optional[StructuredReference]:
        try:
            return self.neighbour(section, edge)
        except BoundaryNotFound:
            return None

    def _book(self, ref: StructuredReference) -> "BookMeta":
        book = self._resolver.catalog.get_book(ref.book_slug)
        if book is None:
            raise BoundaryNotFound(f"Unknown book '{ref.book_slug}'", ref=ref.serialize())
        return book

    def _build_segments(
        self,
        records: Iterable[Dict[str, Any]],
        book: "BookMeta",
        section: StructuredReference,
    ) -> List[Segment]:
        prefix = section.serialize()
        segments: Dict[str, Segment] = {}
        for record in records or []:
            try:
                segment = self._segment_from_record(record, book)
            except (KeyError, TypeError, ValueError, ReaderError) as exc:
                raise FetchError(
                    f"Malformed record in '{prefix}'",
                    ref=prefix,
                    detail={"record": record, "error": str(exc)},
                ) from exc
            if segment.ref.book_slug != book.slug or segment.c1 != section.section:
                raise FetchError(
                    f"Record '{segment.ref}' does not belong to '{prefix}'",
                    ref=prefix,
                    detail={"record_ref": segment.ref.serialize()},
                )
            segments.setdefault(segment.id, segment)
        return sorted(segments.values(), key=lambda item: item.sort_key)

    def _segment_from_record(self, record: Dict[str, Any], book: "BookMeta") -> Segment:
        # Ordinals come from the parsed ref so daf sides stay folded into c1
        ref = self._resolver.parse(str(record["ref"]))
        ordinals = ref.ordinals
        return Segment(
            id=str(record.get("id") or ref.serialize()),
            ref=ref,
            primary_text=record.get("primary_text") or "",
            secondary_text=record.get("secondary_text"),
            c1=ordinals[0],
            c2=ordinals[1] if len(ordinals) > 1 else 1,
            c3=ordinals[2] if len(ordinals) > 2 else None,
            owner_book_id=book.slug,
            book_order=book.order,
            marker=record.get("marker"),
        )
