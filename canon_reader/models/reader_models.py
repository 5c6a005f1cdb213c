from typing import List, Optional

from pydantic import BaseModel

from canon_reader.services.catalog import BookMeta
from canon_reader.services.reader import Page, Segment, StructuredReference


class ReferenceResponse(BaseModel):
    ref: str
    display: str
    book: str
    ordinals: List[int]
    structure_type: str
    section_prefix: str
    is_section: bool

    @classmethod
    def from_ref(cls, ref: StructuredReference, display: str, depth: int) -> "ReferenceResponse":
        return cls(
            ref=ref.serialize(),
            display=display,
            book=ref.book_slug,
            ordinals=list(ref.ordinals),
            structure_type=ref.structure_type.value,
            section_prefix=ref.with_ordinals(ref.ordinals[:1]).serialize(),
            is_section=len(ref.ordinals) < depth,
        )


class SegmentResponse(BaseModel):
    id: str
    ref: str
    primary_text: str
    secondary_text: Optional[str] = None
    c1: int
    c2: int
    c3: Optional[int] = None
    book: str
    marker: Optional[str] = None

    @classmethod
    def from_segment(cls, segment: Segment) -> "SegmentResponse":
        return cls(
            id=segment.id,
            ref=segment.ref.serialize(),
            primary_text=segment.primary_text,
            secondary_text=segment.secondary_text,
            c1=segment.c1,
            c2=segment.c2,
            c3=segment.c3,
            book=segment.owner_book_id,
            marker=segment.marker,
        )


class PageResponse(BaseModel):
    book: str
    section_prefix: str
    segments: List[SegmentResponse]
    next_cursor: Optional[str] = None
    prev_cursor: Optional[str] = None

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse":
        return cls(
            book=page.book_slug,
            section_prefix=page.section_prefix,
            segments=[SegmentResponse.from_segment(segment) for segment in page.segments],
            next_cursor=page.next_cursor.serialize() if page.next_cursor else None,
            prev_cursor=page.prev_cursor.serialize() if page.prev_cursor else None,
        )


class BookResponse(BaseModel):
    slug: str
    title: str
    collection: str
    structure_type: str
    depth: int
    first_section: str
    last_section: str
    he_title: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_meta(cls, book: BookMeta) -> "BookResponse":
        first = StructuredReference(book.slug, (book.first_section,), book.structure_type)
        last = StructuredReference(book.slug, (book.last_section,), book.structure_type)
        return cls(
            slug=book.slug,
            title=book.title,
            collection=book.collection,
            structure_type=book.structure_type.value,
            depth=book.depth,
            first_section=first.serialize(),
            last_section=last.serialize(),
            he_title=book.he_title,
            category=book.category,
        )
