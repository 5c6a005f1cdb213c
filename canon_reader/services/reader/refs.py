"""Reference parsing and serialization for the reader engine."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Optional

from canon_reader.core.utils import normalize_ref_text

from .errors import ParseError, StructureMismatchError
from .types import SectionCursor, StructureType, StructuredReference, amud_to_daf, daf_to_amud

if TYPE_CHECKING:  # pragma: no cover
    from canon_reader.services.catalog import BookCatalog, BookMeta

# Human display form, e.g. "Genesis 1:1", "Song of Songs 2", "Berakhot 2a:5"
_DISPLAY_PATTERN = re.compile(r"^(?P<book>.+?)\s+(?P<section>\d+[ab]?)(?::(?P<rest>\d+(?::\d+)*))?$")
_ORDINAL_PATTERN = re.compile(r"^\d+$")


class ReferenceResolver:
    """Parses and serializes ``<book>.<o1>[.<o2>[.<o3>]]`` references.

    Structural depth comes from the book catalog: a full reference carries
    exactly ``depth`` ordinals. Section-level references (fewer ordinals) are
    accepted only when the caller asks for them with ``allow_partial``.
    """

    def __init__(self, catalog: "BookCatalog") -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> "BookCatalog":
        return self._catalog

    def parse(self, raw: str, *, allow_partial: bool = False) -> StructuredReference:
        if not raw or not raw.strip():
            raise ParseError("Reference is empty", ref=raw)

        tokens = raw.strip().split(".")
        slug = "_".join(tokens[0].split())
        if not slug:
            raise ParseError("Reference has no book", ref=raw)

        book = self._catalog.get_book(slug)
        if book is None:
            raise ParseError(f"Unknown book '{slug}'", ref=raw, detail={"book": slug})

        ordinals = self._parse_ordinals(tokens[1:], book, raw)

        expected = book.depth
        if allow_partial:
            valid = 1 <= len(ordinals) <= expected
        else:
            valid = len(ordinals) == expected
        if not valid:
            raise StructureMismatchError(
                f"'{book.slug}' expects {expected} ordinal(s), got {len(ordinals)}",
                ref=raw,
                detail={
                    "book": book.slug,
                    "expected_depth": expected,
                    "received_depth": len(ordinals),
                    "structure_type": book.structure_type.value,
                },
            )

        return StructuredReference(
            book_slug=book.slug,
            ordinals=tuple(ordinals),
            structure_type=book.structure_type,
            raw=raw,
        )

    def serialize(self, ref: StructuredReference) -> str:
        return ref.serialize()

    def resolve(self, text: str) -> StructuredReference:
        """Parse either the wire format or a human-typed display reference."""

        cleaned = normalize_ref_text(text)
        if not cleaned:
            raise ParseError("Reference is empty", ref=text)

        match = _DISPLAY_PATTERN.match(cleaned)
        if match:
            book_name = match.group("book")
            slug = self._catalog.resolve_book_name(book_name) or "_".join(book_name.split())
            tokens = [slug, match.group("section")]
            if match.group("rest"):
                tokens.extend(match.group("rest").split(":"))
            return self.parse(".".join(tokens), allow_partial=True)

        head, _, tail = cleaned.partition(".")
        slug = self._catalog.resolve_book_name(head)
        if slug:
            cleaned = f"{slug}.{tail}" if tail else slug
        return self.parse(cleaned, allow_partial=True)

    def section_prefix(self, ref: StructuredReference) -> str:
        """Page-boundary key: the book plus its first ordinal."""
        return self.section_ref(ref).serialize()

    def section_ref(self, ref: StructuredReference) -> StructuredReference:
        if len(ref.ordinals) == 1 and ref.raw == ref.serialize():
            return ref
        return ref.with_ordinals(ref.ordinals[:1])

    def cursor_for(self, ref: StructuredReference) -> SectionCursor:
        return SectionCursor(book_slug=ref.book_slug, section_prefix=self.section_prefix(ref))

    def to_display(self, ref: StructuredReference) -> str:
        book = self._catalog.get_book(ref.book_slug)
        title = book.title if book else ref.book_slug.replace("_", " ")
        parts = [
            amud_to_daf(ordinal) if index == 0 and ref.structure_type is StructureType.DAF_LINE else str(ordinal)
            for index, ordinal in enumerate(ref.ordinals)
        ]
        if not parts:
            return title
        return f"{title} {':'.join(parts)}"

    @staticmethod
    def _parse_ordinals(tokens: List[str], book: "BookMeta", raw: str) -> List[int]:
        ordinals: List[int] = []
        for position, token in enumerate(tokens):
            token = token.strip()
            value: Optional[int]
            if position == 0 and book.structure_type is StructureType.DAF_LINE:
                value = daf_to_amud(token.lower())
                if value is None:
                    raise ParseError(
                        f"'{token}' is not a daf (expected e.g. '2a')",
                        ref=raw,
                        detail={"token": token, "position": position},
                    )
            elif _ORDINAL_PATTERN.match(token):
                value = int(token)
            else:
                raise ParseError(
                    f"Ordinal '{token}' is not numeric",
                    ref=raw,
                    detail={"token": token, "position": position},
                )
            if value < 1:
                raise ParseError("Ordinals are 1-based", ref=raw, detail={"token": token, "position": position})
            ordinals.append(value)
        return ordinals
