"""Value types shared by the reader engine."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

_DAF_PATTERN = re.compile(r"^(\d+)([ab])$")


class StructureType(str, Enum):
    VERSE = "VERSE"
    DAF_LINE = "DAF_LINE"
    SECTION_ONLY = "SECTION_ONLY"


class Edge(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


def amud_to_daf(amud: int) -> str:
    """Render an amud ordinal as folio+side: 3 -> ``2a``, 4 -> ``2b``."""

    folio, side = divmod(amud + 1, 2)
    return f"{folio}{'a' if side == 0 else 'b'}"


def daf_to_amud(token: str) -> Optional[int]:
    """Inverse of :func:`amud_to_daf`; ``None`` when ``token`` is not a daf."""

    match = _DAF_PATTERN.match(token)
    if not match:
        return None
    folio = int(match.group(1))
    if folio < 1:
        return None
    return folio * 2 - (1 if match.group(2) == "a" else 0)


@dataclass(frozen=True, slots=True)
class StructuredReference:
    """A parsed ``<book>.<o1>[.<o2>[.<o3>]]`` address.

    Daf-structured books store folio+side in the first ordinal as an amud
    number (``2a`` -> 3, ``2b`` -> 4), so every ordinal stays a positive int.
    """

    book_slug: str
    ordinals: Tuple[int, ...]
    structure_type: StructureType
    raw: str = field(default="", compare=False)

    def serialize(self) -> str:
        tokens = [self.book_slug]
        for position, ordinal in enumerate(self.ordinals):
            if position == 0 and self.structure_type is StructureType.DAF_LINE:
                tokens.append(amud_to_daf(ordinal))
            else:
                tokens.append(str(ordinal))
        return ".".join(tokens)

    @property
    def section(self) -> int:
        return self.ordinals[0]

    def with_ordinals(self, ordinals: Tuple[int, ...]) -> "StructuredReference":
        bare = StructuredReference(self.book_slug, tuple(ordinals), self.structure_type)
        return replace(bare, raw=bare.serialize())

    def __str__(self) -> str:
        return self.serialize()


@dataclass(frozen=True, slots=True)
class SectionCursor:
    """What one page fetch covers."""

    book_slug: str
    section_prefix: str


@dataclass(frozen=True, slots=True)
class Segment:
    """Smallest addressable unit of text. Immutable once fetched."""

    id: str
    ref: StructuredReference
    primary_text: str
    c1: int
    c2: int
    owner_book_id: str
    book_order: int = 0
    secondary_text: Optional[str] = None
    c3: Optional[int] = None
    marker: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[int, int, int, int]:
        return (self.book_order, self.c1, self.c2, self.c3 or 0)


@dataclass(frozen=True, slots=True)
class Page:
    """One bounded batch of segments sharing a section prefix."""

    book_slug: str
    section_prefix: str
    segments: Tuple[Segment, ...]
    next_cursor: Optional[StructuredReference] = None
    prev_cursor: Optional[StructuredReference] = None

    @property
    def is_empty(self) -> bool:
        return not self.segments
