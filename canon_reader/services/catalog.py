import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from canon_reader.data.talmud_bavli import TALMUD_BAVLI_TRACTATES, TALMUD_ORDERS, folio_range, get_tractates_by_order
from canon_reader.data.tanakh import TANAKH_ALIASES, TANAKH_BOOKS, get_all_books
from canon_reader.services.reader.types import StructureType

logger = logging.getLogger(__name__)

_DEPTH_BY_STRUCTURE = {
    StructureType.VERSE: 2,
    StructureType.DAF_LINE: 2,
    StructureType.SECTION_ONLY: 1,
}


def normalize_title(title: str) -> str:
    """Normalizes a title for alias matching."""
    return title.replace("_", " ").lower().strip()


def to_slug(title: str) -> str:
    return "_".join(title.strip().split())


@dataclass(frozen=True, slots=True)
class BookMeta:
    """Structural metadata for one book of the corpus."""

    slug: str
    title: str
    collection: str
    structure_type: StructureType
    depth: int
    order: int
    first_section: int
    last_section: int
    he_title: Optional[str] = None
    category: Optional[str] = None

    def has_section(self, section: int) -> bool:
        return self.first_section <= section <= self.last_section


def book_from_payload(payload: Dict[str, Any]) -> BookMeta:
    """Build :class:`BookMeta` from a corpus index entry."""
    structure = StructureType(payload.get("structure_type", StructureType.VERSE.value))
    title = payload.get("title") or payload["slug"].replace("_", " ")
    return BookMeta(
        slug=payload.get("slug") or to_slug(title),
        title=title,
        collection=(payload.get("collection") or "unknown").lower(),
        structure_type=structure,
        depth=int(payload.get("depth") or _DEPTH_BY_STRUCTURE[structure]),
        order=int(payload["order"]),
        first_section=int(payload.get("first_section", 1)),
        last_section=int(payload["last_section"]),
        he_title=payload.get("he_title"),
        category=payload.get("category"),
    )


class BookCatalog:
    """
    Book-metadata collaborator.

    Answers structural depth, section range and canonical neighbours for each
    book. Neighbours are only looked up inside the book's own collection.
    """

    def __init__(self, books: Iterable[BookMeta] = (), aliases: Optional[Dict[str, str]] = None):
        self._books: Dict[str, BookMeta] = {}
        self._aliases: Dict[str, str] = {}
        self._by_collection: Dict[str, List[BookMeta]] = {}
        for book in books:
            self.register(book)
        for alias, title in (aliases or {}).items():
            self.add_alias(alias, title)

    @classmethod
    def default(cls) -> "BookCatalog":
        """Catalog seeded from the static Tanakh and Bavli tables."""
        books: List[BookMeta] = []
        for title in get_all_books():
            info = TANAKH_BOOKS[title]
            books.append(BookMeta(
                slug=to_slug(title),
                title=title,
                collection="tanakh",
                structure_type=StructureType.VERSE,
                depth=2,
                order=info["order"],
                first_section=1,
                last_section=info["chapters"],
                he_title=info["he_name"],
                category=info["section"],
            ))

        # Talmud ordering continues after the Tanakh so cross-corpus sort keys never collide
        order = 1000
        for seder in TALMUD_ORDERS:
            for tractate in get_tractates_by_order(seder):
                info = TALMUD_BAVLI_TRACTATES[tractate]
                first_folio, last_folio = folio_range(tractate)
                order += 1
                books.append(BookMeta(
                    slug=to_slug(tractate),
                    title=tractate,
                    collection="talmud",
                    structure_type=StructureType.DAF_LINE,
                    depth=2,
                    order=order,
                    first_section=first_folio * 2 - 1,
                    last_section=last_folio * 2,
                    he_title=info["he_name"],
                    category=seder,
                ))
        return cls(books, aliases=TANAKH_ALIASES)

    def register(self, book: BookMeta) -> None:
        previous = self._books.get(book.slug)
        if previous is not None:
            self._by_collection[previous.collection].remove(previous)
        self._books[book.slug] = book
        members = self._by_collection.setdefault(book.collection, [])
        members.append(book)
        members.sort(key=lambda item: item.order)
        self.add_alias(book.title, book.title)
        self.add_alias(book.slug, book.title)
        if book.he_title:
            self.add_alias(book.he_title, book.title)

    def add_alias(self, alias: str, title: str) -> None:
        self._aliases[normalize_title(alias)] = to_slug(title)

    def get_book(self, slug: str) -> Optional[BookMeta]:
        book = self._books.get(to_slug(slug))
        if book is None:
            resolved = self.resolve_book_name(slug)
            book = self._books.get(resolved) if resolved else None
        return book

    def resolve_book_name(self, user_name: str) -> Optional[str]:
        """Resolves a user-provided book name to a canonical slug."""
        return self._aliases.get(normalize_title(user_name))

    def books(self, collection: Optional[str] = None) -> List[BookMeta]:
        if collection is not None:
            return list(self._by_collection.get(collection.lower(), []))
        return sorted(self._books.values(), key=lambda item: item.order)

    def next_book(self, slug: str) -> Optional[BookMeta]:
        return self._adjacent(slug, 1)

    def prev_book(self, slug: str) -> Optional[BookMeta]:
        return self._adjacent(slug, -1)

    def _adjacent(self, slug: str, step: int) -> Optional[BookMeta]:
        book = self.get_book(slug)
        if book is None:
            return None
        members = self._by_collection.get(book.collection, [])
        position = members.index(book) + step
        if 0 <= position < len(members):
            return members[position]
        return None

    async def load(self, text_store: Any) -> None:
        """Merges the remote corpus index into the catalog."""
        logger.info("BookCatalog: Loading corpus index...")
        try:
            entries = await text_store.fetch_index()
        except Exception as e:
            logger.error(f"BookCatalog: Failed to load corpus index: {e}")
            return

        loaded = 0
        for entry in entries or []:
            try:
                self.register(book_from_payload(entry))
                loaded += 1
            except (KeyError, ValueError) as e:
                logger.warning("BookCatalog: skipping malformed index entry", extra={"entry": entry, "error": str(e)})
        logger.info(f"BookCatalog: Registered {loaded} books from the corpus index.")

    async def lookup(self, slug: str, text_store: Any) -> Optional[BookMeta]:
        """Catalog entry for ``slug``, asking the store for books the catalog lacks."""
        book = self.get_book(slug)
        if book is not None:
            return book
        try:
            payload = await text_store.fetch_book(to_slug(slug))
        except Exception as e:
            logger.error(f"BookCatalog: Failed to fetch book '{slug}': {e}")
            return None
        if not payload:
            return None
        try:
            book = book_from_payload(payload)
        except (KeyError, ValueError) as e:
            logger.warning("BookCatalog: skipping malformed book entry", extra={"entry": payload, "error": str(e)})
            return None
        self.register(book)
        logger.info(f"BookCatalog: Registered '{book.slug}' from the corpus store.")
        return book
