import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from canon_reader.core.dependencies import get_catalog, get_page_loader, get_resolver, get_text_store
from canon_reader.models.reader_models import BookResponse, PageResponse, ReferenceResponse
from canon_reader.services.catalog import BookCatalog
from canon_reader.services.reader import PageLoader, ParseError, ReferenceResolver
from canon_reader.services.text_store import TextStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/resolve", response_model=ReferenceResponse)
async def resolve_handler(
    ref: str = Query(..., min_length=1),
    resolver: ReferenceResolver = Depends(get_resolver),
):
    """Parse a wire-format or display reference."""
    parsed = resolver.resolve(ref)
    book = resolver.catalog.get_book(parsed.book_slug)
    return ReferenceResponse.from_ref(parsed, resolver.to_display(parsed), book.depth)


@router.get("/page", response_model=PageResponse)
async def page_handler(
    cursor: str = Query(..., min_length=1),
    resolver: ReferenceResolver = Depends(get_resolver),
    loader: PageLoader = Depends(get_page_loader),
):
    """Load the section containing ``cursor`` together with its neighbour cursors."""
    page = await loader.load_page(resolver.resolve(cursor))
    return PageResponse.from_page(page)


@router.get("/books", response_model=List[BookResponse])
async def books_handler(
    collection: Optional[str] = None,
    catalog: BookCatalog = Depends(get_catalog),
):
    return [BookResponse.from_meta(book) for book in catalog.books(collection)]


@router.get("/books/{slug}", response_model=BookResponse)
async def book_handler(
    slug: str,
    catalog: BookCatalog = Depends(get_catalog),
    store: TextStore = Depends(get_text_store),
):
    """Book metadata; books missing from the catalog are looked up in the store."""
    book = await catalog.lookup(slug, store)
    if book is None:
        raise ParseError(f"Unknown book '{slug}'", ref=slug, detail={"book": slug})
    return BookResponse.from_meta(book)
