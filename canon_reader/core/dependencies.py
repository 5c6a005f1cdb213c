from fastapi import Request

from canon_reader.services.catalog import BookCatalog
from canon_reader.services.reader import PageLoader, ReferenceResolver
from canon_reader.services.text_store import TextStore

from .exceptions import ServiceUnavailableError


def get_catalog(request: Request) -> BookCatalog:
    """Dependency to get the BookCatalog from the application state."""
    return _from_state(request, "catalog")


def get_resolver(request: Request) -> ReferenceResolver:
    """Dependency to get the ReferenceResolver instance."""
    return _from_state(request, "resolver")


def get_page_loader(request: Request) -> PageLoader:
    """Dependency to get the PageLoader instance."""
    return _from_state(request, "page_loader")


def get_text_store(request: Request) -> TextStore:
    """Dependency to get the TextStore the loader reads from."""
    return _from_state(request, "text_store")


def _from_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise ServiceUnavailableError(f"{name} is not available")
    return service
