import logging
from contextlib import asynccontextmanager

import httpx
import redis.asyncio as redis
from fastapi import FastAPI

from canon_reader.services.catalog import BookCatalog
from canon_reader.services.reader import PageLoader, ReferenceResolver, read_reader_config
from canon_reader.services.text_store import RemoteTextStore

from .logging_config import setup_logging
from .settings import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = getattr(app.state, "settings", None) or Settings()
    setup_logging(settings)
    app.state.settings = settings
    app.state.reader_config = read_reader_config(settings.READER_CONFIG_FILE)

    # Initialize and store clients
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.TEXT_STORE_TIMEOUT_SEC),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
    app.state.redis_client = None
    if settings.REDIS_URL:
        try:
            app.state.redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
            await app.state.redis_client.ping()
            logger.info("Successfully connected to Redis.")
        except Exception as e:
            logger.warning(f"Could not connect to Redis, page cache disabled: {e}")
            app.state.redis_client = None

    app.state.text_store = RemoteTextStore(
        http_client=app.state.http_client,
        redis_client=app.state.redis_client,
        api_url=settings.TEXT_STORE_URL,
        api_key=settings.TEXT_STORE_API_KEY,
        cache_ttl_sec=settings.PAGE_CACHE_TTL,
        timeout=settings.TEXT_STORE_TIMEOUT_SEC,
        attempts=settings.TEXT_STORE_RETRIES,
    )

    app.state.catalog = BookCatalog.default()
    if settings.LOAD_REMOTE_INDEX:
        await app.state.catalog.load(app.state.text_store)

    app.state.resolver = ReferenceResolver(app.state.catalog)
    app.state.page_loader = PageLoader(
        app.state.text_store,
        app.state.resolver,
        app.state.reader_config.loader,
    )

    logger.info("Startup complete.")
    yield

    await app.state.http_client.aclose()
    if app.state.redis_client:
        await app.state.redis_client.aclose()
    logger.info("Clients closed. Shutdown complete.")
