from typing import Optional

from fastapi import FastAPI

from canon_reader import __version__
from canon_reader.api import reader
from canon_reader.core.exceptions import setup_exception_handlers
from canon_reader.core.middleware import logging_middleware, setup_cors_middleware
from canon_reader.core.settings import Settings
from canon_reader.core.startup import lifespan


def create_app(settings: Optional[Settings] = None, *, with_lifespan: bool = True) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(
        title="Canon Reader",
        version=__version__,
        lifespan=lifespan if with_lifespan else None,
    )
    app.state.settings = settings

    # CORS must be added before other middleware
    setup_cors_middleware(app, settings.CORS_ORIGINS)
    app.middleware("http")(logging_middleware)
    setup_exception_handlers(app)

    app.include_router(reader.router, prefix="/api/reader", tags=["reader"])

    @app.get("/health")
    async def health():
        """
        Health check endpoint to confirm the service is running.
        """
        return {"status": "healthy", "service": "canon_reader"}

    return app


app = create_app()
