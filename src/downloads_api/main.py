from textwrap import dedent
import logging
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute

from downloads_api.adapters.storage import ObjectStorage, StorageFactory
from downloads_api.config.settings import Settings
from downloads_api.errors import (
    handle_broad_exceptions,
    handle_pydantic_validation_errors,
)
from downloads_api.routers.downloads import router as downloads_router
from downloads_api.routers.health import router as health_router

# Set up logging
logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_app(settings: Settings | None = None, storage: Optional[ObjectStorage] = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Downloads API",
        summary="Serve the latest generated download page for an email",
        version="v1",
        description=dedent(
            """\
        | Endpoint | Notes |
        | --- | --- |
        | `GET /get-download?email=...` | Redirects to, or returns, the newest generated page |
        | `GET /health` | Component readiness |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.storage_error = None

    if storage is None:
        try:
            app.state.storage = StorageFactory.get_storage(settings)
        except Exception as e:
            logger.exception("Could not initialize object storage: %s", e)
            app.state.storage_error = str(e)

    app.include_router(downloads_router, tags=["downloads"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if not route.tags:
        return route.name
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
