"""Error types and the FastAPI handlers that render them."""
import logging
from typing import Optional

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DownloadError(Exception):
    """Base class for failures that map onto a specific HTTP status."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    title = "Server Error"

    def __init__(self, message: str, title: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title


class InputError(DownloadError):
    """The request is missing or has an unusable email parameter."""
    status_code = status.HTTP_400_BAD_REQUEST
    title = "Missing email"


class NotFoundError(DownloadError):
    """Nothing suitable exists in storage for the request."""
    status_code = status.HTTP_404_NOT_FOUND
    title = "No download page found"


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "msg": error["msg"],
                    "input": error["input"],
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates out of a route."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception(err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
