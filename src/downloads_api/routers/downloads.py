from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, Response

from downloads_api.config.settings import Settings
from downloads_api.resolver import DownloadResolver

router = APIRouter()


def get_resolver(request: Request) -> DownloadResolver:
    """Build a resolver over the storage and settings the app was created with."""
    settings: Settings = request.app.state.settings
    return DownloadResolver(storage=request.app.state.storage, settings=settings)


@router.get(
    "/get-download",
    response_class=HTMLResponse,
    responses={
        status.HTTP_302_FOUND: {"description": "Redirect to the public copy of the page"},
        status.HTTP_400_BAD_REQUEST: {"description": "Missing email"},
        status.HTTP_404_NOT_FOUND: {"description": "No generated page found"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Storage or internal error"},
    },
)
async def get_download(
    email: Optional[str] = Query(None, description="Email the download page was generated for"),
    resolver: DownloadResolver = Depends(get_resolver),
) -> Response:
    """
    Serve the latest generated download page for an email.

    Redirects to the bucket's public URL when one is configured, otherwise
    returns the stored HTML directly.
    """
    return await resolver.handle(email)
