"""
Find the newest generated download page for an email and serve it.

Generated pages live under ``{safe_email}_gen/`` in the bucket. The newest one is
picked by the millisecond timestamp embedded in ``download_<digits>.html`` keys,
falling back to the storage upload time when no key follows that naming.
"""
import html
import logging
import re
from datetime import datetime, timezone
from typing import Optional, Sequence

from fastapi import status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from downloads_api.adapters.storage import ObjectStorage
from downloads_api.config.settings import Settings
from downloads_api.errors import DownloadError, InputError, NotFoundError
from downloads_api.schemas import ObjectEntry
from downloads_api.utils.decorators import async_log_execution_time

logger = logging.getLogger(__name__)

UNSAFE_EMAIL_CHARS = re.compile(r"[^A-Za-z0-9]")
DOWNLOAD_KEY_PATTERN = re.compile(r"download_([0-9]+)\.html\Z")
GENERATED_SUFFIX = "_gen/"
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def sanitize_email(email: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return UNSAFE_EMAIL_CHARS.sub("_", email)


def build_prefix(email: str) -> str:
    # Distinct emails can sanitize to the same prefix
    return f"{sanitize_email(email)}{GENERATED_SUFFIX}"


def parse_download_timestamp(key: str) -> Optional[int]:
    """
    Extract the number from a key ending in ``download_<digits>.html``.

    :param key: object key to inspect
    :return: the embedded number, or None when the key is not a download page
    """
    match = DOWNLOAD_KEY_PATTERN.search(key)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return 0


def _uploaded_at(entry: ObjectEntry) -> datetime:
    if entry.uploaded is None:
        return EPOCH
    if entry.uploaded.tzinfo is None:
        return entry.uploaded.replace(tzinfo=timezone.utc)
    return entry.uploaded


def select_latest_key(entries: Sequence[ObjectEntry]) -> Optional[str]:
    """
    Pick the key of the newest generated page.

    Download pages (``download_<digits>.html``) win by their embedded number. Only
    when there are none does the newest upload time decide. On ties the entry
    listed first is kept.
    """
    downloads = [entry for entry in entries if parse_download_timestamp(entry.key) is not None]
    if downloads:
        ranked = sorted(downloads, key=lambda entry: parse_download_timestamp(entry.key), reverse=True)
        return ranked[0].key

    if not entries:
        return None
    ranked = sorted(entries, key=_uploaded_at, reverse=True)
    return ranked[0].key


class DownloadResolver:
    """Resolves ``GET /get-download?email=...`` against an object storage."""

    def __init__(self, storage: ObjectStorage, settings: Settings):
        self.storage = storage
        self.public_bucket_url = settings.public_bucket_url
        self.listing_limit = settings.listing_limit

    async def resolve_key(self, email: Optional[str]) -> str:
        """Return the key of the newest page for email, raising DownloadError otherwise."""
        if email is None or email == "":
            raise InputError("Please provide ?email=you@example.com")

        prefix = build_prefix(email)
        listing = await self.storage.list(prefix, self.listing_limit)
        if listing is None or listing.is_empty:
            raise NotFoundError(f"No generated download pages found for email {email}")
        logger.info("Found %d objects under %s", len(listing.objects), prefix)

        chosen_key = select_latest_key(listing.objects)
        if chosen_key is None:
            raise NotFoundError(f"No suitable download HTML found for email {email}")

        logger.info("Selected %s for %s", chosen_key, prefix)
        return chosen_key

    async def deliver(self, key: str) -> Response:
        """Redirect to the public copy of key, or stream its bytes from storage."""
        if self.public_bucket_url:
            return RedirectResponse(f"{self.public_bucket_url}/{key}", status_code=status.HTTP_302_FOUND)

        stored = await self.storage.get(key)
        if stored is None:
            raise NotFoundError(f"Could not retrieve {key}", title="Not found")

        return Response(
            content=stored.body,
            status_code=status.HTTP_200_OK,
            headers={
                "Content-Type": "text/html",
                "Cache-Control": "no-cache",
            },
        )

    @async_log_execution_time
    async def handle(self, email: Optional[str]) -> Response:
        """Validate, list, select and deliver; every failure becomes an HTML response."""
        try:
            key = await self.resolve_key(email)
            return await self.deliver(key)
        except DownloadError as e:
            logger.info("get-download for %r answered %d: %s", email, e.status_code, e.message)
            return render_error(e)
        except Exception as e:
            logger.exception("Error in get-download: %s", e)
            return HTMLResponse(
                f"<h1>Server Error</h1><pre>{html.escape(str(e), quote=False)}</pre>",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )


def render_error(error: DownloadError) -> HTMLResponse:
    return HTMLResponse(
        f"<h1>{error.title}</h1><p>{html.escape(error.message, quote=False)}</p>",
        status_code=error.status_code,
    )
