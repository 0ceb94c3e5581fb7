"""Supabase (PostgREST) access for bookmark records."""

import logging
from typing import Any

import httpx

from ..exceptions import BookmarkStoreError
from ..models.bookmark import PendingBookmark

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class BookmarkStore:
    """Partial updates and read-only queries against the bookmarks table."""

    def __init__(
        self,
        supabase_url: str,
        api_key: str,
        table: str = "bookmarks",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize bookmark store.

        Args:
            supabase_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Service role (or anon) key
            table: Bookmarks table name
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.endpoint = f"{supabase_url.rstrip('/')}/rest/v1/{table}"
        self.table = table
        self._api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "apikey": self._api_key,
                "Authorization": f"Bearer {self._api_key}",
            },
        )

    async def update_bookmark(self, bookmark_id: str, fields: dict[str, Any]) -> None:
        """Apply a partial update to the bookmark with the given id.

        Args:
            bookmark_id: Primary key of the bookmark
            fields: Column values to set

        Raises:
            BookmarkStoreError: On transport failure or non-2xx response
        """
        try:
            async with self._client() as client:
                response = await client.patch(
                    self.endpoint,
                    params={"id": f"eq.{bookmark_id}"},
                    json=fields,
                    headers={"Prefer": "return=minimal"},
                )
        except httpx.HTTPError as e:
            raise BookmarkStoreError(f"Update of {self.table}/{bookmark_id} failed: {e}") from e

        if response.is_error:
            logger.error(f"Supabase update error ({response.status_code}): {response.text[:500]}")
            raise BookmarkStoreError(
                f"Update of {self.table}/{bookmark_id} returned {response.status_code}",
                status_code=response.status_code,
            )

    async def list_processing(self, limit: int = 50) -> list[PendingBookmark]:
        """List bookmarks whose ai_summary or ai_category is still null.

        Raises:
            BookmarkStoreError: On transport failure or non-2xx response
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    self.endpoint,
                    params={
                        "select": "id,url,title",
                        "or": "(ai_summary.is.null,ai_category.is.null)",
                        "order": "created_at.asc",
                        "limit": str(limit),
                    },
                )
        except httpx.HTTPError as e:
            raise BookmarkStoreError(f"Listing {self.table} failed: {e}") from e

        if response.is_error:
            raise BookmarkStoreError(
                f"Listing {self.table} returned {response.status_code}",
                status_code=response.status_code,
            )

        return [PendingBookmark(**row) for row in response.json()]
