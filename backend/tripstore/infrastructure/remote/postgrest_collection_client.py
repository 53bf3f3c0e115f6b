"""PostgREST client — implements the RemoteCollectionClient interface over HTTP.

Talks to a PostgREST-compatible table API (such as the one Supabase exposes
under ``/rest/v1``) using httpx. Each collection maps to the table of the
same name.
"""

import logging
from typing import Any

import httpx

from tripstore.application.interfaces import RemoteCollectionClient
from tripstore.domain.entities import Record
from tripstore.domain.exceptions import RecordNotFoundError, RemoteError, RemoteUnavailableError

logger = logging.getLogger(__name__)

# gateway failures mean the table service itself is out of reach
_UNAVAILABLE_STATUSES = frozenset({502, 503, 504})


class PostgrestCollectionClient(RemoteCollectionClient):
    """Infrastructure adapter — one remote table behind a PostgREST endpoint.

    An injected ``http_client`` is shared and left open; otherwise a client
    is created per call and closed afterwards.
    """

    def __init__(
        self,
        collection: str,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(collection)
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client

    @property
    def table_url(self) -> str:
        return f"{self._base_url}/{self.collection}"

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "return=representation",
        }
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.request(
                method,
                self.table_url,
                params=params,
                json=json,
                headers=self._get_headers(),
            )
        except httpx.TransportError as exc:
            raise RemoteUnavailableError(self.collection, f"{type(exc).__name__}: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code >= 400:
            self._raise_remote_error(response)
        if not response.content:
            return None
        return response.json()

    def _raise_remote_error(self, response: httpx.Response) -> None:
        """Raise the domain error matching a failed PostgREST response."""
        message = response.text
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("hint") or message

        if response.status_code in _UNAVAILABLE_STATUSES:
            raise RemoteUnavailableError(self.collection, f"HTTP {response.status_code}: {message}")
        raise RemoteError(self.collection, message, status_code=response.status_code)

    async def list_records(self) -> list[Record]:
        rows = await self._request("GET", params={"select": "*", "order": "created_at.desc"})
        return list(rows or [])

    async def insert(self, record: Record) -> Record:
        rows = await self._request("POST", json=record)
        if not rows:
            raise RemoteError(self.collection, "insert returned no representation")
        return rows[0] if isinstance(rows, list) else rows

    async def update(self, record_id: str, changes: Record) -> Record:
        rows = await self._request("PATCH", params={"id": f"eq.{record_id}"}, json=changes)
        if not rows:
            raise RecordNotFoundError(self.collection, record_id)
        return rows[0] if isinstance(rows, list) else rows

    async def remove(self, record_id: str) -> None:
        await self._request("DELETE", params={"id": f"eq.{record_id}"})
        logger.debug("Removed %s/%s", self.collection, record_id)
