"""
Client for a PostgREST-compatible tabular backend (e.g. Supabase).

Every call returns a BackendResponse envelope carrying either the raw body or
an error message. Timeouts raise BackendTimeoutError instead.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .config import BackendConfig
from .errors import BackendTimeoutError

logger = logging.getLogger(__name__)


def _decode_optional(value: Any, name: str) -> Optional[str]:
    """Decode an optional encoded as ``[]`` / ``[value]`` (or a plain value)."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        if len(value) > 1:
            raise ValueError(f"Malformed envelope: '{name}' has {len(value)} values")
        return value[0] if value else None
    return value


@dataclass(frozen=True)
class BackendResponse:
    """Response envelope: optional raw payload and optional error message."""

    data: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_wire(cls, envelope: Dict[str, Any]) -> "BackendResponse":
        """
        Decode an envelope whose optional fields are singleton or empty lists.

        Example: {"data": ["[{...}]"], "error": []}
        """
        return cls(
            data=_decode_optional(envelope.get("data"), "data"),
            error=_decode_optional(envelope.get("error"), "error"),
        )

    def to_wire(self) -> Dict[str, list]:
        return {
            "data": [] if self.data is None else [self.data],
            "error": [] if self.error is None else [self.error],
        }


class BackendClient:
    """Reads from and writes to backend tables over HTTP."""

    def __init__(
        self,
        config: BackendConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    def build_read_url(self, table: str, filter: str = "") -> str:
        """
        Build the read URL. The filter is appended as-is since PostgREST
        operators (``eq.``, ``gt.``) must reach the server unencoded.
        """
        query = "select=*"
        if filter:
            query = f"{query}&{filter}"
        return f"{self.config.table_url(table)}?{query}"

    async def read(self, table: str, filter: str = "") -> BackendResponse:
        """
        Read rows from a table.

        Args:
            table: Canonical table name
            filter: PostgREST filter (``column=op.value``), empty for all rows

        Returns:
            BackendResponse with the raw JSON body or an error message
        """
        url = self.build_read_url(table, filter)
        logger.info(f"Reading {table} ({filter or 'all rows'})")
        return await self._send("GET", url, self.config.get_headers())

    async def write(self, table: str, json_body: str) -> BackendResponse:
        """
        Insert rows into a table.

        Args:
            table: Canonical table name
            json_body: JSON object or array of objects to insert

        Returns:
            BackendResponse with the inserted rows or an error message
        """
        headers = self.config.get_headers()
        headers["Prefer"] = "return=representation"
        logger.info(f"Writing to {table}")
        return await self._send(
            "POST", self.config.table_url(table), headers, content=json_body
        )

    async def _send(
        self, method: str, url: str, headers: dict, content: Optional[str] = None
    ) -> BackendResponse:
        async with self._client() as client:
            try:
                response = await client.request(
                    method, url, headers=headers, content=content
                )
            except httpx.TimeoutException as e:
                logger.warning(f"Backend timed out after {self.config.timeout_ms}ms: {url}")
                raise BackendTimeoutError(
                    f"Backend did not respond within {self.config.timeout_ms}ms"
                ) from e
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error(f"HTTP request to {url} failed: {e}")
                return BackendResponse(error=f"HTTP request failed: {e}")

        body = response.text
        logger.debug(f"Response status: {response.status_code}, body: {body[:200]}")

        if response.is_success:
            return BackendResponse(data=body)

        return BackendResponse(error=f"HTTP {response.status_code} - {body}")
