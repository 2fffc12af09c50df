from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import quote

import httpx

from core.config import settings

TokenSource = Callable[[], dict[str, str]]


class StoreError(Exception):
    """A backend call failed; ``str()`` is the message to show the user."""


def _raise_for(r: httpx.Response) -> None:
    if r.status_code < 400:
        return
    try:
        detail = r.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, dict):
        detail = detail.get("message")
    raise StoreError(str(detail or f"HTTP {r.status_code} {r.reason_phrase}"))


class _BaseClient:
    def __init__(
        self,
        auth: TokenSource,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._auth = auth
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_S
        self._shared: httpx.AsyncClient | None = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        )

    async def __aenter__(self):
        """Keep one connection pool open for every call made inside the block."""
        self._shared = self._new_client()
        return self

    async def __aexit__(self, *exc) -> None:
        shared, self._shared = self._shared, None
        if shared is not None:
            await shared.aclose()

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._shared is not None:
            yield self._shared
        else:
            async with self._new_client() as client:
                yield client


class ObjectStoreClient(_BaseClient):
    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``key``; returns its public URL."""
        try:
            async with self._client() as client:
                r = await client.put(
                    f"/storage/{quote(key)}",
                    content=data,
                    headers={"Content-Type": content_type, **self._auth()},
                )
        except httpx.HTTPError as e:
            raise StoreError(f"upload failed: {e}") from e
        _raise_for(r)
        return r.json()["url"]


class DocumentStoreClient(_BaseClient):
    async def add(self, collection: str, document: dict[str, Any]) -> str:
        try:
            async with self._client() as client:
                r = await client.post(f"/{collection}", json=document, headers=self._auth())
        except httpx.HTTPError as e:
            raise StoreError(f"write failed: {e}") from e
        _raise_for(r)
        return r.json()["id"]

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        try:
            async with self._client() as client:
                r = await client.get(f"/{collection}", headers=self._auth())
        except httpx.HTTPError as e:
            raise StoreError(f"read failed: {e}") from e
        _raise_for(r)
        return r.json()
