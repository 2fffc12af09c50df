from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from domain.models import PhotoCategory
from domain.value_objects import PhotoUpload
from services.observability.metrics import timing_metric

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObjectStore(Protocol):
    async def upload(self, key: str, data: bytes, content_type: str) -> str: ...


@dataclass(frozen=True)
class Settled(Generic[T]):
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_photo_key(category: PhotoCategory | str, filename: str, now_ms: int | None = None) -> str:
    """``<category>_photos/<upload-ms>_<filename>``; the timestamp keeps repeated names apart."""
    cat = PhotoCategory(category).value
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{cat}_photos/{ts}_{filename}"


def build_photo_keys(
    category: PhotoCategory | str, filenames: Iterable[str], now_ms: int | None = None
) -> list[str]:
    """
    Keys for one batch of uploads sharing a single timestamp.

    A filename seen again in the batch is moved to the next free millisecond,
    so every upload in the batch writes to a key of its own.
    """
    base = now_ms if now_ms is not None else int(time.time() * 1000)
    taken: set[str] = set()
    keys = []
    for name in filenames:
        ts = base
        while (key := build_photo_key(category, name, ts)) in taken:
            ts += 1
        taken.add(key)
        keys.append(key)
    return keys


async def upload_photo(store: ObjectStore, key: str, photo: PhotoUpload) -> str:
    with timing_metric(f"upload {key}"):
        return await store.upload(key, photo.content, photo.content_type)


async def settle_all(aws: Iterable[Awaitable[Any]]) -> list[Settled[Any]]:
    """Run every awaitable concurrently and collect each outcome; never fails fast."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    out: list[Settled[Any]] = []
    for r in results:
        if isinstance(r, asyncio.CancelledError):
            raise r
        if isinstance(r, BaseException):
            out.append(Settled(error=r))
        else:
            out.append(Settled(value=r))
    return out
