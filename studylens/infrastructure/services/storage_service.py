import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

import httpcore
import httpx

from studylens.core.settings import settings
from studylens.domain.exceptions import SignedUrlError
from studylens.infrastructure.caching.signed_url_cache import SignedUrlCache
from studylens.infrastructure.supabase.client import (
    get_async_supabase_client,
    reset_async_supabase_client,
)

logger = logging.getLogger(__name__)

# Transport failures worth a retry with a fresh client
TRANSIENT_ERRORS = (
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.ConnectError,
    httpx.WriteError,
    httpcore.ConnectTimeout,
    httpcore.ReadTimeout,
    httpcore.WriteError,
    ConnectionResetError,
)


def _extract_signed_url(response: Any) -> Optional[str]:
    if isinstance(response, dict):
        return response.get("signedURL") or response.get("signedUrl") or response.get("signed_url")
    return getattr(response, "signed_url", None) or getattr(response, "signedURL", None)


class StorageService:
    def __init__(
        self,
        bucket_name: Optional[str] = None,
        url_cache: Optional[SignedUrlCache] = None,
        client: Optional[Any] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.bucket_name = bucket_name or settings.STUDY_STORAGE_BUCKET
        self.url_cache = url_cache if url_cache is not None else SignedUrlCache()
        self.max_retries = settings.STORAGE_MAX_RETRIES
        self.base_delay_seconds = settings.STORAGE_BASE_DELAY_SECONDS
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    async def get_client(self):
        if self._client is None:
            self._client = await get_async_supabase_client()
        return self._client

    async def _reset_client(self):
        """Drops the cached client so the next attempt opens fresh connections."""
        if not self._owns_client:
            return
        logger.warning("[StorageService] Resetting shared Supabase client after transport error")
        reset_async_supabase_client()
        self._client = None

    async def get_signed_url(self, storage_path: str) -> str:
        """
        Returns a time-limited URL for `storage_path`, served from the cache
        while the previous one is still comfortably valid.
        """
        cached = self.url_cache.get(storage_path)
        if cached is not None:
            return cached.value

        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                client = await self.get_client()
                response = await client.storage.from_(self.bucket_name).create_signed_url(
                    storage_path, settings.SIGNED_URL_TTL_SECONDS
                )
            except TRANSIENT_ERRORS as e:
                last_error = e
                await self._reset_client()
                if attempt == self.max_retries:
                    break
                delay = self.base_delay_seconds * (2 ** (attempt - 1))
                logger.warning(
                    f"[StorageService] Transient error on attempt {attempt}/{self.max_retries}: "
                    f"{type(e).__name__}. Retrying in {delay:.1f}s"
                )
                await self._sleep(delay)
                continue
            except Exception as e:
                logger.error(f"[StorageService] Signed URL request failed for {storage_path}: {e}")
                raise SignedUrlError(
                    "Failed to get signed URL", details={"storage_path": storage_path}
                ) from e

            url = _extract_signed_url(response)
            if not url:
                raise SignedUrlError("Failed to get signed URL", details={"storage_path": storage_path})

            self.url_cache.set(storage_path, url, settings.signed_url_cache_seconds)
            return url

        logger.error(f"[StorageService] Signed URL failed after {self.max_retries} attempts: {storage_path}")
        raise SignedUrlError(
            "Failed to get signed URL", details={"storage_path": storage_path}
        ) from last_error

    async def get_multiple_signed_urls(self, storage_paths: Iterable[str]) -> Dict[str, str]:
        """Resolves many paths concurrently; paths that fail are logged and left out."""
        paths = list(dict.fromkeys(storage_paths))

        async def _resolve(path: str) -> Optional[str]:
            try:
                return await self.get_signed_url(path)
            except SignedUrlError as e:
                logger.error(f"[StorageService] Failed to get URL for {path}: {e}")
                return None

        urls = await asyncio.gather(*(_resolve(path) for path in paths))
        return {path: url for path, url in zip(paths, urls) if url}

    def clear_cache(self) -> None:
        self.url_cache.clear()
