"""
Media Resolver
==============
Turns an attachment reference into base64 text for the model.

Reference Kinds:
    - internal  — "/api/media/<key>": key looked up in the blob store
    - bucket    — URL containing "/uploads/" or "r2.dev": the URL path (minus
                  the leading slash) is the blob store key
    - external  — anything else: fetched directly over HTTP

Failure Policy:
    - Missing store, missing object, non-2xx response or any I/O error is
      logged and resolve() returns None
    - resolve() never raises; a missing attachment only removes the
      sub-analysis that needed it
"""
import base64
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from bugscope.core.constants import INTERNAL_BUCKET_MARKERS, INTERNAL_MEDIA_PREFIX
from bugscope.core.errors import MediaFetchError
from bugscope.media.storage import BlobStore
from bugscope.utils.logging_config import log_stage

logger = logging.getLogger(__name__)

INTERNAL = "internal"
BUCKET = "bucket"
EXTERNAL = "external"


@dataclass(frozen=True)
class MediaLocation:
    """Where a reference points: a storage key or an external URL."""
    kind: str
    target: str


def classify(ref: str) -> MediaLocation:
    """Classify a media reference without fetching it."""
    if ref.startswith(INTERNAL_MEDIA_PREFIX):
        return MediaLocation(INTERNAL, ref[len(INTERNAL_MEDIA_PREFIX):])
    if any(marker in ref for marker in INTERNAL_BUCKET_MARKERS):
        return MediaLocation(BUCKET, urlparse(ref).path.lstrip("/"))
    return MediaLocation(EXTERNAL, ref)


class MediaResolver:
    """
    Loads attachment bytes from storage or the network.

    Parameters
    ----------
    storage : BlobStore or None
        Store backing internal and bucket references.
    http_client : httpx.AsyncClient or None
        Client for external references (created lazily when omitted).
    timeout_seconds : float
        Timeout for external fetches.
    """

    def __init__(
        self,
        storage: Optional[BlobStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.storage = storage
        self._http = http_client
        self._owns_http = http_client is None
        self.timeout_seconds = timeout_seconds

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-initialise the HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_http and self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    async def resolve(self, ref: str) -> Optional[str]:
        """
        Resolve a reference to base64 text.

        Returns
        -------
        str or None
            Base64 of the raw bytes, or None when the media is unavailable.
        """
        if not ref:
            return None
        try:
            location = classify(ref)
            with log_stage(logger, "media_resolve", kind=location.kind):
                if location.kind == EXTERNAL:
                    data = await self._fetch_external(location.target)
                else:
                    data = await self._fetch_stored(location.target)
        except MediaFetchError as e:
            logger.warning("Media unavailable for %s: %s", ref, e)
            return None
        except Exception as e:
            logger.error("Error fetching media %s: %s", ref, e)
            return None

        encoded = base64.b64encode(data).decode("ascii")
        logger.info("Media resolved: %d bytes → %d base64 chars", len(data), len(encoded))
        return encoded

    # -------------------------------------------------------------------
    # Fetch helpers
    # -------------------------------------------------------------------
    async def _fetch_stored(self, key: str) -> bytes:
        if self.storage is None:
            raise MediaFetchError("media storage not configured")
        if not key:
            raise MediaFetchError("empty storage key")
        obj = await self.storage.get(key)
        if obj is None:
            raise MediaFetchError(f"object not found: {key}")
        return await obj.read()

    async def _fetch_external(self, url: str) -> bytes:
        http = await self._get_http()
        resp = await http.get(url)
        if not resp.is_success:
            raise MediaFetchError(f"HTTP {resp.status_code} fetching {url}")
        return resp.content
