"""JWKS (JSON Web Key Set) fetching and caching.

Public keys of the token issuer are fetched once and kept in memory until the
cache TTL runs out. Concurrent requests share a single refresh.
"""

import asyncio
import time
from typing import Dict, Optional

import aiohttp
from pydantic import BaseModel

from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)


class JWKKey(BaseModel):
    """JSON Web Key model, RSA or EC."""

    kid: str
    kty: str
    use: Optional[str] = None
    alg: Optional[str] = None
    # RSA
    n: Optional[str] = None
    e: Optional[str] = None
    # EC
    crv: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None


class JWKSResponse(BaseModel):
    keys: list[JWKKey]


class JWKSService:
    """Service for fetching and caching the issuer's signing keys."""

    def __init__(self, jwks_url: str, cache_ttl: int = 3600, timeout: int = 30):
        """Initialize JWKS service.

        Args:
            jwks_url: URL of the issuer's key set
            cache_ttl: Cache time-to-live in seconds
            timeout: HTTP request timeout in seconds
        """
        self.jwks_url = jwks_url
        self.cache_ttl = cache_ttl
        self.timeout = timeout

        self._keys_cache: Optional[Dict[str, JWKKey]] = None
        self._cache_timestamp: Optional[float] = None
        self._lock = asyncio.Lock()

        LOGGER.info(f"JWKS service initialized for {self.jwks_url}")

    async def get_keys(self) -> Dict[str, JWKKey]:
        """Get JWKS keys, using cache if valid.

        Raises:
            RuntimeError: If keys cannot be fetched
        """
        async with self._lock:
            if self._is_cache_valid():
                LOGGER.debug("Using cached JWKS keys")
                return self._keys_cache.copy()

            LOGGER.info("Fetching fresh JWKS keys")
            keys = await self._fetch_keys()
            self._keys_cache = keys.copy()
            self._cache_timestamp = time.time()
            return keys.copy()

    async def get_key(self, kid: str) -> Optional[JWKKey]:
        keys = await self.get_keys()
        return keys.get(kid)

    def _is_cache_valid(self) -> bool:
        if self._keys_cache is None or self._cache_timestamp is None:
            return False
        return time.time() - self._cache_timestamp < self.cache_ttl

    async def _fetch_keys(self) -> Dict[str, JWKKey]:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(self.jwks_url) as response:
                    if response.status != 200:
                        raise RuntimeError(f"JWKS endpoint returned {response.status}: {await response.text()}")
                    data = await response.json()
        except aiohttp.ClientError as e:
            LOGGER.error(f"Network error fetching JWKS: {e}")
            raise RuntimeError(f"Failed to fetch JWKS keys: {e}") from e

        try:
            jwks_response = JWKSResponse(**data)
        except (TypeError, ValueError) as e:
            LOGGER.error(f"Error parsing JWKS response: {e}")
            raise RuntimeError(f"Invalid JWKS response: {e}") from e

        keys = {key.kid: key for key in jwks_response.keys}
        LOGGER.info(f"Successfully fetched {len(keys)} JWKS keys")
        return keys
