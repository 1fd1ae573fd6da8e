"""
Nominatim (OpenStreetMap) geocoding client.

Usage:
    geocoder = get_geocoder()
    coords = await geocoder.lookup("Pune, Maharashtra, India")  # (lat, lon) or None
"""
import asyncio
import logging
from typing import Optional

import httpx

from tripmate.config import get_settings
from tripmate.services.geo import LatLon

logger = logging.getLogger(__name__)


class Geocoder:

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.nominatim_url).rstrip("/")
        self.user_agent = user_agent or settings.http_user_agent
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def lookup(self, place: str) -> Optional[LatLon]:
        """Resolve a place name to (lat, lon); None when not found or on any failure."""
        if not place or not place.strip():
            return None

        try:
            client = await self._get_client()
            response = await client.get(
                "/search",
                params={"format": "json", "q": place, "limit": 1},
            )
            if response.status_code != 200:
                logger.error(f"Nominatim returned {response.status_code} for '{place}'")
                return None

            data = response.json()
            if not data:
                logger.info(f"No geocoding result for '{place}'")
                return None

            return (float(data[0]["lat"]), float(data[0]["lon"]))

        except httpx.HTTPError as e:
            logger.warning(f"Geocoding request failed for '{place}': {e}")
            return None
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected Nominatim payload for '{place}': {e}")
            return None

    async def lookup_many(self, *places: str) -> list[Optional[LatLon]]:
        return list(await asyncio.gather(*(self.lookup(p) for p in places)))


_geocoder: Optional[Geocoder] = None


def get_geocoder() -> Geocoder:
    global _geocoder
    if _geocoder is None:
        _geocoder = Geocoder()
    return _geocoder


async def shutdown_geocoder():
    global _geocoder
    if _geocoder is not None:
        await _geocoder.close()
        _geocoder = None
