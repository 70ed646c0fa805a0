"""
Forward geocoding through the Mapbox places API.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from app.config import Settings
from app.utils.exceptions import GeocodingProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    longitude: float
    latitude: float

    def as_point(self) -> Dict[str, Any]:
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}


class MapboxGeocoder:
    """
    Resolves free-text locations to a single best-match coordinate pair.

    The HTTP client is injected and owned by the caller.
    """

    def __init__(self, client: httpx.AsyncClient, access_token: str, base_url: str):
        self.client = client
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> "MapboxGeocoder":
        return cls(client=client, access_token=settings.map_token, base_url=settings.geocoding_base_url)

    async def resolve(self, query: str) -> Optional[Coordinates]:
        """
        Geocode a location string.

        Args:
            query: Free-text location

        Returns:
            Coordinates of the best match, or None when the provider knows no such place

        Raises:
            GeocodingProviderError: If the provider is unconfigured, unreachable or answers unusably
        """
        query = (query or "").strip()
        if not query:
            return None

        if not self.access_token:
            logger.error("Mapbox access token is missing; geocoding is unavailable")
            raise GeocodingProviderError("Geocoding service is not configured.")

        url = f"{self.base_url}/{quote(query, safe='')}.json"
        try:
            response = await self.client.get(url, params={"access_token": self.access_token, "limit": 1})
        except httpx.TimeoutException as e:
            logger.error(f"Geocoding request timed out for {query!r}: {e}")
            raise GeocodingProviderError() from e
        except httpx.RequestError as e:
            logger.error(f"Geocoding request failed for {query!r}: {e}")
            raise GeocodingProviderError() from e

        if not response.is_success:
            logger.error(f"Geocoding provider answered {response.status_code} for {query!r}")
            raise GeocodingProviderError()

        try:
            features = response.json().get("features") or []
            if not features:
                logger.info(f"No geocoding match for {query!r}")
                return None

            longitude, latitude = features[0]["geometry"]["coordinates"][:2]
            coordinates = Coordinates(longitude=float(longitude), latitude=float(latitude))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Malformed geocoding response for {query!r}: {e}")
            raise GeocodingProviderError() from e

        logger.debug(f"Geocoded {query!r} to {coordinates}")
        return coordinates
