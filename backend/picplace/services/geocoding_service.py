"""
PicPlace Backend — Nominatim Geocoding Client
===============================================

What:  Resolves a place address into coordinates with OpenStreetMap Nominatim.
Why:   Clients submit a human-readable address; location is always derived
       server-side and never trusted from the request.
How:   GET {GEOCODER_URL}?q=<address>&format=json&limit=1 via httpx with the
       configured User-Agent and timeout. The first result's lat/lon strings
       become floats.

Failure mapping:
    []                                   → GeocodeNotFoundError (422)
    timeout / connect error / non-2xx    → GeocodeUnavailableError (500)
    body not JSON or missing lat/lon     → GeocodeUnavailableError (500)
"""

import logging
from typing import Optional

import httpx

from picplace.config import settings
from picplace.exceptions import GeocodeNotFoundError, GeocodeUnavailableError
from picplace.schemas.place import Location
from picplace.services.geocoding_base import GeocodingService

logger = logging.getLogger(__name__)


class NominatimGeocoder(GeocodingService):
    """
    Nominatim search API client.

    A fresh AsyncClient is opened per lookup: geocoding happens once per
    create-place request, so there is no connection reuse worth pooling.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            transport: Override the HTTP transport (tests pass httpx.MockTransport).
        """
        self.base_url = base_url or settings.geocoder_url
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout or settings.geocoder_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            transport=self._transport,
        )

    async def resolve(self, address: str) -> Location:
        params = {"q": address, "format": "json", "limit": 1}
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Geocoder returned HTTP %d", exc.response.status_code)
            raise GeocodeUnavailableError(
                context={"status_code": exc.response.status_code}
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Geocoder request failed: %s: %s", type(exc).__name__, exc)
            raise GeocodeUnavailableError(context={"error_type": type(exc).__name__}) from exc

        try:
            results = response.json()
        except ValueError as exc:
            logger.error("Geocoder returned a non-JSON body")
            raise GeocodeUnavailableError(context={"error_type": "invalid_json"}) from exc

        if not results:
            logger.info("Geocoder found no match for the submitted address")
            raise GeocodeNotFoundError(address)

        try:
            first = results[0]
            location = Location(lat=float(first["lat"]), lng=float(first["lon"]))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Geocoder payload has no usable coordinates (%s)", type(results).__name__)
            raise GeocodeUnavailableError(context={"error_type": "malformed_payload"}) from exc

        logger.debug("Geocoded address to (%.6f, %.6f)", location.lat, location.lng)
        return location

    async def health_check(self) -> bool:
        try:
            async with self._client() as client:
                response = await client.get(
                    self.base_url, params={"q": "London", "format": "json", "limit": 1}
                )
            return response.status_code < 500
        except httpx.HTTPError as exc:
            logger.warning("Geocoder health check failed: %s", exc)
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
geocoding_service: GeocodingService = NominatimGeocoder()
