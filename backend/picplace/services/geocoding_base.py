"""
PicPlace Backend — Abstract Geocoding Interface
=================================================

What:  Abstract base class for address → coordinates providers.
Why:   PlaceService depends on this contract only, so the provider
       (Nominatim today) can be swapped, or stubbed in tests, without
       touching the place workflow.
How:   Concrete implementations inherit from GeocodingService and implement
       resolve() and health_check().
"""

from abc import ABC, abstractmethod

from picplace.schemas.place import Location


class GeocodingService(ABC):
    """
    Contract:
        - resolve() returns exactly one coordinate pair for an address
        - implementations translate every provider failure into
          GeocodeNotFoundError or GeocodeUnavailableError
        - no retries: the caller treats both errors as terminal for the request
    """

    @abstractmethod
    async def resolve(self, address: str) -> Location:
        """
        Translate a free-text address into latitude/longitude.

        Raises:
            GeocodeNotFoundError: the provider returned zero results (→ 422).
            GeocodeUnavailableError: network, timeout, status or payload error (→ 500).
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the provider answers at all (used by diagnostics only)."""
        ...
