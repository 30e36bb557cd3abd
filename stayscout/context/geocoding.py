"""Location validation collaborators."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CITY_TYPES = ("city", "town", "village")


class LocationValidation(BaseModel):
    """Outcome of validating a raw location string."""

    location: str
    confidence: float
    valid: bool = True
    display_name: str | None = None
    country_code: str | None = None


class LocationValidator(ABC):
    """Abstract base class for location validators."""

    @abstractmethod
    async def validate(self, location: str) -> LocationValidation:
        """Validate and normalise a location.

        Args:
            location: Raw location extracted from the utterance

        Returns:
            LocationValidation with the canonical name and a confidence
        """
        pass


class NominatimConfig(BaseModel):
    """Configuration for the Nominatim validator."""

    base_url: str = "https://nominatim.openstreetmap.org"
    user_agent: str = "stayscout/0.1"
    timeout: float = 3.0
    max_results: int = 5


class NominatimLocationValidator(LocationValidator):
    """Validate locations against an OpenStreetMap Nominatim endpoint."""

    def __init__(self, config: NominatimConfig | None = None, **kwargs: Any) -> None:
        self.config = config or NominatimConfig(**kwargs)
        self.client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers={"User-Agent": self.config.user_agent, "Accept": "application/json"},
        )

    async def validate(self, location: str) -> LocationValidation:
        try:
            response = await self.client.get(
                "/search",
                params={
                    "q": location,
                    "format": "json",
                    "addressdetails": "1",
                    "limit": str(self.config.max_results),
                },
            )
            response.raise_for_status()
            results = response.json()
        except httpx.RequestError as e:
            logger.error(f"Nominatim request failed: {e}")
            raise RuntimeError(f"Failed to validate location: {e}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Nominatim HTTP error: {e}")
            raise RuntimeError(f"Nominatim API error: {e}")

        if not results:
            return LocationValidation(location=location, confidence=0.0, valid=False)

        best = self._select_best(results)
        address = best.get("address") or {}
        name = (
            best.get("name")
            or address.get("city")
            or address.get("town")
            or address.get("village")
            or best.get("display_name", location).split(",")[0]
        )
        return LocationValidation(
            location=name,
            confidence=self._confidence(location, best),
            display_name=best.get("display_name"),
            country_code=(address.get("country_code") or "").upper() or None,
        )

    @staticmethod
    def _select_best(results: list[dict[str, Any]]) -> dict[str, Any]:
        """Prefer populated places, then the highest importance."""

        def rank(result: dict[str, Any]) -> tuple[bool, float]:
            return (result.get("type") in CITY_TYPES, float(result.get("importance") or 0.0))

        return max(results, key=rank)

    @staticmethod
    def _confidence(query: str, result: dict[str, Any]) -> float:
        importance = float(result.get("importance") or 0.5)
        display = (result.get("display_name") or "").lower()
        first_term = query.split(",")[0].strip().lower()
        bonus = 0.3 if first_term and first_term in display else 0.0
        return round(min(1.0, importance + bonus), 2)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()
