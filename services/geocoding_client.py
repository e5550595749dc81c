"""Open-Meteo geocoding client."""

import logging
from typing import List, Optional

import requests

from schemas.errors import GeocodingUnavailableError, LocationNotFoundError
from schemas.weather import GeocodingResult

logger = logging.getLogger(__name__)


class GeocodingClient:
    """
    Resolves place names to coordinates via the Open-Meteo geocoding API.

    No API key is needed. Lookup failures are raised as typed errors so
    the tool layer can hand them back to the model as information.
    """

    DEFAULT_BASE_URL = "https://geocoding-api.open-meteo.com/v1"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        language: str = "en"
    ):
        """
        Initialize geocoding client.

        Args:
            base_url: Base URL of the geocoding API
            timeout: Request timeout in seconds (default: 10)
            language: Language for returned place names
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.language = language
        self._last_error: Optional[str] = None

    def _get_headers(self) -> dict:
        """Build request headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "Weather-Chat-Assistant/1.0"
        }

    def _fail(self, message: str) -> GeocodingUnavailableError:
        self._last_error = message
        logger.warning(f"Geocoding API error: {message}")
        return GeocodingUnavailableError(message)

    def search(
        self,
        city_name: str,
        country_code: Optional[str] = None,
        count: int = 1
    ) -> List[GeocodingResult]:
        """
        Search places by name.

        Args:
            city_name: Place name to look up
            country_code: Optional ISO 3166-1 alpha-2 code to restrict results
            count: Maximum number of results

        Returns:
            Matching places, best match first (may be empty)

        Raises:
            GeocodingUnavailableError: If the API cannot be reached or answers badly
        """
        params = {
            "name": city_name,
            "count": count,
            "language": self.language,
            "format": "json"
        }
        if country_code:
            params["countryCode"] = country_code.upper()

        url = f"{self.base_url}/search"
        try:
            response = requests.get(
                url,
                params=params,
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise self._fail(f"Request timeout after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise self._fail(f"Request failed: {e}") from e

        if response.status_code != 200:
            raise self._fail(f"API returned status {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise self._fail("API returned invalid JSON") from e

        if not isinstance(data, dict):
            raise self._fail(f"Unexpected API response format: {type(data).__name__}")

        results = []
        # The "results" key is omitted entirely when nothing matches
        for item in data.get("results") or []:
            place = self._parse_place(item)
            if place:
                results.append(place)

        self._last_error = None
        return results

    def get_coordinates(
        self,
        city_name: str,
        country_code: Optional[str] = None
    ) -> GeocodingResult:
        """
        Resolve a place name to its best match.

        Raises:
            LocationNotFoundError: If no place matches
            GeocodingUnavailableError: If the API cannot be reached or answers badly
        """
        results = self.search(city_name, country_code=country_code, count=1)
        if not results:
            logger.info(f"No geocoding match for {city_name!r} (country={country_code})")
            raise LocationNotFoundError(city_name, country_code)
        return results[0]

    def _parse_place(self, item: dict) -> Optional[GeocodingResult]:
        """Parse one API result; skip entries without coordinates."""
        try:
            return GeocodingResult(
                name=item["name"],
                country=item.get("country"),
                country_code=item.get("country_code"),
                admin1=item.get("admin1"),
                latitude=float(item["latitude"]),
                longitude=float(item["longitude"]),
                timezone=item.get("timezone")
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to parse geocoding result: {e}")
            return None

    def get_last_error(self) -> Optional[str]:
        """Get the last error message."""
        return self._last_error
