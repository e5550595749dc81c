"""Tests for GeocodingClient."""

import pytest
from unittest.mock import Mock, patch
import requests
from services.geocoding_client import GeocodingClient
from schemas.errors import GeocodingUnavailableError, LocationNotFoundError
from schemas.weather import GeocodingResult


def api_response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    return response


PARIS_PAYLOAD = {
    "results": [
        {
            "id": 2988507,
            "name": "Paris",
            "latitude": 48.85341,
            "longitude": 2.3488,
            "country_code": "FR",
            "country": "France",
            "admin1": "Île-de-France",
            "timezone": "Europe/Paris"
        }
    ],
    "generationtime_ms": 0.5
}


class TestGeocodingClient:
    """Test Open-Meteo geocoding lookups."""

    def setup_method(self):
        """Set up test fixtures."""
        self.base_url = "https://geocoding-api.open-meteo.com/v1"
        self.client = GeocodingClient(base_url=self.base_url, timeout=5)

    def test_initialization_with_trailing_slash(self):
        """Test that trailing slash is removed from base URL."""
        client = GeocodingClient(base_url=self.base_url + "/")
        assert client.base_url == self.base_url

    @patch('requests.get')
    def test_get_coordinates_success(self, mock_get):
        """Test successful lookup."""
        mock_get.return_value = api_response(PARIS_PAYLOAD)

        place = self.client.get_coordinates("Paris")

        assert isinstance(place, GeocodingResult)
        assert place.name == "Paris"
        assert place.country_code == "FR"
        assert place.latitude == pytest.approx(48.85341)
        assert place.longitude == pytest.approx(2.3488)
        assert place.timezone == "Europe/Paris"

        call_args = mock_get.call_args
        assert call_args[0][0] == f"{self.base_url}/search"
        assert call_args[1]["params"]["name"] == "Paris"
        assert call_args[1]["params"]["count"] == 1
        assert "countryCode" not in call_args[1]["params"]
        assert call_args[1]["timeout"] == 5

    @patch('requests.get')
    def test_country_code_is_sent_upper_case(self, mock_get):
        """Test the country filter is passed through."""
        mock_get.return_value = api_response(PARIS_PAYLOAD)

        self.client.get_coordinates("Paris", country_code="fr")

        assert mock_get.call_args[1]["params"]["countryCode"] == "FR"

    @patch('requests.get')
    def test_no_results_raises_not_found(self, mock_get):
        """Test an answer without results means the place is unknown."""
        mock_get.return_value = api_response({"generationtime_ms": 0.3})

        with pytest.raises(LocationNotFoundError) as exc_info:
            self.client.get_coordinates("Atlantis")

        assert str(exc_info.value) == "Location not found: Atlantis"
        assert self.client.search("Atlantis") == []

    @patch('requests.get')
    def test_timeout(self, mock_get):
        """Test timeouts become GeocodingUnavailableError."""
        mock_get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(GeocodingUnavailableError, match="timeout after 5s"):
            self.client.get_coordinates("Paris")
        assert "timeout" in self.client.get_last_error()

    @patch('requests.get')
    def test_connection_error(self, mock_get):
        """Test connection failures become GeocodingUnavailableError."""
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(GeocodingUnavailableError, match="Request failed"):
            self.client.search("Paris")

    @patch('requests.get')
    def test_http_error_status(self, mock_get):
        """Test non-200 responses are errors."""
        mock_get.return_value = api_response({"error": True, "reason": "bad"}, status_code=400)

        with pytest.raises(GeocodingUnavailableError, match="status 400"):
            self.client.search("Paris")

    @patch('requests.get')
    def test_invalid_json(self, mock_get):
        """Test an unparseable body is an error."""
        response = api_response(None)
        response.json.side_effect = ValueError("no json")
        mock_get.return_value = response

        with pytest.raises(GeocodingUnavailableError, match="invalid JSON"):
            self.client.search("Paris")

    @patch('requests.get')
    def test_entries_without_coordinates_are_skipped(self, mock_get):
        """Test malformed entries do not break the lookup."""
        mock_get.return_value = api_response({
            "results": [
                {"name": "Nowhere"},
                PARIS_PAYLOAD["results"][0],
            ]
        })

        results = self.client.search("Paris", count=2)

        assert [r.name for r in results] == ["Paris"]

    @patch('requests.get')
    def test_last_error_cleared_on_success(self, mock_get):
        """Test a successful call resets the last error."""
        mock_get.side_effect = [requests.exceptions.Timeout(), api_response(PARIS_PAYLOAD)]

        with pytest.raises(GeocodingUnavailableError):
            self.client.search("Paris")
        self.client.search("Paris")

        assert self.client.get_last_error() is None
