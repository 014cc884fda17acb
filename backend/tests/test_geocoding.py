from unittest.mock import MagicMock, patch

import pytest
import requests

from domain.models import Coordinate
from services import geocoding as geo
from services.errors import AddressNotFoundError, AddressRequiredError, GeocodingFailedError


def _geocoder():
    return geo.NominatimGeocoder(search_url="http://nominatim.test/search", timeout=1.0)


@patch("services.geocoding._session.get")
def test_geocode_parses_first_match(mock_get):
    mock_resp = MagicMock()
    mock_resp.json.return_value = [{"lat": "19.0596", "lon": "72.8295", "display_name": "Bandra"}]
    mock_resp.raise_for_status.return_value = None
    mock_get.return_value = mock_resp

    coord = _geocoder().geocode("  Bandra, Mumbai ")

    assert coord == Coordinate(19.0596, 72.8295)
    _, kwargs = mock_get.call_args
    assert kwargs["params"] == {"format": "json", "q": "Bandra, Mumbai", "limit": "1"}
    assert kwargs["headers"]["Accept"] == "application/json"
    assert "User-Agent" in kwargs["headers"]


@patch("services.geocoding._session.get")
def test_blank_address_never_hits_network(mock_get):
    with pytest.raises(AddressRequiredError):
        _geocoder().geocode("   ")
    mock_get.assert_not_called()


@patch("services.geocoding._session.get")
def test_zero_matches_is_not_found(mock_get):
    mock_resp = MagicMock()
    mock_resp.json.return_value = []
    mock_resp.raise_for_status.return_value = None
    mock_get.return_value = mock_resp

    with pytest.raises(AddressNotFoundError):
        _geocoder().geocode("Atlantis")


@patch("services.geocoding._session.get")
def test_transport_error_is_geocoding_failure(mock_get):
    mock_get.side_effect = requests.Timeout("slow")
    with pytest.raises(GeocodingFailedError):
        _geocoder().geocode("Chicago")


@patch("services.geocoding._session.get")
def test_bad_json_is_geocoding_failure(mock_get):
    mock_resp = MagicMock()
    mock_resp.raise_for_status.return_value = None
    mock_resp.json.side_effect = ValueError("Expecting value")
    mock_get.return_value = mock_resp
    with pytest.raises(GeocodingFailedError):
        _geocoder().geocode("Chicago")


@patch("services.geocoding._session.get")
def test_malformed_match_is_geocoding_failure(mock_get):
    mock_resp = MagicMock()
    mock_resp.raise_for_status.return_value = None
    mock_resp.json.return_value = [{"display_name": "no coordinates"}]
    mock_get.return_value = mock_resp
    with pytest.raises(GeocodingFailedError):
        _geocoder().geocode("Chicago")


def test_redact_email_hides_contact():
    assert geo._redact_email("app/1.0 (me@example.com)") == "app/1.0 <redacted>"


@patch("services.geocoding._session.get")
def test_error_status_is_geocoding_failure(mock_get):
    mock_resp = MagicMock()
    mock_resp.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
    mock_get.return_value = mock_resp
    with pytest.raises(GeocodingFailedError):
        _geocoder().geocode("Chicago")
    mock_resp.json.assert_not_called()
