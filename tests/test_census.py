import pytest

from fiberfinder.core.models import Coordinates
from fiberfinder.vendors import census


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(census, "_SESSION", session)
    return session


def _address_match(**extra):
    match = {"matchedAddress": "123 MAIN ST, SEATTLE, WA, 98101"}
    match.update(extra)
    return {"result": {"addressMatches": [match]}}


def test_geocode_address_returns_block_geoid(patch_session):
    patch_session.response = DummyResponse(
        payload=_address_match(geographies={"2020 Census Blocks": [{"GEOID": "530330001001000"}]})
    )

    assert census.geocode_address("123 Main St, Seattle, WA 98101") == "530330001001000"
    url, params, timeout = patch_session.calls[0]
    assert url.endswith("/geographies/onelineaddress")
    assert params["layers"] == "all"
    assert params["benchmark"] == "2020"
    assert params["vintage"] == "2020"
    assert timeout == 10


def test_geocode_address_no_match(patch_session):
    patch_session.response = DummyResponse(payload={"result": {"addressMatches": []}})
    assert census.geocode_address("nowhere") is None


def test_geocode_address_missing_block_layer(patch_session):
    patch_session.response = DummyResponse(payload=_address_match(geographies={"Counties": [{"GEOID": "53033"}]}))
    assert census.geocode_address("123 Main St") is None


def test_geocode_address_reports_errors(patch_session):
    patch_session.response = DummyResponse(payload={"errors": ["Address cannot be empty"]})
    with pytest.raises(census.CensusGeocoderError):
        census.geocode_address("")


def test_geocode_coordinates(patch_session):
    patch_session.response = DummyResponse(payload=_address_match(coordinates={"x": -122.33, "y": 47.61}))

    assert census.geocode_coordinates("123 Main St") == Coordinates(lat=47.61, lng=-122.33)
    assert "layers" not in patch_session.calls[0][1]


def test_reverse_geocode_reads_census_blocks_layer(patch_session):
    patch_session.response = DummyResponse(
        payload={"result": {"geographies": {"Census Blocks": [{"GEOID": "530330001001000"}]}}}
    )

    assert census.reverse_geocode(Coordinates(lat=47.61, lng=-122.33), timeout=2) == "530330001001000"
    url, params, timeout = patch_session.calls[0]
    assert url.endswith("/geographies/coordinates")
    assert params["x"] == -122.33
    assert params["y"] == 47.61
    assert timeout == 2


def test_reverse_geocode_http_error(patch_session):
    patch_session.response = DummyResponse(status_code=503)
    with pytest.raises(RuntimeError):
        census.reverse_geocode(Coordinates(lat=0.0, lng=0.0))
