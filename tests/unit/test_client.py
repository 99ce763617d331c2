"""Tests for the high-level transit client."""

from datetime import datetime
from unittest.mock import Mock

import pytest
import responses

from ivb_transit.client import TransitClient
from ivb_transit.core.exceptions import FetchError, StationNotFoundError
from ivb_transit.core.models import CacheFreshness, Departure, Station
from ivb_transit.core.scraper import STATION_LIST_URL, SmartInfoScraper


@pytest.fixture
def scraper(sample_stations):
    """Scraper double returning the sample stations."""
    scraper = Mock(spec=SmartInfoScraper)
    scraper.fetch_stations.return_value = dict(sample_stations)
    scraper.fetch_departures.return_value = [
        Departure(line="1", direction="Mühlau", time="3 min")
    ]
    return scraper


@pytest.fixture
def client(scraper):
    with TransitClient(scraper=scraper) as client:
        yield client


class TestTransitClient:
    """Test cases for TransitClient class."""

    def test_default_scraper(self):
        """A scraper with the given timeout is created by default."""
        with TransitClient(timeout=5) as client:
            assert isinstance(client.scraper, SmartInfoScraper)
            assert client.scraper.timeout == 5

    def test_list_stations(self, client, scraper):
        """Stations are fetched once and returned sorted."""
        names = [s.name for s in client.list_stations()]
        client.list_stations()

        assert names == sorted(names)
        scraper.fetch_stations.assert_called_once()

    def test_find_station(self, client):
        """Stations are found by exact name."""
        assert client.find_station("Hauptbahnhof").token == "1001"
        assert client.find_station("hauptbahnhof") is None
        assert client.find_station("") is None

    def test_require_station(self, client):
        """Unknown names raise instead of returning None."""
        assert client.require_station("Hauptbahnhof").token == "1001"
        with pytest.raises(StationNotFoundError, match="Atlantis"):
            client.require_station("Atlantis")

    def test_departures(self, client, scraper):
        """Departures are delegated to the scraper and never cached."""
        station = Station(name="Hauptbahnhof", token="1001")
        when = datetime(2024, 5, 1, 8, 0)

        client.departures(station, rows=3, when=when)
        client.departures(station, rows=3, when=when)

        assert scraper.fetch_departures.call_count == 2
        scraper.fetch_departures.assert_called_with(station, rows=3, when=when)

    def test_invalidate(self, client, scraper):
        """Invalidating forces a refetch on the next listing."""
        client.list_stations()
        client.invalidate()

        assert client.cache.freshness is CacheFreshness.DIRTY
        client.list_stations()
        assert scraper.fetch_stations.call_count == 2

    def test_clear(self, client):
        """Clearing empties the cache."""
        client.list_stations()
        client.clear()
        assert client.cache.freshness is CacheFreshness.EMPTY

    def test_refresh_in_background(self, client, scraper):
        """The background refresh returns the fetched stations."""
        stations = client.refresh_in_background().await_result(timeout=5)
        assert len(stations) == 4
        scraper.fetch_stations.assert_called_once()

    def test_save_and_load_cache(self, scraper, sample_stations, cache_file):
        """A saved cache lets a new client answer without fetching."""
        with TransitClient(scraper=scraper) as client:
            client.save_cache(cache_file)

        fresh_scraper = Mock(spec=SmartInfoScraper)
        with TransitClient(scraper=fresh_scraper) as client:
            assert client.load_cache(cache_file) == 4
            assert [s.name for s in client.list_stations()] == sorted(sample_stations)
            assert client.find_station("Anichstraße / Rathausgalerien").token == "id=1004"

        fresh_scraper.fetch_stations.assert_not_called()

    def test_save_cache_refreshes_dirty_cache(self, client, scraper, cache_file):
        """Saving a dirty cache fetches an authoritative list first."""
        client.list_stations()
        client.invalidate()
        client.save_cache(cache_file)

        assert scraper.fetch_stations.call_count == 2

    def test_load_missing_cache(self, client, tmp_path):
        """A missing cache file is reported to the caller."""
        with pytest.raises(FileNotFoundError):
            client.load_cache(tmp_path / "missing.cache")
        assert client.cache.freshness is CacheFreshness.EMPTY

    def test_suggest_stations(self, client):
        """Similar names are suggested from the cached stations."""
        client.list_stations()
        suggestions = client.suggest_stations("Hauptbahnhf")
        assert suggestions[0].name == "Hauptbahnhof"

    def test_suggest_stations_does_not_fetch(self, client, scraper):
        """Suggestions never trigger a fetch."""
        assert client.suggest_stations("Hauptbahnhof") == []
        scraper.fetch_stations.assert_not_called()

    def test_fetch_error_propagates(self, client, scraper):
        """Fetch failures reach the caller."""
        scraper.fetch_stations.side_effect = FetchError(STATION_LIST_URL, "timed out")
        with pytest.raises(FetchError):
            client.list_stations()

    @responses.activate
    def test_end_to_end_station_lookup(self, station_page_html):
        """A real scraper feeds the cache from the station page."""
        responses.add(responses.GET, STATION_LIST_URL, body=station_page_html, status=200)

        with TransitClient() as client:
            assert client.find_station("Höttinger Au").token == "1003"
            assert len(client.list_stations()) == 4

        assert len(responses.calls) == 1
