"""High-level client combining the scraper, station cache and cache file."""

from datetime import datetime
from pathlib import Path

from fuzzywuzzy import fuzz, process  # type: ignore[import-untyped]

from .cache import CacheFileCodec, RefreshHandle, StationCache
from .core.exceptions import StationNotFoundError
from .core.models import Departure, Station
from .core.scraper import DEFAULT_ROWS, SmartInfoScraper


class TransitClient:
    """Station and departure lookups backed by a cached station list."""

    def __init__(self, scraper: SmartInfoScraper | None = None, timeout: int = 30):
        """Initialize the client.

        Args:
            scraper: Optional scraper, a new one is created otherwise
            timeout: Request timeout in seconds for a newly created scraper
        """
        self.scraper = scraper or SmartInfoScraper(timeout=timeout)
        self.codec = CacheFileCodec()
        self._cache = StationCache(self.scraper.fetch_stations)

    @property
    def cache(self) -> StationCache:
        return self._cache

    def list_stations(self) -> list[Station]:
        """Get all stations sorted by name."""
        return self._cache.get_all()

    def find_station(self, name: str | None) -> Station | None:
        """Get the station with the given name, or None."""
        return self._cache.get(name)

    def require_station(self, name: str) -> Station:
        """Get the station with the given name.

        Raises:
            StationNotFoundError: If no station has that name
        """
        station = self._cache.get(name)
        if station is None:
            raise StationNotFoundError(name)
        return station

    def departures(
        self,
        station: Station,
        rows: int = DEFAULT_ROWS,
        when: datetime | None = None,
    ) -> list[Departure]:
        """Get the next departures for a station. Never cached."""
        return self.scraper.fetch_departures(station, rows=rows, when=when)

    def invalidate(self) -> None:
        """Refetch the station list the next time it is needed."""
        self._cache.mark_dirty()

    def clear(self) -> None:
        self._cache.clear()

    def refresh_in_background(self) -> RefreshHandle:
        """Refetch the station list on a worker thread."""
        return self._cache.refresh_async()

    def load_cache(self, file_path: Path) -> int:
        """Load stations from a cache file.

        Raises:
            FileNotFoundError: If there is no cache file yet
            OSError: If the file cannot be read
        """
        return self._cache.load(self.codec.read(file_path))

    def save_cache(self, file_path: Path) -> None:
        """Write the full station list to a cache file.

        The list comes from list_stations, so a stale cache is refetched
        before it is written.
        """
        self.codec.write(file_path, self.list_stations())

    def suggest_stations(
        self, name: str, limit: int = 5, threshold: int = 60
    ) -> list[Station]:
        """Suggest cached stations with names similar to the given one.

        Only the stations already in memory are considered.
        """
        stations = {station.name: station for station in self._cache.snapshot()}
        if not name or not stations:
            return []

        matches = process.extract(name, list(stations), limit=limit, scorer=fuzz.ratio)
        return [stations[match] for match, score in matches if score >= threshold]

    def close(self) -> None:
        self._cache.close()

    def __enter__(self) -> "TransitClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
