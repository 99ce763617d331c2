"""Thread-safe in-memory station cache with freshness tracking."""

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor

from ..core.models import CacheFreshness, Station

logger = logging.getLogger(__name__)

StationLoader = Callable[[], dict[str, Station]]


class RefreshHandle:
    """Handle for a background station refresh."""

    def __init__(self, future: "Future[list[Station]]"):
        self._future = future

    def await_result(self, timeout: float | None = None) -> list[Station]:
        """Block until the refresh finishes and return the sorted stations.

        Raises whatever the refresh raised, e.g. FetchError.
        """
        return self._future.result(timeout=timeout)

    def is_done(self) -> bool:
        return self._future.done()


class StationCache:
    """Station name to Station map guarded by a single lock.

    Every operation holds the lock for its whole duration, including the
    network fetch when a refresh is triggered. Readers therefore never see a
    half-replaced map and at most one refresh runs at a time.
    """

    def __init__(
        self, loader: StationLoader, executor: ThreadPoolExecutor | None = None
    ):
        """Initialize the cache.

        Args:
            loader: Callable fetching the complete station list
            executor: Optional worker pool for background refreshes
        """
        self._loader = loader
        self._entries: dict[str, Station] = {}
        self._freshness = CacheFreshness.EMPTY
        self._lock = threading.RLock()
        self._executor = executor
        self._owns_executor = executor is None
        self._executor_lock = threading.Lock()
        self._closed = False

    @property
    def freshness(self) -> CacheFreshness:
        with self._lock:
            return self._freshness

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_all(self) -> list[Station]:
        """Return all stations sorted by name, refreshing unless fresh.

        Raises:
            FetchError: If the refresh fails. The cache is left unchanged.
        """
        with self._lock:
            if self._freshness is not CacheFreshness.FRESH:
                self._refresh()
            return self._sorted()

    def get(self, name: str | None) -> Station | None:
        """Look up a station by exact name.

        Blank names are treated as absent. A refresh is triggered only when
        the cache holds no entries at all; a dirty cache still answers from
        its stale entries.
        """
        if name is None or not name.strip():
            return None

        with self._lock:
            if not self._entries:
                self._refresh()
            return self._entries.get(name)

    def snapshot(self) -> list[Station]:
        """Return the cached stations sorted by name without refreshing."""
        with self._lock:
            return self._sorted()

    def load(self, stations: Iterable[Station]) -> int:
        """Add stations read from a cache file.

        Returns:
            Number of stations added. The cache becomes fresh if non-zero.
        """
        with self._lock:
            count = 0
            for station in stations:
                self._entries[station.name] = station
                count += 1
            if count:
                self._freshness = CacheFreshness.FRESH
            return count

    def mark_dirty(self) -> None:
        """Force a refetch on the next get_all."""
        with self._lock:
            self._freshness = CacheFreshness.DIRTY

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._freshness = CacheFreshness.EMPTY

    def refresh_async(self) -> RefreshHandle:
        """Clear and refetch the stations on a worker thread.

        Calls into the cache from other threads block until the refresh has
        completed or failed. There is no cancellation.

        Raises:
            RuntimeError: If the cache has been closed
        """
        # Separate from the entry lock, which the worker holds while fetching.
        with self._executor_lock:
            if self._closed:
                raise RuntimeError("Station cache is closed")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="station-refresh"
                )
            future = self._executor.submit(self._refresh_in_background)
        return RefreshHandle(future)

    def close(self) -> None:
        """Shut down the worker pool, waiting for a running refresh."""
        with self._executor_lock:
            self._closed = True
            if self._executor is not None and self._owns_executor:
                self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "StationCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _refresh_in_background(self) -> list[Station]:
        with self._lock:
            self.clear()
            return self.get_all()

    def _refresh(self) -> None:
        # Caller holds the lock. The map is only replaced after a complete fetch.
        stations = self._loader()
        self._entries = dict(stations)
        self._freshness = CacheFreshness.FRESH
        logger.info(f"Refreshed station cache with {len(self._entries)} stations")

    def _sorted(self) -> list[Station]:
        return sorted(self._entries.values(), key=lambda station: station.name)
