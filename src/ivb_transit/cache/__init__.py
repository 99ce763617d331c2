"""Station cache and cache file support."""

from .cache_file import CacheFileCodec
from .station_cache import RefreshHandle, StationCache

__all__ = ["CacheFileCodec", "RefreshHandle", "StationCache"]
