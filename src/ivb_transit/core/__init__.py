"""Core transit lookup functionality."""

from .exceptions import (
    FetchError,
    ParseError,
    StationNotFoundError,
    TransitError,
    ValidationError,
)
from .models import CacheFreshness, Departure, DepartureRequest, Station
from .scraper import HtmlDepartureExtractor, HtmlStationExtractor, SmartInfoScraper

__all__ = [
    "CacheFreshness",
    "Departure",
    "DepartureRequest",
    "Station",
    "HtmlDepartureExtractor",
    "HtmlStationExtractor",
    "SmartInfoScraper",
    "TransitError",
    "FetchError",
    "ParseError",
    "StationNotFoundError",
    "ValidationError",
]
