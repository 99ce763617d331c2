"""IVB smartinfo scraper: station list and real-time departure boards."""

import logging
import re
from datetime import datetime

import requests
from bs4 import BeautifulSoup, Tag

from .exceptions import FetchError, ParseError, ValidationError
from .models import Departure, DepartureRequest, Station

logger = logging.getLogger(__name__)

STATION_LIST_URL = "http://www.ivb.at/de/services/smartinfo/smartinfoonline.html"

# The operator serves its pages in a legacy Western European charset
DEFAULT_CHARSET = "windows-1252"

STATION_FORM_ID = "smartinfoformular"
REALTIME_ROW_CLASS = "echtzeitzeile"
ROUTE_ID_PREFIX = "siroute_"
DIRECTION_ID_PREFIX = "sidir_"
TIME_ID_PREFIX = "sitime_"

DEFAULT_ROWS = 8

TIME_PATTERN = re.compile(r"\d|jetzt|sofort", re.IGNORECASE)


def _clean_text(element: Tag) -> str:
    """Collapse whitespace runs and trim, the way browsers render text."""
    return " ".join(element.get_text().split())


class HtmlStationExtractor:
    """Parses the station list page into stations keyed by name."""

    def parse(
        self, content: bytes, encoding: str = DEFAULT_CHARSET, url: str = ""
    ) -> dict[str, Station]:
        """Extract all stations from the station form.

        Args:
            content: Raw page body
            encoding: Character set the page is encoded in
            url: Source URL, used in error messages

        Returns:
            Stations keyed by name. Later duplicates replace earlier ones.

        Raises:
            ParseError: If the station form is missing from the page
        """
        soup = BeautifulSoup(content, "html.parser", from_encoding=encoding)

        forms = soup.find_all(id=STATION_FORM_ID)
        if not forms:
            raise ParseError(url or STATION_LIST_URL, "expected container not found")

        stations: dict[str, Station] = {}
        for form in forms:
            select = form.find("select")
            if select is None:
                continue
            for option in select.find_all("option"):
                station = Station(
                    name=_clean_text(option), token=option.get("value", "")
                )
                stations[station.name] = station

        logger.debug(f"Extracted {len(stations)} stations")
        return stations


class HtmlDepartureExtractor:
    """Parses a departure board page into departures in document order."""

    def parse(
        self,
        content: bytes,
        rows: int = DEFAULT_ROWS,
        encoding: str = DEFAULT_CHARSET,
    ) -> list[Departure]:
        """Extract departures from the real-time rows of a board page.

        Rows with missing or malformed fields are skipped; this never fails
        for a partially readable board.
        """
        soup = BeautifulSoup(content, "html.parser", from_encoding=encoding)

        departures: list[Departure] = []
        for index, row in enumerate(soup.find_all(class_=REALTIME_ROW_CLASS)):
            if len(departures) >= rows:
                break
            departure = self._parse_row(row, index)
            if departure is None:
                logger.debug(f"Skipping malformed departure row {index}")
                continue
            departures.append(departure)

        return departures

    def _parse_row(self, row: Tag, index: int) -> Departure | None:
        """Parse one real-time row, or return None if it is unusable."""
        route_element = row.find(id=f"{ROUTE_ID_PREFIX}{index}")
        direction_element = row.find(id=f"{DIRECTION_ID_PREFIX}{index}")
        time_element = row.find(id=f"{TIME_ID_PREFIX}{index}")
        if route_element is None or direction_element is None or time_element is None:
            return None

        line = _clean_text(route_element)
        direction = _clean_text(direction_element)
        time_text = _clean_text(time_element)
        if not line or not direction or not TIME_PATTERN.search(time_text):
            return None

        return Departure(line=line, direction=direction, time=time_text)


class SmartInfoScraper:
    """Fetches IVB smartinfo pages and hands them to the extractors."""

    def __init__(self, timeout: int = 30, session: requests.Session | None = None):
        """Initialize the scraper.

        Args:
            timeout: Request timeout in seconds
            session: Optional pre-configured HTTP session
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "de-AT,de;q=0.9,en;q=0.8",
            }
        )
        self.station_extractor = HtmlStationExtractor()
        self.departure_extractor = HtmlDepartureExtractor()

    def fetch_stations(self) -> dict[str, Station]:
        """Fetch and parse the full station list.

        Raises:
            FetchError: If the request fails
            ParseError: If the page structure is not recognised
        """
        logger.info(f"Fetching station list: {STATION_LIST_URL}")
        content = self._fetch_page(STATION_LIST_URL)
        return self.station_extractor.parse(content, DEFAULT_CHARSET, STATION_LIST_URL)

    def fetch_departures(
        self,
        station: Station,
        rows: int = DEFAULT_ROWS,
        when: datetime | None = None,
    ) -> list[Departure]:
        """Fetch the next departures for a station.

        Args:
            station: Station to query
            rows: Maximum number of departures
            when: Moment to query for, defaults to the current wall clock

        Raises:
            ValidationError: If rows is not positive
            FetchError: If the request fails
        """
        if rows < 1:
            raise ValidationError("Number of rows must be at least 1")

        request = DepartureRequest.at(station.token, rows=rows, when=when)
        url = request.to_url()
        logger.info(f"Fetching departures for {station.name}: {url}")
        content = self._fetch_page(url)
        return self.departure_extractor.parse(content, rows, DEFAULT_CHARSET)

    def _fetch_page(self, url: str) -> bytes:
        """Issue a GET request and return the raw body."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        except requests.exceptions.RequestException as e:
            raise FetchError(url, str(e)) from e
