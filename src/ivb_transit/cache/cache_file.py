"""Line-oriented station cache file format.

Example::

    # comment lines are ignored
    [Stations]
    Hauptbahnhof=1234
    Marktplatz=5678
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from ..core.models import Station

logger = logging.getLogger(__name__)

HEADER = (
    "# Automatically generated cache file. Do not edit manually, "
    "because the contents will be overwritten"
)
STATIONS_SECTION = "stations"


class CacheFileCodec:
    """Reads and writes the station cache file."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def loads(self, text: str) -> list[Station]:
        """Parse cache file contents.

        Unknown sections, lines outside a section and lines without ``=`` are
        logged and skipped; they never abort the load.
        """
        stations: list[Station] = []
        section: str | None = None

        for line_number, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("[") and line.endswith("]"):
                if len(line) == 2:
                    continue
                name = line[1:-1].strip().lower()
                if name == STATIONS_SECTION:
                    section = name
                else:
                    section = None
                    logger.warning(f"Cache file: line {line_number} - unknown section")
                continue

            if section != STATIONS_SECTION:
                logger.warning(
                    f"Cache file: line {line_number} - line outside of a section"
                )
                continue

            # Only leading whitespace is dropped, tokens keep their trailing spaces.
            name, sep, token = raw_line.lstrip().partition("=")
            if not sep:
                logger.warning(f"Cache file: line {line_number} - illegal format")
                continue
            stations.append(Station(name=name, token=token))

        return stations

    def dumps(self, stations: Iterable[Station]) -> str:
        """Render stations in cache file format."""
        lines = [HEADER, "", "[Stations]"]
        lines.extend(f"{station.name}={station.token}" for station in stations)
        return "\n".join(lines) + "\n"

    def read(self, file_path: Path) -> list[Station]:
        """Read stations from a cache file.

        Raises:
            FileNotFoundError: If the file does not exist yet
            OSError: For any other I/O failure, or content that is not valid
                text in the codec encoding
        """
        try:
            with open(file_path, encoding=self.encoding) as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise OSError(
                f"Cache file {file_path} is not valid {self.encoding}: {e.reason}"
            ) from e
        stations = self.loads(text)

        logger.info(f"Loaded {len(stations)} stations from {file_path}")
        return stations

    def write(self, file_path: Path, stations: Iterable[Station]) -> None:
        """Write stations to a cache file, replacing any existing content."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        stations = list(stations)
        with open(file_path, "w", encoding=self.encoding) as f:
            f.write(self.dumps(stations))

        logger.info(f"Saved {len(stations)} stations to {file_path}")
