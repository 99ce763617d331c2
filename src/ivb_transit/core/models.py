"""Data models for IVB transit lookups."""

from datetime import datetime
from enum import Enum
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

DEPARTURE_URL = "http://www.ivb.at/index.php?id=276&L=0"


class Station(BaseModel):
    """Represents a transit stop."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name, unique per station list")
    token: str = Field(..., description="Opaque value for departure requests")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Station):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name


class Departure(BaseModel):
    """A single real-time departure entry."""

    model_config = ConfigDict(frozen=True)

    line: str = Field(..., description="Route or line number")
    direction: str = Field(..., description="Destination shown on the board")
    time: str = Field(..., description="Departure time as displayed")

    def __str__(self) -> str:
        return f"{self.line}\t{self.direction}\t\t{self.time}"


class CacheFreshness(Enum):
    """Validity of the in-memory station list."""

    EMPTY = "empty"
    FRESH = "fresh"
    DIRTY = "dirty"


class DepartureRequest(BaseModel):
    """Request model for a departure board query."""

    token: str = Field(..., description="Station token")
    rows: int = Field(8, ge=1, description="Number of departures to request")
    hour: int = Field(..., ge=0, le=23, description="Hour of day")
    minute: int = Field(..., ge=0, le=59, description="Minute of hour")

    @classmethod
    def at(
        cls, token: str, rows: int = 8, when: datetime | None = None
    ) -> "DepartureRequest":
        """Build a request for the given moment (defaults to now)."""
        when = when or datetime.now()
        return cls(token=token, rows=rows, hour=when.hour, minute=when.minute)

    def to_url(self) -> str:
        """Convert to the departure board URL.

        The token is sent twice, as free-text search and as exact stop id.
        """
        token = quote(self.token, safe="")
        params = (
            f"&si[stopsearch]={token}&si[stopid]={token}&si[route]="
            f"&si[opttime]=now&si[hour]={self.hour}&si[minute]={self.minute}"
            f"&si[nrows]={self.rows}"
        )
        return DEPARTURE_URL + params
