"""Custom exceptions for IVB transit lookups."""


class TransitError(Exception):
    """Base exception for transit lookup errors."""

    pass


class FetchError(TransitError):
    """Raised when a page cannot be fetched or has an unexpected structure."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(FetchError):
    """Raised when the station page does not have the expected structure."""

    pass


class StationNotFoundError(TransitError):
    """Raised when a station name cannot be found."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Station not found: "{name}"')


class ValidationError(TransitError):
    """Raised when input validation fails."""

    pass
