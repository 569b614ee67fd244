"""Error types raised by the data-access services."""

from typing import Optional


class ElectionDataError(Exception):
    """Base class for errors raised while loading election data."""


class NetworkError(ElectionDataError):
    """Transport or HTTP failure talking to an upstream."""


class FetchFailed(NetworkError):
    """An upstream answered with a non-success HTTP status."""

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.reason = reason or ""
        super().__init__(f"Failed to fetch {url}: {status_code} {self.reason}".rstrip())


class ParseError(ElectionDataError):
    """A response body or stored document had an unexpected shape."""


class NotFound(ElectionDataError):
    """The requested entity is absent from an otherwise successful fetch."""


class UpstreamUnavailable(ElectionDataError):
    """An upstream reported its own error status."""


class RSSFetchError(UpstreamUnavailable):
    """The RSS proxy returned a non-ok envelope."""
