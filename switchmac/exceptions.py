"""Error taxonomy for the collector.

Host-fatal errors (``ConnectFailure``, ``TrustRejected``, ``CommandFailure``)
end one host's contribution and are caught by the fleet collector.
Parser conditions (``ParseTruncation``, ``EmptyOutput``) are never raised
out of the parser; they are recorded as warnings next to the rows.
"""

from __future__ import annotations


class CollectorError(Exception):
    """Base class for all collector errors."""

    def __init__(self, host: str, message: str, stderr: str = "") -> None:
        super().__init__(f"{host}: {message}")
        self.host = host
        self.message = message
        self.stderr = stderr


class ConnectFailure(CollectorError):
    """The client could not start, or exited without producing usable output."""


class TrustRejected(CollectorError):
    """Host-key trust was rejected or the connection was abandoned."""


class CommandFailure(CollectorError):
    """Non-zero client exit not explained by trust negotiation."""


class ParseWarning(CollectorError):
    """Base for non-fatal parser conditions."""

    def __init__(self, host: str, message: str, command: str | None = None) -> None:
        super().__init__(host, message)
        self.command = command


class ParseTruncation(ParseWarning):
    """The transcript ended before the table's closing prompt."""


class EmptyOutput(ParseWarning):
    """Too little output to contain a table."""
