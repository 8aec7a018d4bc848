"""Request error taxonomy shared by every client call."""

from enum import Enum

NETWORK_ERROR_MESSAGE = "Network error: Unable to connect to the server"


class ErrorKind(str, Enum):
    """Kind of request failure."""

    validation = "validation"  # client-side precondition, never sent
    server = "server"  # non-2xx response
    network = "network"  # no response obtained
    unknown = "unknown"


class RequestError(Exception):
    """Single error shape surfaced by the transport and API client.

    Attributes:
        status: HTTP status, or 0 when no response was obtained
        message: Human-readable message, safe to display
        details: Raw response body or other diagnostic context
        kind: Taxonomy tag
    """

    def __init__(
        self,
        status: int,
        message: str,
        details: str | None = None,
        *,
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message)
        self._status = status
        self._message = message
        self._details = details
        if kind is None:
            kind = ErrorKind.server if status > 0 else ErrorKind.unknown
        self._kind = kind

    @property
    def status(self) -> int:
        return self._status

    @property
    def message(self) -> str:
        return self._message

    @property
    def details(self) -> str | None:
        return self._details

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    def __repr__(self) -> str:
        return f"RequestError(status={self._status}, kind={self._kind.value}, message={self._message!r})"

    @classmethod
    def validation(cls, message: str) -> "RequestError":
        """Client-side input check failed (status 400)."""
        return cls(400, message, kind=ErrorKind.validation)

    @classmethod
    def server(cls, status: int, message: str, details: str | None = None) -> "RequestError":
        """Backend answered with a non-success status."""
        return cls(status, message, details, kind=ErrorKind.server)

    @classmethod
    def network(cls) -> "RequestError":
        """No response could be obtained from the backend."""
        return cls(0, NETWORK_ERROR_MESSAGE, kind=ErrorKind.network)

    @classmethod
    def unknown(cls, message: str) -> "RequestError":
        """Any other failure; message is the failure description."""
        return cls(0, message, kind=ErrorKind.unknown)
