"""Exception hierarchy raised by the Vanish client."""

from __future__ import annotations


class VanishError(Exception):
    """Base class for every error the client raises."""


class TransportError(VanishError):
    """Local failure: building, sending or reading a request.

    The underlying exception is kept as ``__cause__``.
    """


class MarshalError(TransportError):
    """The request body could not be serialized to JSON."""


class DecodeError(TransportError):
    """A successful response could not be decoded."""


class APIError(VanishError):
    """The service answered with a status code >= 400."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message, status_code)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return f"vanish: {self.message} (status {self.status_code})"


class CancelledError(VanishError):
    """The caller cancelled the operation or its deadline passed."""

    def __init__(self, reason: str = "cancelled") -> None:
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return f"vanish: {self.reason}"
