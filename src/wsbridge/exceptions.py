"""
:mod:`wsbridge.exceptions` defines the following exception hierarchy:

* :exc:`WebSocketException`
    * :exc:`ConnectionFailed`
    * :exc:`InvalidState`

Once a connection is open, failures aren't raised. They are reported as a
:class:`~wsbridge.events.Close` event.

"""

from __future__ import annotations


__all__ = [
    "WebSocketException",
    "ConnectionFailed",
    "InvalidState",
]


class WebSocketException(Exception):
    """
    Base class for all exceptions defined by wsbridge.

    """


class ConnectionFailed(WebSocketException, ConnectionError):
    """
    Raised when the transport driver fails to establish a connection.

    The error reported by the driver is available in :attr:`error` and is also
    chained as ``__cause__``.

    """

    def __init__(self, message: str, error: BaseException) -> None:
        self.message = message
        self.error = error

    def __str__(self) -> str:
        return f"{self.message}: {self.error}"


class InvalidState(WebSocketException, AssertionError):
    """
    Raised when an operation is forbidden in the current state.

    This exception is an implementation detail.

    It should never be raised in normal circumstances.

    """
