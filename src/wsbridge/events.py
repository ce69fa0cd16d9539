from __future__ import annotations

import dataclasses

from .codes import format_close


__all__ = [
    "Binary",
    "Close",
    "Event",
    "Text",
]


@dataclasses.dataclass(frozen=True)
class Text:
    """
    Text message received from the peer.

    Attributes:
        data: Payload of the message.

    """

    data: str

    def __str__(self) -> str:
        size = len(self.data.encode())
        length = f"{size} byte{'' if size == 1 else 's'}"
        # Elide the middle of long messages.
        if len(self.data) > 75:
            data = repr(self.data[:48]) + "..." + repr(self.data[-24:])
        else:
            data = repr(self.data)
        return f"TEXT {data} [{length}]"


@dataclasses.dataclass(frozen=True)
class Binary:
    """
    Binary message received from the peer.

    Attributes:
        data: Payload of the message.

    """

    data: bytes

    def __str__(self) -> str:
        length = f"{len(self.data)} byte{'' if len(self.data) == 1 else 's'}"
        # Show at most the first 16 bytes and the last 8 bytes.
        if len(self.data) > 25:
            data = self.data[:16].hex(" ") + " ... " + self.data[-8:].hex(" ")
        else:
            data = self.data.hex(" ")
        return f"BINARY {data} [{length}]"


@dataclasses.dataclass(frozen=True)
class Close:
    """
    Terminal event of a connection.

    A :class:`Close` event indicates either that:

    * a close frame was received from the peer; ``code`` and ``reason`` are
      those chosen by the peer;
    * the connection was closed from this side; ``code`` and ``reason`` are
      those passed to :meth:`~wsbridge.connection.Connection.close`;
    * a failure occurred, e.g. the peer disconnected; ``code`` is a failure
      code such as 1006 and ``reason`` describes the failure.

    Errors never appear as events.

    Attributes:
        code: Close code.
        reason: Close reason.

    """

    code: int | None
    reason: str = ""

    def __str__(self) -> str:
        return f"CLOSE {format_close(self.code, self.reason)}"


Event = Text | Binary | Close
"""Event observed on a :class:`~wsbridge.connection.Connection`."""
