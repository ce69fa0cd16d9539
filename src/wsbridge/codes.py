"""
Close codes of the WebSocket protocol.

See `section 7.4 of RFC 6455`_ and the IANA registry.

.. _section 7.4 of RFC 6455: https://datatracker.ietf.org/doc/html/rfc6455#section-7.4

"""

from __future__ import annotations

import enum


__all__ = [
    "CloseCode",
    "CLOSE_CODES",
    "MAX_REASON_LENGTH",
    "check_close",
    "format_close",
]


class CloseCode(enum.IntEnum):
    """Close code values for WebSocket close frames."""

    NORMAL_CLOSURE = 1000
    GOING_AWAY = 1001
    PROTOCOL_ERROR = 1002
    UNSUPPORTED_DATA = 1003
    # 1004 is reserved
    NO_STATUS_RCVD = 1005
    ABNORMAL_CLOSURE = 1006
    INVALID_DATA = 1007
    POLICY_VIOLATION = 1008
    MESSAGE_TOO_BIG = 1009
    MANDATORY_EXTENSION = 1010
    INTERNAL_ERROR = 1011
    TLS_HANDSHAKE = 1015


# See https://www.iana.org/assignments/websocket/websocket.xhtml
CLOSE_CODES = {
    CloseCode.NORMAL_CLOSURE: "OK",
    CloseCode.GOING_AWAY: "going away",
    CloseCode.PROTOCOL_ERROR: "protocol error",
    CloseCode.UNSUPPORTED_DATA: "unsupported data",
    CloseCode.NO_STATUS_RCVD: "no status received [internal]",
    CloseCode.ABNORMAL_CLOSURE: "abnormal closure [internal]",
    CloseCode.INVALID_DATA: "invalid frame payload data",
    CloseCode.POLICY_VIOLATION: "policy violation",
    CloseCode.MESSAGE_TOO_BIG: "message too big",
    CloseCode.MANDATORY_EXTENSION: "mandatory extension",
    CloseCode.INTERNAL_ERROR: "internal error",
    CloseCode.TLS_HANDSHAKE: "TLS handshake failure [internal]",
}

# A close frame carries at most 125 bytes: 2 for the code, 123 for the reason.
MAX_REASON_LENGTH = 123


def check_close(code: int | None, reason: str | None) -> None:
    """
    Check arguments for closing a connection from this side.

    Only 1000 and application codes in the 3000-4999 range may be sent
    explicitly. Other codes are either reserved for the protocol or
    synthesized locally and never sent.

    Raises:
        ValueError: If ``code`` or ``reason`` isn't acceptable. This is a
            programming error, not a condition to recover from.

    """
    if code is not None:
        if not (code == CloseCode.NORMAL_CLOSURE or 3000 <= code <= 4999):
            raise ValueError(
                f"invalid close code: {code}; "
                f"close code must be 1000 or in the range 3000-4999"
            )
    if reason is not None and len(reason.encode()) > MAX_REASON_LENGTH:
        raise ValueError(
            f"reason must be <= {MAX_REASON_LENGTH} bytes long "
            f"and encoded as UTF-8"
        )


def format_close(code: int | None, reason: str) -> str:
    """
    Display a human-readable version of the close code and reason.

    """
    if code is None:
        result = "no code"
    else:
        if 3000 <= code < 4000:
            explanation = "registered"
        elif 4000 <= code < 5000:
            explanation = "private use"
        else:
            explanation = CLOSE_CODES.get(code, "unknown")
        result = f"{code} ({explanation})"

    if reason:
        result = f"{result} {reason}"

    return result
