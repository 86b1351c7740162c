"""Decoder interface and datagram helpers."""

from __future__ import annotations

from typing import Protocol

from ..models import SyslogRecord

_TRAILING = "\r\n\x00"


class DatagramDecoder(Protocol):
    """Decoder interface: return a SyslogRecord or raise ParseError."""

    def decode(self, raw: str) -> SyslogRecord:
        """Decode one datagram's text into a record."""
        ...


def datagram_text(data: bytes) -> str:
    """Decode a UDP payload to text.

    Invalid UTF-8 is replaced rather than rejected; senders framing with a
    trailing newline or NUL get it stripped.
    """
    return data.decode("utf-8", errors="replace").rstrip(_TRAILING)
