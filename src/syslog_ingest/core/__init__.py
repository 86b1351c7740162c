"""Decode pipeline core: models, errors and decoders."""

from __future__ import annotations

from .errors import BindError, IngestError, ParseError, SocketReadError
from .formats import decode, decode_datagram
from .models import (
    DecodeFailure,
    Facility,
    ListenerStats,
    ParseErrorKind,
    Severity,
    SyslogRecord,
)

__all__ = [
    "BindError",
    "DecodeFailure",
    "Facility",
    "IngestError",
    "ListenerStats",
    "ParseError",
    "ParseErrorKind",
    "Severity",
    "SocketReadError",
    "SyslogRecord",
    "decode",
    "decode_datagram",
]
