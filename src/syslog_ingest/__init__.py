"""UDP syslog ingestion: RFC3164 priority/header decoding and delivery."""

from __future__ import annotations

from .config import ListenerConfig, resolve_listener_config
from .core import (
    BindError,
    DecodeFailure,
    Facility,
    ParseError,
    ParseErrorKind,
    Severity,
    SyslogRecord,
    decode,
)
from .server import SyslogListener

__all__ = [
    "BindError",
    "DecodeFailure",
    "Facility",
    "ListenerConfig",
    "ParseError",
    "ParseErrorKind",
    "Severity",
    "SyslogListener",
    "SyslogRecord",
    "decode",
    "resolve_listener_config",
]
