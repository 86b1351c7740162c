"""Core data models for the syslog decode pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any


class Severity(IntEnum):
    """Syslog severity (low 3 bits of PRI)."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFORMATIONAL = 6
    DEBUG = 7


class Facility(IntEnum):
    """Standard syslog facility codes (PRI >> 3)."""

    KERN = 0
    USER = 1
    MAIL = 2
    DAEMON = 3
    AUTH = 4
    SYSLOG = 5
    LPR = 6
    NEWS = 7
    UUCP = 8
    CRON = 9
    AUTHPRIV = 10
    FTP = 11
    NTP = 12
    AUDIT = 13
    ALERT = 14
    CLOCK = 15
    LOCAL0 = 16
    LOCAL1 = 17
    LOCAL2 = 18
    LOCAL3 = 19
    LOCAL4 = 20
    LOCAL5 = 21
    LOCAL6 = 22
    LOCAL7 = 23


class ParseErrorKind(str, Enum):
    """Why a datagram was rejected by the decoder."""

    MISSING_DELIMITERS = "missing_delimiters"
    NON_NUMERIC_PRIORITY = "non_numeric_priority"
    PRIORITY_OUT_OF_RANGE = "priority_out_of_range"
    MALFORMED_HEADER = "malformed_header"


@dataclass(frozen=True, slots=True)
class SyslogRecord:
    """Decoded syslog datagram."""

    facility: Facility
    severity: Severity
    hostname: str
    message: str

    @property
    def priority(self) -> int:
        return int(self.facility) * 8 + int(self.severity)

    def to_dict(self) -> dict[str, Any]:
        """Plain-int mapping suitable for JSON encoding."""
        return {
            "facility": int(self.facility),
            "severity": int(self.severity),
            "hostname": self.hostname,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """Rejected datagram as seen by the error sink."""

    raw: str
    reason: ParseErrorKind
    peer: tuple[Any, ...] | None = None  # sender address, when known
    detail: str = ""


@dataclass(frozen=True, slots=True)
class ListenerStats:
    """Counter snapshot for a listener."""

    received: int = 0
    decoded: int = 0
    rejected: int = 0
    dropped_records: int = 0
    dropped_errors: int = 0
    dropped_datagrams: int = 0
    read_errors: int = 0
