"""RFC3164 priority/header decoder."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import ParseError
from ..models import Facility, ParseErrorKind, Severity, SyslogRecord
from .base import datagram_text

MAX_PRIORITY = 191
TIMESTAMP_WIDTH = 15  # "Mmm dd hh:mm:ss"
UNKNOWN_HOST = "unknown"

_SEVERITY_MASK = 0x07
_FACILITY_MASK = 0xF8
_FACILITY_SHIFT = 3


def split_priority(pri: int) -> tuple[Facility, Severity]:
    """Split a PRI value into (facility, severity)."""
    if not 0 <= pri <= MAX_PRIORITY:
        raise ValueError(f"priority must be in [0, {MAX_PRIORITY}], got {pri}")
    facility = Facility((pri & _FACILITY_MASK) >> _FACILITY_SHIFT)
    severity = Severity(pri & _SEVERITY_MASK)
    return facility, severity


def format_priority(facility: int, severity: int) -> str:
    """Build the `<PRI>` header for a facility/severity pair."""
    return f"<{int(Facility(facility)) * 8 + int(Severity(severity))}>"


@dataclass(frozen=True, slots=True)
class Rfc3164Decoder:
    """Decode `<PRI>TIMESTAMP HOSTNAME TAG: MSG` datagrams.

    Only PRI, hostname and the free-text remainder are extracted. The
    timestamp is recognized by shape so it can be skipped regardless of how
    many digits PRI has; it is optional, and when absent the hostname starts
    right after `>`.
    """

    _digits = re.compile(r"[0-9]+")
    _timestamp = re.compile(r"[A-Z][a-z]{2} [ 0-9][0-9] [0-9]{2}:[0-9]{2}:[0-9]{2}")

    def _priority(self, raw: str) -> tuple[int, int]:
        """Return (pri, index of closing '>')."""
        end = raw.find(">")
        if not raw.startswith("<") or end == -1:
            raise ParseError(ParseErrorKind.MISSING_DELIMITERS, raw)

        text = raw[1:end]
        if not self._digits.fullmatch(text):
            raise ParseError(
                ParseErrorKind.NON_NUMERIC_PRIORITY, raw, f"priority is not a number: {text!r}"
            )

        # Bound the digit count before int(): huge digit strings exceed
        # the interpreter's int conversion limit.
        significant = text.lstrip("0") or "0"
        if len(significant) > len(str(MAX_PRIORITY)) or int(significant) > MAX_PRIORITY:
            shown = significant if len(significant) <= 16 else f"{significant[:16]}..."
            raise ParseError(
                ParseErrorKind.PRIORITY_OUT_OF_RANGE,
                raw,
                f"priority {shown} outside [0, {MAX_PRIORITY}]",
            )
        return int(significant), end

    def _header(self, tail: str) -> tuple[str, str]:
        """Split the post-PRI tail into (hostname, message)."""
        if self._timestamp.match(tail):
            tail = tail[TIMESTAMP_WIDTH:]

        host, sep, message = tail.lstrip(" ").partition(" ")
        if not sep:
            return UNKNOWN_HOST, ""
        return host, message

    def decode(self, raw: str) -> SyslogRecord:
        """Decode one datagram; raise ParseError when it is rejected."""
        pri, end = self._priority(raw)
        facility, severity = split_priority(pri)

        hostname, message = self._header(raw[end + 1 :])
        return SyslogRecord(
            facility=facility,
            severity=severity,
            hostname=hostname,
            message=message,
        )

    def decode_datagram(self, data: bytes) -> SyslogRecord:
        """Decode a raw UDP payload."""
        return self.decode(datagram_text(data))


_DEFAULT = Rfc3164Decoder()


def decode(raw: str) -> SyslogRecord:
    """Decode with the default RFC3164 decoder."""
    return _DEFAULT.decode(raw)


def decode_datagram(data: bytes) -> SyslogRecord:
    """Decode a raw UDP payload with the default RFC3164 decoder."""
    return _DEFAULT.decode_datagram(data)
