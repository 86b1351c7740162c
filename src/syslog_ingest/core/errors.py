"""Exception hierarchy for the ingest pipeline."""

from __future__ import annotations

from .models import ParseErrorKind


class IngestError(Exception):
    """Base class for syslog-ingest errors."""


class ParseError(IngestError, ValueError):
    """A datagram could not be decoded.

    Recoverable: the listener reports it on the error stream and moves on.
    """

    def __init__(self, kind: ParseErrorKind, raw: str, detail: str | None = None) -> None:
        self.kind = kind
        self.raw = raw
        self.detail = detail or kind.value.replace("_", " ")
        super().__init__(f"{self.detail}: {raw!r}")


class BindError(IngestError):
    """The UDP socket could not be bound. Fatal, never retried here."""

    def __init__(self, address: tuple[str, int], reason: str) -> None:
        self.address = address
        host, port = address
        super().__init__(f"cannot listen on {host}:{port}: {reason}")


class SocketReadError(IngestError):
    """Transient socket-level error reported by the transport."""
