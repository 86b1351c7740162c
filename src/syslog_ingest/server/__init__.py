"""UDP server components."""

from __future__ import annotations

from .listener import ListenerState, SyslogListener

__all__ = ["ListenerState", "SyslogListener"]
