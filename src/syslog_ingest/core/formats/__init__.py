"""Datagram decoders.

Contains the RFC3164 priority/header decoder and the decoder interface.
"""

from __future__ import annotations

from .base import DatagramDecoder, datagram_text
from .rfc3164 import (
    MAX_PRIORITY,
    UNKNOWN_HOST,
    Rfc3164Decoder,
    decode,
    decode_datagram,
    format_priority,
    split_priority,
)

__all__ = [
    "MAX_PRIORITY",
    "UNKNOWN_HOST",
    "DatagramDecoder",
    "Rfc3164Decoder",
    "datagram_text",
    "decode",
    "decode_datagram",
    "format_priority",
    "split_priority",
]
