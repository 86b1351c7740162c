from __future__ import annotations

import socket
from collections.abc import Callable

import pytest

from syslog_ingest.config import ListenerConfig


@pytest.fixture
def listener_config() -> ListenerConfig:
    return ListenerConfig(host="127.0.0.1", port=0, max_workers=2)


@pytest.fixture
def free_udp_port() -> int:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def send_udp() -> Callable[[tuple[str, int], bytes], None]:
    def _send(address: tuple[str, int], payload: bytes) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
            sender.sendto(payload, address)

    return _send
