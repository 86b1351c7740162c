from __future__ import annotations

import asyncio
import io
import json
import socket
from datetime import datetime

import pytest

from syslog_ingest.cli import build_config, build_message, build_parser, main, serve
from syslog_ingest.config import ENV_LISTEN, ENV_MAX_WORKERS, ENV_QUEUE_SIZE, ListenerConfig
from syslog_ingest.core.formats import decode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (ENV_LISTEN, ENV_MAX_WORKERS, ENV_QUEUE_SIZE):
        monkeypatch.delenv(name, raising=False)


def test_build_message_adds_rfc3164_header() -> None:
    msg = build_message(
        "myapp: hi there",
        facility=1,
        severity=5,
        hostname="myhost",
        now=datetime(2026, 4, 5, 15, 4, 5),
    )
    assert msg == "<13>Apr  5 15:04:05 myhost myapp: hi there"

    record = decode(msg)
    assert record.hostname == "myhost"
    assert record.message == "myapp: hi there"


def test_build_message_passes_full_datagrams_through() -> None:
    raw = "<0>Jan  1 00:00:00 host kernel: boot"
    assert build_message(raw, facility=1, severity=5, hostname="ignored") == raw


def test_build_config_cli_flags_override_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_LISTEN, "127.0.0.1:6000")
    monkeypatch.setenv(ENV_QUEUE_SIZE, "10")

    args = build_parser().parse_args(
        ["listen", "--listen", "127.0.0.1:5514", "--overflow", "drop_oldest", "--max-workers", "2"]
    )
    cfg = build_config(args)

    assert cfg.address == ("127.0.0.1", 5514)
    assert cfg.record_queue_size == 10
    assert cfg.overflow_policy == "drop_oldest"
    assert cfg.max_workers == 2


def test_send_delivers_one_datagram() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as receiver:
        receiver.bind(("127.0.0.1", 0))
        receiver.settimeout(2.0)
        port = receiver.getsockname()[1]

        main(["send", f"127.0.0.1:{port}", "myapp: hello", "--hostname", "h1", "--severity", "3"])
        data, _ = receiver.recvfrom(4096)

    record = decode(data.decode())
    assert record.priority == 11
    assert record.hostname == "h1"
    assert record.message == "myapp: hello"


def test_send_rejects_bad_severity() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["send", "127.0.0.1:514", "x", "--severity", "8"])
    assert exc_info.value.code == 2


def test_listen_reports_bad_address(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--listen", "not-an-address"])
    assert exc_info.value.code == 2
    assert "Error:" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_serve_prints_json_lines(free_udp_port: int, send_udp) -> None:
    out = io.StringIO()
    cfg = ListenerConfig(host="127.0.0.1", port=free_udp_port, max_workers=1)
    task = asyncio.create_task(serve(cfg, out))

    try:
        for _ in range(100):
            send_udp(("127.0.0.1", free_udp_port), b"<13>Apr 20 15:04:05 hostname myapp: message")
            await asyncio.sleep(0.02)
            if out.getvalue():
                break
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    first = out.getvalue().splitlines()[0]
    assert json.loads(first) == {
        "facility": 1,
        "severity": 5,
        "hostname": "hostname",
        "message": "myapp: message",
    }
