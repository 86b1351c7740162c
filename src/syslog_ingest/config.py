"""Listener configuration and environment overrides."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7531

ENV_LISTEN = "SYSLOG_INGEST_LISTEN"
ENV_MAX_WORKERS = "SYSLOG_INGEST_MAX_WORKERS"
ENV_QUEUE_SIZE = "SYSLOG_INGEST_QUEUE_SIZE"

OverflowPolicy = Literal["drop_newest", "drop_oldest"]


class ListenerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = Field(default=DEFAULT_HOST, description="Interface to bind.")
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535, description="UDP port (0 = ephemeral).")
    record_queue_size: int = Field(
        default=1024, ge=1, description="Capacity of the decoded-record queue."
    )
    error_queue_size: int = Field(
        default=256, ge=1, description="Capacity of the decode-failure queue."
    )
    max_workers: int | None = Field(
        default=None, ge=1, description="Decode threads; None resolves from env/CPU count."
    )
    max_pending: int = Field(
        default=4096, ge=1, description="In-flight decode tasks before datagrams are dropped."
    )
    overflow_policy: OverflowPolicy = Field(
        default="drop_newest", description="What a full queue does with a new item."
    )

    @property
    def address(self) -> tuple[str, int]:
        return self.host, self.port

    @classmethod
    def from_address(cls, address: str, **overrides: Any) -> ListenerConfig:
        """Build a config from a `HOST:PORT` string."""
        host, port = parse_address(address)
        return cls(host=host, port=port, **overrides)


def parse_address(address: str) -> tuple[str, int]:
    """Parse `HOST:PORT`, `:PORT` or `[V6]:PORT` into (host, port)."""
    host, sep, port_text = address.strip().rpartition(":")
    if not sep:
        raise ValueError(f"address must look like HOST:PORT, got {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 hosts must be bracketed, e.g. [::1]:514, got {address!r}")

    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(f"port must be an integer, got {port_text!r}") from exc
    if not 0 <= port <= 65535:
        raise ValueError(f"port must be in [0, 65535], got {port}")

    return host or DEFAULT_HOST, port


def _env_int(name: str) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def resolve_max_workers(max_workers: int | None) -> int:
    """Explicit value, then SYSLOG_INGEST_MAX_WORKERS, then CPU count (capped at 32)."""
    if max_workers is not None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        return max_workers

    value = _env_int(ENV_MAX_WORKERS)
    if value is not None:
        return value

    cpu_count = os.cpu_count() or 1
    return min(32, cpu_count)


def resolve_listener_config(cfg: ListenerConfig | None = None) -> ListenerConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = ListenerConfig()

    updates: dict[str, Any] = {}

    listen = os.getenv(ENV_LISTEN)
    if listen:
        try:
            updates["host"], updates["port"] = parse_address(listen)
        except ValueError as exc:
            raise ValueError(f"{ENV_LISTEN}: {exc}") from exc

    workers = _env_int(ENV_MAX_WORKERS)
    if workers is not None:
        updates["max_workers"] = workers

    queue_size = _env_int(ENV_QUEUE_SIZE)
    if queue_size is not None:
        updates["record_queue_size"] = queue_size

    if not updates:
        return cfg
    return ListenerConfig.model_validate({**cfg.model_dump(), **updates})
