"""UDP syslog listener.

Receives datagrams on an asyncio datagram endpoint, decodes each one in a
thread pool and offers the outcome on two bounded queues:
- `records`: decoded SyslogRecord values
- `errors`: DecodeFailure values for rejected datagrams

Delivery never blocks. A full queue drops according to the configured
overflow policy and the drop is counted in `stats`.

Usage:
    async with SyslogListener(ListenerConfig(port=5514)) as listener:
        record = await listener.records.get()
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import fields
from enum import Enum
from typing import Any

from ..config import ListenerConfig, resolve_max_workers
from ..core.errors import BindError, ParseError, SocketReadError
from ..core.formats import DatagramDecoder, Rfc3164Decoder, datagram_text
from ..core.models import DecodeFailure, ListenerStats, ParseErrorKind, SyslogRecord

LOGGER = logging.getLogger(__name__)


class ListenerState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class _DatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, listener: SyslogListener) -> None:
        self.listener = listener

    def datagram_received(self, data: bytes, addr: tuple[Any, ...]) -> None:
        self.listener.submit(data, addr)

    def error_received(self, exc: Exception) -> None:
        self.listener._on_read_error(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self.listener._on_connection_lost(exc)


class SyslogListener:
    """Owns the UDP socket and fans datagrams out to decode tasks."""

    def __init__(
        self,
        config: ListenerConfig | None = None,
        *,
        decoder: DatagramDecoder | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or ListenerConfig()
        self.records: asyncio.Queue[SyslogRecord] = asyncio.Queue(
            maxsize=self.config.record_queue_size
        )
        self.errors: asyncio.Queue[DecodeFailure] = asyncio.Queue(
            maxsize=self.config.error_queue_size
        )
        self.last_read_error: SocketReadError | None = None

        self._decoder = decoder or Rfc3164Decoder()
        self._log = logger or LOGGER
        self._state = ListenerState.CREATED
        self._stopped = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._transport: asyncio.DatagramTransport | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._counts = dict.fromkeys((f.name for f in fields(ListenerStats)), 0)

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def stats(self) -> ListenerStats:
        return ListenerStats(**self._counts)

    @property
    def local_address(self) -> tuple[Any, ...] | None:
        """Bound socket address, once running."""
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")

    async def __aenter__(self) -> SyslogListener:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.stop()
        await self.wait_idle()

    async def start(self) -> None:
        """Bind the UDP endpoint. Raises BindError if the address is unusable."""
        if self._state is not ListenerState.CREATED:
            raise RuntimeError(
                f"listener is {self._state.value}; construct a new one to listen again"
            )

        loop = asyncio.get_running_loop()
        address = self.config.address
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _DatagramProtocol(self),
                local_addr=address,
            )
        except OSError as exc:
            self._state = ListenerState.STOPPED
            self._stopped.set()
            self._log.error("Cannot bind syslog listener on %s:%s: %s", *address, exc)
            raise BindError(address, str(exc)) from exc

        workers = resolve_max_workers(self.config.max_workers)
        self._loop = loop
        self._transport = transport
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="syslog-decode")
        self._state = ListenerState.RUNNING

        host, port = self.local_address[:2]
        self._log.info("Syslog listener on udp %s:%s (workers=%d)", host, port, workers)

    async def run(self) -> None:
        """Bind (if needed) and serve until stop() is called."""
        if self._state is ListenerState.CREATED:
            await self.start()
        elif self._state is ListenerState.STOPPED:
            raise RuntimeError("listener is stopped; construct a new one to listen again")

        try:
            await self._stopped.wait()
        finally:
            self.stop()
            await self.wait_idle()

    def stop(self) -> None:
        """Close the socket and abandon in-flight decode tasks. Idempotent."""
        if self._state is ListenerState.STOPPED:
            return
        was_running = self._state is ListenerState.RUNNING
        self._state = ListenerState.STOPPED

        if self._transport is not None:
            self._transport.close()
        for task in list(self._tasks):
            task.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._stopped.set()

        if was_running:
            self._log.info("Syslog listener stopped: %s", self.stats)

    async def wait_idle(self) -> None:
        """Wait until every scheduled decode task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def submit(self, data: bytes, peer: tuple[Any, ...] | None = None) -> bool:
        """Schedule one datagram for decoding without blocking.

        Must be called on the listener's event loop. Returns False when the
        datagram was not scheduled (listener not running, or too many decode
        tasks already in flight).
        """
        if self._state is not ListenerState.RUNNING or self._loop is None:
            return False

        self._counts["received"] += 1
        if len(self._tasks) >= self.config.max_pending:
            self._counts["dropped_datagrams"] += 1
            self._log.debug("Dropped datagram from %s: %d decode tasks pending", peer, len(self._tasks))
            return False

        task = self._loop.create_task(self._handle(data, peer))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    def _decode(self, data: bytes) -> SyslogRecord:
        return self._decoder.decode(datagram_text(data))

    async def _handle(self, data: bytes, peer: tuple[Any, ...] | None) -> None:
        self._log.debug("Received datagram from %s: %r", peer, data)
        try:
            record = await self._loop.run_in_executor(self._executor, self._decode, data)
        except ParseError as exc:
            self._counts["rejected"] += 1
            self._log.warning("Rejected datagram from %s: %s", peer, exc)
            failure = DecodeFailure(raw=exc.raw, reason=exc.kind, peer=peer, detail=exc.detail)
            self._offer(self.errors, failure, "dropped_errors")
            return
        except Exception:
            self._counts["rejected"] += 1
            self._log.exception("Decoder failed on datagram from %s", peer)
            failure = DecodeFailure(
                raw=datagram_text(data),
                reason=ParseErrorKind.MALFORMED_HEADER,
                peer=peer,
                detail="decoder error",
            )
            self._offer(self.errors, failure, "dropped_errors")
            return

        self._counts["decoded"] += 1
        self._offer(self.records, record, "dropped_records")

    def _offer(self, queue: asyncio.Queue[Any], item: object, counter: str) -> None:
        """Non-blocking put honoring the overflow policy."""
        try:
            queue.put_nowait(item)
            return
        except asyncio.QueueFull:
            self._counts[counter] += 1

        if self.config.overflow_policy == "drop_oldest":
            queue.get_nowait()
            queue.task_done()
            queue.put_nowait(item)
            self._log.debug("Queue full (%s); evicted oldest item", counter)
        else:
            self._log.debug("Queue full (%s); dropped newest item", counter)

    def _on_read_error(self, exc: Exception) -> None:
        self._counts["read_errors"] += 1
        err = SocketReadError(str(exc))
        err.__cause__ = exc
        self.last_read_error = err
        self._log.warning("Socket read error (continuing): %s", exc)

    def _on_connection_lost(self, exc: Exception | None) -> None:
        if self._state is not ListenerState.RUNNING:
            return
        if exc is not None:
            self._log.error("Syslog transport lost: %s", exc)
        self.stop()
