"""
Concurrent TCP connect scanning with a statically partitioned port space.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Set

from .channel import Receiver, Sender, channel
from .config import MAX_PORT, IPAddress, ScanConfig

Connector = Callable[[IPAddress, int, Optional[float]], bool]

logger = logging.getLogger(__name__)


def stride_ports(offset: int, stride: int) -> range:
    """
    Ports probed by worker ``offset`` out of ``stride`` workers.

    Worker ``i`` takes ``i+1, i+1+N, i+1+2N, ...`` up to ``MAX_PORT``.
    """
    if stride < 1:
        raise ValueError("stride must be at least 1")
    if not (0 <= offset < stride):
        raise ValueError(f"offset must be in [0, {stride}), got {offset}")
    return range(offset + 1, MAX_PORT + 1, stride)


def tcp_connect(address: IPAddress, port: int, timeout: Optional[float] = None) -> bool:
    """
    Return True when a TCP connection to ``(address, port)`` succeeds.

    ``timeout=None`` leaves the socket blocking, so the OS connect timeout
    applies. The connection is closed without exchanging data.
    """
    try:
        with socket.create_connection((str(address), port), timeout=timeout):
            return True
    except OSError as exc:
        logger.debug("%s:%d closed (%s)", address, port, exc)
        return False


def _worker(
    offset: int,
    config: ScanConfig,
    connector: Connector,
    sender: Sender,
    cancel: Optional[threading.Event],
    start: threading.Barrier,
) -> int:
    probed = 0
    with sender:
        try:
            start.wait()
        except threading.BrokenBarrierError:
            return probed
        for port in stride_ports(offset, config.worker_count):
            if cancel is not None and cancel.is_set():
                logger.debug("Worker %d cancelled after %d probes", offset, probed)
                break
            probed += 1
            if connector(config.target_address, port, config.connect_timeout):
                sender.send(port)
    return probed


def _drain(receiver: Receiver, on_open: Optional[Callable[[int], None]]) -> Set[int]:
    found: Set[int] = set()
    for port in receiver:
        if port in found:
            continue
        found.add(port)
        if on_open is not None:
            on_open(port)
    return found


def scan(
    config: ScanConfig,
    connector: Connector = tcp_connect,
    on_open: Optional[Callable[[int], None]] = None,
    cancel: Optional[threading.Event] = None,
) -> List[int]:
    """
    Probe every TCP port of ``config.target_address`` and return the open ones.

    Exactly ``config.worker_count`` worker threads are started and none
    probes until all of them are running. Each owns a clone of the result
    sender. Discoveries are drained as they arrive (``on_open``
    is called on this thread, in arrival order) and returned sorted ascending.
    Setting ``cancel`` stops the workers between probes; the ports found so
    far are still returned.
    """
    if cancel is None:
        cancel = threading.Event()
    workers = config.worker_count
    logger.info("Scanning %s with %d workers", config.target_address, workers)
    started = time.perf_counter()

    sender, receiver = channel()
    start = threading.Barrier(workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="portsniffer") as executor:
        futures = []
        try:
            for offset in range(workers):
                futures.append(
                    executor.submit(_worker, offset, config, connector, sender.clone(), cancel, start)
                )
            sender.close()
            found = _drain(receiver, on_open)
        except BaseException:
            # Workers must stop before the executor joins them.
            cancel.set()
            start.abort()
            sender.close()
            raise

    probed = sum(future.result() for future in futures)
    elapsed = time.perf_counter() - started
    logger.info(
        "Scan of %s finished: %d open of %d probed in %.2fs",
        config.target_address,
        len(found),
        probed,
        elapsed,
    )
    return sorted(found)
