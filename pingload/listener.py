"""Polling the chain for Pong events and measuring their latency."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterator, List, Optional

import requests

from pingload.contract import PONG_TOPIC, PongEvent
from pingload.rpc import Log, RpcError
from pingload.stats import PingPongLog

_log = logging.getLogger(__name__)


def poll_pong_logs(
    client: Any,
    address: str,
    poll_interval: float = 1.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> Iterator[Log]:
    """Yield Pong logs from blocks mined after the call, polling forever."""
    sleep = time.sleep if sleep is None else sleep
    last_processed = client.block_number()
    _log.info("Starting to listen for Pong() events from block %d", last_processed + 1)
    total = 0
    while True:
        current = client.block_number()
        if current <= last_processed:
            _log.info(
                "Current block %d is less than or equal to last processed block %d. Sleeping.",
                current,
                last_processed,
            )
            sleep(poll_interval)
            continue
        try:
            logs = client.filter_logs(last_processed + 1, current, [address], [[PONG_TOPIC]])
        except (RpcError, requests.RequestException) as exc:
            _log.warning("Failed to filter logs: %s. Retrying...", exc)
            sleep(poll_interval)
            continue
        total += len(logs)
        _log.info("Got %d logs, total consumed: %d", len(logs), total)
        for entry in logs:
            if entry.block_number <= last_processed:
                continue
            yield entry
        last_processed = current


def measure(pong: PongEvent, now: float) -> PingPongLog:
    """Latencies of ``pong`` seen at ``now`` (seconds since the epoch)."""
    created = pong.created_timestamp / 1000
    mined = float(pong.block_timestamp)
    return PingPongLog(
        created_to_mine=mined - created,
        mine_to_backend=now - mined,
        created_to_backend=now - created,
    )


def listen(
    env: Any,
    limit: int = 12000,
    clock: Callable[[], float] = time.time,
) -> List[PingPongLog]:
    """Collect latencies of ``limit`` Pong events; stop early on interrupt."""
    records: List[PingPongLog] = []
    try:
        for entry in poll_pong_logs(env.client, env.config.ping_address):
            pong = env.ping_contract.parse_pong(entry)
            records.append(measure(pong, clock()))
            if len(records) == limit:
                break
    except KeyboardInterrupt:
        _log.info("Interrupted after %d events", len(records))
    return records