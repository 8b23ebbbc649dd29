"""Sending ping transactions from many wallets at once."""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from pingload.contract import Transactor
from pingload.keys import PrivateKey

_log = logging.getLogger(__name__)

_MIN_DELAY_MS = 500
_DELAY_SPREAD_MS = 13500


def run_pinger(
    env: Any,
    key: PrivateKey,
    rounds: int = 60,
    interval: float = 15.0,
    rng: Optional[random.Random] = None,
    sleep: Optional[Callable[[float], None]] = None,
    clock: Optional[Callable[[], float]] = None,
) -> List[Any]:
    """Send ``rounds`` pings, one per tick, each after a random 0.5-14 s delay."""
    rng = random.Random() if rng is None else rng
    sleep = time.sleep if sleep is None else sleep
    clock = time.time if clock is None else clock
    transactor = Transactor(key=key, chain_id=env.chain_id)
    sent = []
    next_tick = clock() + interval
    for _ in range(rounds):
        wait = next_tick - clock()
        if wait > 0:
            sleep(wait)
        next_tick += interval
        while next_tick + interval <= clock():
            next_tick += interval

        delay_ms = rng.randint(0, _DELAY_SPREAD_MS) + _MIN_DELAY_MS
        sleep(delay_ms / 1000)

        now = clock()
        _log.info(
            "Sending ping at %s",
            datetime.fromtimestamp(now).astimezone().isoformat(timespec="seconds"),
        )
        sent.append(env.ping_contract.ping(transactor, int(now * 1000)))
    return sent


def run_ping(env: Any, keys: Sequence[PrivateKey]) -> List[List[Any]]:
    """Run one pinger per key concurrently and wait for all of them."""
    if not keys:
        return []
    with ThreadPoolExecutor(max_workers=len(keys)) as pool:
        futures = [pool.submit(run_pinger, env, key) for key in keys]
        return [future.result() for future in futures]