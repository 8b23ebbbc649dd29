import itertools

import pytest

from pingload.config import Config, Environment
from pingload.contract import PONG_TOPIC, PingContract, PongEvent
from pingload.keys import to_checksum_address
from pingload.listener import listen, measure, poll_pong_logs
from pingload.rpc import Log, RpcError

ADDRESS = to_checksum_address("0x" + "ab" * 20)


def pong_log(block, created_ms=1_000_000, count=1, block_ts=1002):
    data = b"".join(v.to_bytes(32, "big") for v in (created_ms, count, block_ts))
    return Log(address=ADDRESS, topics=[PONG_TOPIC], data=data, block_number=block)


class FakeClient:
    def __init__(self, blocks, batches):
        self.blocks = iter(blocks)
        self.batches = list(batches)
        self.queries = []

    def block_number(self):
        return next(self.blocks)

    def filter_logs(self, from_block, to_block, addresses, topics):
        self.queries.append((from_block, to_block, list(addresses), [list(g) for g in topics]))
        batch = self.batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch


def test_poll_waits_for_new_block_and_skips_old_logs():
    client = FakeClient([10, 10, 12], [[pong_log(10), pong_log(11)]])
    sleeps = []
    found = list(itertools.islice(poll_pong_logs(client, ADDRESS, 1.0, sleeps.append), 1))
    assert [entry.block_number for entry in found] == [11]
    assert sleeps == [1.0]
    assert client.queries == [(11, 12, [ADDRESS], [[PONG_TOPIC]])]


def test_poll_retries_after_rpc_error():
    client = FakeClient([5, 6, 6], [RpcError(-32000, "busy"), [pong_log(6)]])
    sleeps = []
    found = list(itertools.islice(poll_pong_logs(client, ADDRESS, 0.5, sleeps.append), 1))
    assert [entry.block_number for entry in found] == [6]
    assert sleeps == [0.5]
    assert [q[:2] for q in client.queries] == [(6, 6), (6, 6)]


def test_poll_advances_past_processed_blocks():
    client = FakeClient([1, 3, 5], [[pong_log(2), pong_log(3)], [pong_log(3), pong_log(4)]])
    found = list(itertools.islice(poll_pong_logs(client, ADDRESS, 1.0, lambda s: None), 3))
    assert [entry.block_number for entry in found] == [2, 3, 4]
    assert client.queries[1][:2] == (4, 5)


def test_measure_latencies_are_consistent():
    pong = PongEvent(created_timestamp=1_000_000, ping_count=1, block_timestamp=1002, raw=pong_log(1))
    record = measure(pong, 1005.5)
    assert record.created_to_mine == pytest.approx(2.0)
    assert record.created_to_backend == pytest.approx(record.created_to_mine + record.mine_to_backend)


def test_listen_stops_at_limit():
    client = FakeClient([5, 7], [[pong_log(6), pong_log(7), pong_log(7)]])
    env = Environment(
        config=Config(rpc_url="http://localhost:8545", ping_address=ADDRESS),
        client=client,
        ping_contract=PingContract(ADDRESS, client),
        chain_id=1,
    )
    records = listen(env, limit=2, clock=lambda: 1010.0)
    assert len(records) == 2
    for record in records:
        assert record.created_to_backend == pytest.approx(record.created_to_mine + record.mine_to_backend)