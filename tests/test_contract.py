import pytest

from pingload.contract import (
    PONG_TOPIC,
    PingContract,
    PongEvent,
    Transactor,
    decode_uint256,
    encode_multi_send,
    encode_ping,
    function_selector,
    parse_pong,
)
from pingload.keys import PrivateKey, keccak256, recover_address
from pingload.rpc import Log


class FakeClient:
    def __init__(self, call_result=None):
        self.sent = []
        self.estimates = []
        self.calls = []
        self.call_result = call_result

    def pending_nonce(self, address):
        return 7

    def suggest_tip(self):
        return 2

    def latest_base_fee(self):
        return 10

    def estimate_gas(self, tx):
        self.estimates.append(tx)
        return 50000

    def send_raw_transaction(self, raw):
        self.sent.append(raw)
        return "0x" + keccak256(raw).hex()

    def call(self, method, *args):
        self.calls.append((method, args))
        return self.call_result


def word(value):
    return value.to_bytes(32, "big")


def test_selectors_match_contract():
    assert function_selector("ping(uint256)").hex() == "773acdef"
    assert function_selector("multiSend(address[],uint256)").hex() == "de8d3262"
    assert function_selector("pingCount()").hex() == "87704569"


def test_pong_topic():
    assert PONG_TOPIC.hex() == "911212e82523572b4350e315606f05d2fa0abf7a009ace0d0ac208ace681a535"


def test_encode_ping():
    data = encode_ping(1700000000000)
    assert data[:4].hex() == "773acdef"
    assert decode_uint256(data[4:]) == (1700000000000,)


def test_encode_ping_rejects_negative():
    with pytest.raises(ValueError):
        encode_ping(-1)


def test_encode_multi_send_layout():
    recipients = [PrivateKey.generate().address() for _ in range(2)]
    data = encode_multi_send(recipients, 1000)
    assert data[:4].hex() == "de8d3262"
    offset, amount, length, first, second = decode_uint256(data[4:])
    assert offset == 64
    assert amount == 1000
    assert length == 2
    assert first == int(recipients[0], 16)
    assert second == int(recipients[1], 16)


def test_decode_rejects_partial_word():
    with pytest.raises(ValueError):
        decode_uint256(b"\x00" * 31)


def make_pong_log(topics, data):
    return Log(address="0x" + "00" * 20, topics=topics, data=data, block_number=3)


def test_parse_pong():
    log = make_pong_log([PONG_TOPIC], word(1000) + word(4) + word(2))
    assert parse_pong(log) == PongEvent(created_timestamp=1000, ping_count=4, block_timestamp=2, raw=log)


def test_parse_pong_wrong_topic():
    with pytest.raises(ValueError):
        parse_pong(make_pong_log([b"\x00" * 32], word(1) * 3))


def test_parse_pong_no_topics():
    with pytest.raises(ValueError):
        parse_pong(make_pong_log([], word(1) * 3))


def test_parse_pong_short_data():
    with pytest.raises(ValueError):
        parse_pong(make_pong_log([PONG_TOPIC], word(1)))


def test_ping_count():
    client = FakeClient(call_result="0x" + word(5).hex())
    contract = PingContract("0x" + "ab" * 20, client)
    assert contract.ping_count() == 5
    method, args = client.calls[0]
    assert method == "eth_call"
    assert args[0]["data"] == "0x87704569"
    assert args[0]["to"] == contract.address


def test_ping_count_without_code():
    contract = PingContract("0x" + "ab" * 20, FakeClient(call_result="0x"))
    with pytest.raises(ValueError):
        contract.ping_count()


def test_ping_transaction_is_signed_and_sent():
    client = FakeClient()
    contract = PingContract("0x" + "ab" * 20, client)
    key = PrivateKey.generate()
    signed = contract.ping(Transactor(key, 1337), 123)
    tx = signed.transaction
    assert client.sent == [signed.raw]
    assert tx.nonce == 7
    assert tx.max_priority_fee_per_gas == 2
    assert tx.max_fee_per_gas == 2 + 2 * 10
    assert tx.gas == 50000
    assert tx.data == encode_ping(123)
    assert tx.to == contract.address
    assert recover_address(tx.signing_hash(), signed.signature) == key.address()
    assert client.estimates[0]["from"] == key.address()


def test_multi_send_carries_value():
    client = FakeClient()
    contract = PingContract("0x" + "ab" * 20, client)
    recipients = [PrivateKey.generate().address() for _ in range(3)]
    signed = contract.multi_send(Transactor(PrivateKey.generate(), 1337, value=300), recipients, 100)
    assert signed.transaction.value == 300
    assert client.estimates[0]["value"] == hex(300)
    assert signed.transaction.data == encode_multi_send(recipients, 100)


def test_contract_parse_pong_delegates():
    contract = PingContract("0x" + "ab" * 20, FakeClient())
    log = make_pong_log([PONG_TOPIC], word(9) + word(8) + word(7))
    assert contract.parse_pong(log).created_timestamp == 9