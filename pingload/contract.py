"""ABI encoding and a client for the Ping contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from pingload.keys import PrivateKey, hex_to_address, keccak256
from pingload.rpc import Log
from pingload.transaction import DynamicFeeTransaction, SignedTransaction

_UINT256_LIMIT = 2**256


def function_selector(signature: str) -> bytes:
    """First four bytes of the Keccak-256 hash of a function signature."""
    return keccak256(signature.encode("ascii"))[:4]


PING_SELECTOR = function_selector("ping(uint256)")
MULTI_SEND_SELECTOR = function_selector("multiSend(address[],uint256)")
PING_COUNT_SELECTOR = function_selector("pingCount()")
PONG_TOPIC = keccak256(b"Pong(uint256,uint256,uint256)")


def _uint256(value: int) -> bytes:
    if not 0 <= value < _UINT256_LIMIT:
        raise ValueError(f"value out of uint256 range: {value}")
    return value.to_bytes(32, "big")


def _address_word(address: str) -> bytes:
    return bytes.fromhex(hex_to_address(address)[2:]).rjust(32, b"\x00")


def encode_ping(created_timestamp: int) -> bytes:
    return PING_SELECTOR + _uint256(created_timestamp)


def encode_multi_send(recipients: Sequence[str], amount: int) -> bytes:
    head = _uint256(64) + _uint256(amount)
    tail = _uint256(len(recipients)) + b"".join(_address_word(r) for r in recipients)
    return MULTI_SEND_SELECTOR + head + tail


def decode_uint256(data: bytes) -> Tuple[int, ...]:
    """Decode a sequence of 32-byte big-endian words."""
    if len(data) % 32:
        raise ValueError("ABI data length is not a multiple of 32")
    return tuple(
        int.from_bytes(data[start:start + 32], "big") for start in range(0, len(data), 32)
    )


@dataclass(frozen=True)
class PongEvent:
    """A decoded Pong event."""

    created_timestamp: int
    ping_count: int
    block_timestamp: int
    raw: Log


def parse_pong(log: Log) -> PongEvent:
    if not log.topics:
        raise ValueError("no event signature")
    if bytes(log.topics[0]) != PONG_TOPIC:
        raise ValueError("event signature mismatch")
    words = decode_uint256(log.data)
    if len(words) < 3:
        raise ValueError("Pong event data too short")
    created, count, block_ts = words[:3]
    return PongEvent(created_timestamp=created, ping_count=count, block_timestamp=block_ts, raw=log)


@dataclass
class Transactor:
    """Signing key, chain and the value to attach to transactions."""

    key: PrivateKey
    chain_id: int
    value: int = 0

    @property
    def address(self) -> str:
        return self.key.address()


class PingContract:
    """The deployed Ping contract, reached through an RPC client."""

    def __init__(self, address: str, client: Any) -> None:
        self.address = hex_to_address(address)
        self.client = client

    def ping_count(self) -> int:
        result = self.client.call(
            "eth_call",
            {"to": self.address, "data": "0x" + PING_COUNT_SELECTOR.hex()},
            "latest",
        )
        body = result[2:] if result[:2].lower() == "0x" else result
        words = decode_uint256(bytes.fromhex(body))
        if not words:
            raise ValueError(f"no contract code at {self.address}")
        return words[0]

    def transact(self, transactor: Transactor, data: bytes) -> SignedTransaction:
        """Build, sign and submit a call to the contract."""
        sender = transactor.address
        nonce = self.client.pending_nonce(sender)
        tip = self.client.suggest_tip()
        base_fee = self.client.latest_base_fee()
        if base_fee is None:
            raise ValueError("chain has no base fee; dynamic fee transactions unsupported")
        fee_cap = tip + 2 * base_fee
        gas = self.client.estimate_gas(
            {
                "from": sender,
                "to": self.address,
                "value": hex(transactor.value),
                "data": "0x" + bytes(data).hex(),
                "maxFeePerGas": hex(fee_cap),
                "maxPriorityFeePerGas": hex(tip),
            }
        )
        tx = DynamicFeeTransaction(
            chain_id=transactor.chain_id,
            nonce=nonce,
            max_priority_fee_per_gas=tip,
            max_fee_per_gas=fee_cap,
            gas=gas,
            to=self.address,
            value=transactor.value,
            data=bytes(data),
        )
        signed = tx.sign(transactor.key)
        self.client.send_raw_transaction(signed.raw)
        return signed

    def ping(self, transactor: Transactor, created_timestamp: int) -> SignedTransaction:
        return self.transact(transactor, encode_ping(created_timestamp))

    def multi_send(self, transactor: Transactor, recipients: Sequence[str], amount: int) -> SignedTransaction:
        return self.transact(transactor, encode_multi_send(recipients, amount))

    def parse_pong(self, log: Log) -> PongEvent:
        return parse_pong(log)