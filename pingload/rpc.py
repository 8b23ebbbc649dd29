"""A small Ethereum JSON-RPC client over HTTP."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import requests

HexOrBytes = Union[str, bytes]


class RpcError(Exception):
    """An error object returned by the JSON-RPC server."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"rpc error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data


def _to_int(value: Union[str, int]) -> int:
    return value if isinstance(value, int) else int(value, 16)


def _to_hex_data(value: HexOrBytes) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


def _from_hex_data(value: str) -> bytes:
    body = value[2:] if value[:2].lower() == "0x" else value
    return bytes.fromhex(body)


@dataclass(frozen=True)
class Log:
    """A contract event log entry."""

    address: str
    topics: List[bytes]
    data: bytes
    block_number: int
    transaction_hash: str = ""
    log_index: int = 0
    removed: bool = False

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "Log":
        return cls(
            address=obj["address"],
            topics=[_from_hex_data(topic) for topic in obj.get("topics", [])],
            data=_from_hex_data(obj.get("data", "0x")),
            block_number=_to_int(obj["blockNumber"]),
            transaction_hash=obj.get("transactionHash", ""),
            log_index=_to_int(obj.get("logIndex", 0)),
            removed=bool(obj.get("removed", False)),
        )


@dataclass
class EthClient:
    """JSON-RPC client for an Ethereum node."""

    url: str
    session: Optional[Any] = None
    timeout: float = 30.0
    _ids: Any = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()

    def call(self, method: str, *args: Any) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(args),
        }
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        body = response.json()
        error = body.get("error")
        if error is not None:
            raise RpcError(error.get("code", 0), error.get("message", ""), error.get("data"))
        return body.get("result")

    def chain_id(self) -> int:
        return _to_int(self.call("eth_chainId"))

    def block_number(self) -> int:
        return _to_int(self.call("eth_blockNumber"))

    def latest_base_fee(self) -> Optional[int]:
        """Base fee of the latest block, or None before London."""
        block = self.call("eth_getBlockByNumber", "latest", False)
        if block is None:
            raise RpcError(0, "latest block not found")
        fee = block.get("baseFeePerGas")
        return None if fee is None else _to_int(fee)

    def suggest_tip(self) -> int:
        return _to_int(self.call("eth_maxPriorityFeePerGas"))

    def pending_nonce(self, address: str) -> int:
        return _to_int(self.call("eth_getTransactionCount", address, "pending"))

    def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return _to_int(self.call("eth_estimateGas", tx))

    def send_raw_transaction(self, raw: bytes) -> str:
        return self.call("eth_sendRawTransaction", "0x" + bytes(raw).hex())

    def filter_logs(
        self,
        from_block: int,
        to_block: int,
        addresses: Sequence[str],
        topics: Iterable[Iterable[HexOrBytes]],
    ) -> List[Log]:
        query = {
            "fromBlock": hex(from_block),
            "toBlock": hex(to_block),
            "address": list(addresses),
            "topics": [[_to_hex_data(topic) for topic in group] for group in topics],
        }
        return [Log.from_json(entry) for entry in self.call("eth_getLogs", query) or []]