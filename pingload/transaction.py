"""RLP encoding and EIP-1559 transactions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from pingload.keys import PrivateKey, Signature, hex_to_address, keccak256

_DYNAMIC_FEE_TX_TYPE = 0x02


def _length_prefix(length: int, offset: int) -> bytes:
    if length < 56:
        return bytes([offset + length])
    encoded = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + 55 + len(encoded)]) + encoded


def rlp_encode(item: Any) -> bytes:
    """Encode bytes, non-negative ints and nested lists as RLP."""
    if isinstance(item, bool):
        raise TypeError("booleans cannot be RLP encoded")
    if isinstance(item, int):
        if item < 0:
            raise ValueError("negative integers cannot be RLP encoded")
        item = item.to_bytes((item.bit_length() + 7) // 8, "big")
    if isinstance(item, (bytes, bytearray, memoryview)):
        data = bytes(item)
        if len(data) == 1 and data[0] < 0x80:
            return data
        return _length_prefix(len(data), 0x80) + data
    if isinstance(item, (list, tuple)):
        payload = b"".join(rlp_encode(element) for element in item)
        return _length_prefix(len(payload), 0xC0) + payload
    raise TypeError(f"cannot RLP encode {type(item).__name__}")


@dataclass(frozen=True)
class SignedTransaction:
    """A signed transaction together with its wire encoding."""

    transaction: "DynamicFeeTransaction"
    signature: Signature
    raw: bytes

    def hash_hex(self) -> str:
        return "0x" + keccak256(self.raw).hex()


@dataclass(frozen=True)
class DynamicFeeTransaction:
    """An EIP-1559 transaction with an empty access list."""

    chain_id: int
    nonce: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    gas: int
    to: Optional[str]
    value: int = 0
    data: bytes = b""

    def _fields(self) -> List[Any]:
        to_bytes = b"" if self.to is None else bytes.fromhex(hex_to_address(self.to)[2:])
        return [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas,
            to_bytes,
            self.value,
            bytes(self.data),
            [],
        ]

    def signing_hash(self) -> bytes:
        return keccak256(bytes([_DYNAMIC_FEE_TX_TYPE]) + rlp_encode(self._fields()))

    def sign(self, key: PrivateKey) -> SignedTransaction:
        signature = key.sign_digest(self.signing_hash())
        payload = self._fields() + [signature.v & 1, signature.r, signature.s]
        raw = bytes([_DYNAMIC_FEE_TX_TYPE]) + rlp_encode(payload)
        return SignedTransaction(transaction=self, signature=signature, raw=raw)