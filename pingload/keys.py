"""secp256k1 keys, Keccak-256 hashing and Ethereum address helpers."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from Crypto.Hash import keccak

FIELD_PRIME = 2**256 - 2**32 - 977
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_GENERATOR = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

Point = Optional[Tuple[int, int]]


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def to_checksum_address(address: str) -> str:
    """Return the mixed-case checksum form of a 20-byte hex address."""
    body = address[2:] if address[:2].lower() == "0x" else address
    if len(body) != 40:
        raise ValueError(f"address must be 40 hex digits: {address!r}")
    try:
        bytes.fromhex(body)
    except ValueError as exc:
        raise ValueError(f"invalid hex address: {address!r}") from exc
    lower = body.lower()
    digest = keccak256(lower.encode("ascii")).hex()
    return "0x" + "".join(
        char.upper() if int(nibble, 16) >= 8 else char
        for char, nibble in zip(lower, digest)
    )


def hex_to_address(text: str) -> str:
    """Read hex text as an address: keep the last 20 bytes, left-pad shorter input."""
    body = text[2:] if text[:2].lower() == "0x" else text
    if len(body) % 2:
        body = "0" + body
    try:
        raw = bytes.fromhex(body)
    except ValueError as exc:
        raise ValueError(f"invalid hex address: {text!r}") from exc
    raw = raw[-20:].rjust(20, b"\x00")
    return to_checksum_address(raw.hex())


def _point_add(p: Point, q: Point) -> Point:
    if p is None:
        return q
    if q is None:
        return p
    x1, y1 = p
    x2, y2 = q
    if x1 == x2:
        if (y1 + y2) % FIELD_PRIME == 0:
            return None
        slope = 3 * x1 * x1 * pow(2 * y1, -1, FIELD_PRIME) % FIELD_PRIME
    else:
        slope = (y2 - y1) * pow(x2 - x1, -1, FIELD_PRIME) % FIELD_PRIME
    x3 = (slope * slope - x1 - x2) % FIELD_PRIME
    y3 = (slope * (x1 - x3) - y1) % FIELD_PRIME
    return (x3, y3)


def _point_mul(scalar: int, point: Point) -> Point:
    result: Point = None
    addend = point
    while scalar:
        if scalar & 1:
            result = _point_add(result, addend)
        addend = _point_add(addend, addend)
        scalar >>= 1
    return result


def _address_of_point(point: Tuple[int, int]) -> str:
    x, y = point
    digest = keccak256(x.to_bytes(32, "big") + y.to_bytes(32, "big"))
    return to_checksum_address(digest[-20:].hex())


def _deterministic_nonces(secret: int, digest: bytes) -> Iterator[int]:
    """Nonce candidates per RFC 6979 with HMAC-SHA256."""
    key_bytes = secret.to_bytes(32, "big")
    hashed = (int.from_bytes(digest, "big") % CURVE_ORDER).to_bytes(32, "big")

    def mac(key: bytes, msg: bytes) -> bytes:
        return hmac.new(key, msg, hashlib.sha256).digest()

    v = b"\x01" * 32
    k = b"\x00" * 32
    k = mac(k, v + b"\x00" + key_bytes + hashed)
    v = mac(k, v)
    k = mac(k, v + b"\x01" + key_bytes + hashed)
    v = mac(k, v)
    while True:
        v = mac(k, v)
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < CURVE_ORDER:
            yield candidate
        k = mac(k, v + b"\x00")
        v = mac(k, v)


@dataclass(frozen=True)
class Signature:
    """An ECDSA signature with its recovery id (y parity in the low bit)."""

    r: int
    s: int
    v: int


@dataclass(frozen=True)
class PrivateKey:
    """A secp256k1 private key."""

    secret: int = field(repr=False)

    def __post_init__(self) -> None:
        if not 1 <= self.secret < CURVE_ORDER:
            raise ValueError("private key out of range")

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(secrets.randbelow(CURVE_ORDER - 1) + 1)

    @classmethod
    def from_hex(cls, text: str) -> "PrivateKey":
        body = text[2:] if text[:2].lower() == "0x" else text
        if len(body) != 64:
            raise ValueError("private key must be 32 bytes of hex")
        try:
            raw = bytes.fromhex(body)
        except ValueError as exc:
            raise ValueError("invalid hex in private key") from exc
        return cls(int.from_bytes(raw, "big"))

    def to_hex(self) -> str:
        """Lower-case hex of the 32 key bytes, without a 0x prefix."""
        return self.secret.to_bytes(32, "big").hex()

    def public_key(self) -> Tuple[int, int]:
        point = _point_mul(self.secret, _GENERATOR)
        assert point is not None
        return point

    def address(self) -> str:
        return _address_of_point(self.public_key())

    def sign_digest(self, digest: bytes) -> Signature:
        """Sign a 32-byte digest deterministically, with low-s normalisation."""
        if len(digest) != 32:
            raise ValueError("digest must be 32 bytes")
        z = int.from_bytes(digest, "big")
        for k in _deterministic_nonces(self.secret, digest):
            point = _point_mul(k, _GENERATOR)
            assert point is not None
            rx, ry = point
            r = rx % CURVE_ORDER
            if r == 0:
                continue
            s = pow(k, -1, CURVE_ORDER) * (z + r * self.secret) % CURVE_ORDER
            if s == 0:
                continue
            recovery = (ry & 1) | (2 if rx >= CURVE_ORDER else 0)
            if s > CURVE_ORDER // 2:
                s = CURVE_ORDER - s
                recovery ^= 1
            return Signature(r=r, s=s, v=recovery)
        raise RuntimeError("unreachable")


def recover_address(digest: bytes, signature: Signature) -> str:
    """Return the address whose key produced ``signature`` over ``digest``."""
    if len(digest) != 32:
        raise ValueError("digest must be 32 bytes")
    r, s, v = signature.r, signature.s, signature.v
    if not (1 <= r < CURVE_ORDER and 1 <= s < CURVE_ORDER and 0 <= v <= 3):
        raise ValueError("invalid signature values")
    x = r + (v >> 1) * CURVE_ORDER
    if x >= FIELD_PRIME:
        raise ValueError("invalid signature: x out of range")
    alpha = (pow(x, 3, FIELD_PRIME) + 7) % FIELD_PRIME
    beta = pow(alpha, (FIELD_PRIME + 1) // 4, FIELD_PRIME)
    if beta * beta % FIELD_PRIME != alpha:
        raise ValueError("invalid signature: no curve point")
    y = beta if (beta & 1) == (v & 1) else FIELD_PRIME - beta
    z = int.from_bytes(digest, "big")
    r_inv = pow(r, -1, CURVE_ORDER)
    u1 = (-z * r_inv) % CURVE_ORDER
    u2 = (s * r_inv) % CURVE_ORDER
    point = _point_add(_point_mul(u1, _GENERATOR), _point_mul(u2, (x, y)))
    if point is None:
        raise ValueError("invalid signature: point at infinity")
    return _address_of_point(point)