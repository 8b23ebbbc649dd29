"""Generating, storing and funding test wallets."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from pingload.contract import Transactor
from pingload.keys import PrivateKey, hex_to_address


@dataclass(frozen=True)
class Wallet:
    """A private key in hex and the address it controls."""

    private_key: str = field(repr=False)
    address: str

    @property
    def key(self) -> PrivateKey:
        return PrivateKey.from_hex(self.private_key)

    def to_json(self) -> Dict[str, str]:
        return {"private_key": self.private_key, "address": self.address}

    @classmethod
    def from_json(cls, obj: Any) -> "Wallet":
        if not isinstance(obj, dict):
            raise ValueError("wallet entry must be an object")
        return cls(private_key=str(obj.get("private_key", "")), address=str(obj.get("address", "")))


def generate_wallets(count: int = 200) -> List[Wallet]:
    """Create ``count`` fresh wallets."""
    wallets = []
    for _ in range(count):
        key = PrivateKey.generate()
        wallets.append(Wallet(private_key=key.to_hex(), address=key.address()))
    return wallets


def save_wallets(wallets: Sequence[Wallet], path: str = "wallets.json") -> None:
    """Write wallets as a JSON array, replacing any existing file."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(json.dumps([w.to_json() for w in wallets], separators=(",", ":")))
        handle.write("\n")


def load_wallets(path: str = "wallets.json") -> List[Wallet]:
    """Read wallets from ``path``; every key and address must be valid."""
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if data is None:
        data = []
    if not isinstance(data, list):
        raise ValueError("wallet file must hold a JSON array")
    wallets = [Wallet.from_json(entry) for entry in data]
    for wallet in wallets:
        wallet.key
        hex_to_address(wallet.address)
    return wallets


def fund_wallets(env: Any, wallets: Sequence[Wallet]):
    """Send the configured amount to every wallet in one multiSend call."""
    recipients = [hex_to_address(w.address) for w in wallets]
    root_key = PrivateKey.from_hex(env.config.root_private_key)
    amount = env.config.eth_send_amount
    transactor = Transactor(key=root_key, chain_id=env.chain_id, value=amount * len(recipients))
    return env.ping_contract.multi_send(transactor, recipients, amount)