"""Loading the YAML configuration and connecting to the node."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import requests
import yaml

from pingload.contract import PingContract
from pingload.rpc import EthClient, RpcError


class ConfigError(Exception):
    """The configuration could not be loaded or used."""


@dataclass(frozen=True)
class Config:
    """Settings read from the configuration file and the environment."""

    rpc_url: str = ""
    ping_address: str = ""
    root_private_key: str = field(default="", repr=False)
    eth_send_amount: int = 0


_FIELDS = ("rpc_url", "ping_address", "root_private_key", "eth_send_amount")


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise TypeError(f"expected a scalar, got {type(value).__name__}")
    return str(value)


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected an integer, got {type(value).__name__}")


def load_config(path: str = "config.yaml", environ: Optional[Mapping[str, str]] = None) -> Config:
    """Read the YAML file at ``path``; environment variables override its keys."""
    environ = os.environ if environ is None else environ
    try:
        with open(path, encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError("failed to load config") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("failed to load config")

    settings = {str(key).lower(): value for key, value in raw.items()}
    for key in list(settings):
        override = environ.get(key.upper())
        if override:
            settings[key] = override

    try:
        return Config(
            rpc_url=_as_str(settings.get("rpc_url")),
            ping_address=_as_str(settings.get("ping_address")),
            root_private_key=_as_str(settings.get("root_private_key")),
            eth_send_amount=_as_int(settings.get("eth_send_amount")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError("failed to load config") from exc


@dataclass
class Environment:
    """A loaded configuration with its live node connection."""

    config: Config
    client: Any
    ping_contract: Any
    chain_id: int


def connect(config: Config) -> Environment:
    """Connect to the node, read its chain id and bind the Ping contract."""
    if urlparse(config.rpc_url).scheme not in ("http", "https"):
        raise ConfigError("failed to connect to rpc")
    client = EthClient(config.rpc_url)
    try:
        chain_id = client.chain_id()
    except (RpcError, requests.RequestException, ValueError, TypeError) as exc:
        raise ConfigError("failed to get chain id") from exc
    try:
        contract = PingContract(config.ping_address, client)
    except ValueError as exc:
        raise ConfigError("failed to connect to ping contract") from exc
    return Environment(config=config, client=client, ping_contract=contract, chain_id=chain_id)