"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, List, Optional

import requests

from pingload.config import ConfigError, connect, load_config
from pingload.listener import listen
from pingload.rpc import RpcError
from pingload.sender import run_ping
from pingload.stats import report
from pingload.wallets import fund_wallets, generate_wallets, load_wallets, save_wallets


def _listen(env: Any, args: argparse.Namespace) -> int:
    text = report(listen(env))
    if text:
        print(text, end="")
    return 0


def _generate(env: Any, args: argparse.Namespace) -> int:
    save_wallets(generate_wallets(args.count), args.wallets)
    print(f"{args.count} wallets saved to {args.wallets}")
    return 0


def _fund(env: Any, args: argparse.Namespace) -> int:
    tx = fund_wallets(env, load_wallets(args.wallets))
    print("Transaction sent:", tx.hash_hex())
    return 0


def _ping(env: Any, args: argparse.Namespace) -> int:
    run_ping(env, [wallet.key for wallet in load_wallets(args.wallets)])
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pingload")
    parser.add_argument("--config", default="config.yaml", help="configuration file")
    commands = parser.add_subparsers(dest="command")

    listen_cmd = commands.add_parser("listen", help="measure Pong event latency")
    listen_cmd.set_defaults(handler=_listen)

    generate_cmd = commands.add_parser("generate-wallets", help="create test wallets")
    generate_cmd.add_argument("--count", type=int, default=200)
    generate_cmd.add_argument("--wallets", default="wallets.json")
    generate_cmd.set_defaults(handler=_generate)

    fund_cmd = commands.add_parser("fund-wallets", help="fund test wallets")
    fund_cmd.add_argument("--wallets", default="wallets.json")
    fund_cmd.set_defaults(handler=_fund)

    ping_cmd = commands.add_parser("ping", help="send pings from every wallet")
    ping_cmd.add_argument("--wallets", default="wallets.json")
    ping_cmd.set_defaults(handler=_ping)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        env = connect(load_config(args.config))
        return args.handler(env, args)
    except (ConfigError, RpcError, requests.RequestException, ValueError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())