# pingload

pingload puts transaction load on an EVM chain and measures how long the
chain takes to settle it. The chain must have a deployed contract with
`ping(uint256)`, `multiSend(address[],uint256)` and `pingCount()`
methods and a `Pong(uint256 createdTimestamp, uint256 pingCount,
uint256 blockTimestamp)` event. Many wallets call `ping` with the
current time in milliseconds. A listener collects the `Pong` events and
reports latency figures.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Configuration

Each command reads a YAML file, `config.yaml` in the current directory
by default. The global `--config PATH` option selects another file.

```yaml
rpc_url: http://localhost:8545
ping_address: "0x0000000000000000000000000000000000000000"
root_private_key: placeholder
eth_send_amount: 1000000000000000
```

- `rpc_url`: the HTTP or HTTPS JSON-RPC endpoint of the node.
- `ping_address`: the address of the deployed Ping contract.
- `root_private_key`: the hex private key (64 digits, with or without
  `0x`) of the account that funds the load wallets.
- `eth_send_amount`: the amount in wei that each wallet receives.

An environment variable with the upper-case name of a key, for example
`RPC_URL`, overrides that key when the variable is set and not empty.
This works only for keys that already appear in the file.

Every command loads this file first. Then it connects to the node and
reads the chain id, so the node must be reachable even for
`generate-wallets`. On a failure the command prints the error to
standard error and exits with status 1.

## Usage

Run these steps in order.

1. Create fresh wallets and write them to `wallets.json` as a JSON array
   of `{"private_key": ..., "address": ...}` objects. `--count` sets how
   many wallets to create (200 by default). `--wallets` sets the file:

   ```
   pingload generate-wallets
   ```

2. Fund every wallet from the root account. This sends a single
   `multiSend` transaction with `eth_send_amount` wei per wallet attached
   and prints the transaction hash:

   ```
   pingload fund-wallets
   ```

3. Start the listener in one terminal. It polls the node for new blocks
   once a second and reads the `Pong` logs of the contract. It begins
   with the block after the current one. After 12,000 events, or when
   you press Ctrl-C, it prints the statistics:

   ```
   pingload listen
   ```

4. Start the load in another terminal. Every wallet in `wallets.json`
   runs in its own thread and sends 60 pings. Rounds start every 15
   seconds. Within each round a random delay of 0.5 to 14 seconds
   passes before the ping is sent:

   ```
   pingload ping
   ```

`fund-wallets` and `ping` also accept `--wallets PATH`. Progress goes to
the log on standard error.

## Transactions

Transactions are EIP-1559 (type 2) transactions with an empty access
list. They are signed locally and sent with `eth_sendRawTransaction`.

- The nonce is the sender's pending transaction count.
- The priority fee comes from `eth_maxPriorityFeePerGas`.
- The fee cap is the priority fee plus twice the latest block's base
  fee.
- The gas limit comes from `eth_estimateGas`.

A chain whose blocks have no base fee is rejected.

## Report

The listener records three durations for each event:

- `CreatedToMineDuration`: from the ping's creation timestamp to the
  timestamp of the block that emitted the `Pong`.
- `MineToBackendDuration`: from that block's timestamp to the moment
  the listener handled the event.
- `CreatedToBackendDuration`: the whole path, end to end.

For each duration the report prints the total count, maximum, minimum,
P90, P95 and average, in forms such as `1m2.5s`, `250ms` or `12ns`. The
P90 and P95 figures are the values at index `int(n * 0.90)` and
`int(n * 0.95)` of the sorted list.

## Library use

The building blocks can be used directly:

- `pingload.keys`: `PrivateKey` for generation, hex import and export,
  address derivation and deterministic low-s signing with
  `sign_digest`. The module also has `recover_address`, `keccak256`,
  `to_checksum_address` and `hex_to_address`.
- `pingload.transaction`: `rlp_encode`, `DynamicFeeTransaction` and
  `SignedTransaction`.
- `pingload.rpc`: `EthClient`, a JSON-RPC client over HTTP, together
  with `Log` and `RpcError`.
- `pingload.contract`: `PingContract` with `ping`, `multi_send`,
  `ping_count` and `parse_pong`, plus the ABI helpers `encode_ping`,
  `encode_multi_send`, `decode_uint256` and `function_selector`.
- `pingload.config`: `load_config` and `connect`.
- `pingload.wallets`: `generate_wallets`, `save_wallets`,
  `load_wallets` and `fund_wallets`.
- `pingload.listener`: `poll_pong_logs`, `measure` and `listen`.
- `pingload.sender`: `run_pinger` and `run_ping`.
- `pingload.stats`: `summarize`, `format_duration`, `format_stats` and
  `report`.

## Limitations

- pingload does not deploy the Ping contract. It must already be on the
  chain.
- Only HTTP(S) endpoints are supported. The listener polls with
  `eth_getLogs` and does not use subscriptions.
- Only dynamic-fee transactions are built, so legacy chains without a
  base fee are not supported.