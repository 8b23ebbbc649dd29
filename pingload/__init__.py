"""Load generation and latency measurement for a Ping/Pong contract on an EVM chain."""

__version__ = "0.1.0"