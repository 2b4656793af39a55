"""Mesh security: virtual staking max caps, delegation accounting and scheduled rebalancing."""

__version__ = "0.1.0"

__all__ = [
    "addresses",
    "coins",
    "context",
    "contract",
    "errors",
    "events",
    "handler",
    "interfaces",
    "keeper",
    "keys",
    "messages",
    "module",
    "msg_server",
    "querier",
    "query_plugin",
]