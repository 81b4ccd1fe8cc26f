"""Concrete collaborators talking to an Ethereum node."""

from offerind.clients.rpc import RPC
from offerind.clients.source import EthLogSource
from offerind.clients.ws import WebsocketLogStream

__all__ = ["RPC", "EthLogSource", "WebsocketLogStream"]
