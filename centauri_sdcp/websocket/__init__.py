"""SDCP websocket client."""

from .client import SDCPClient
from .correlator import CommandCorrelator
from .dispatcher import MessageDispatcher, MessageKind
from .session import TransportSession

__all__ = [
    "CommandCorrelator",
    "MessageDispatcher",
    "MessageKind",
    "SDCPClient",
    "TransportSession",
]
