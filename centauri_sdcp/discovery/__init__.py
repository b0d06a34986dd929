"""Printer discovery."""

from .engine import DiscoveryEngine, DiscoveryProtocol

__all__ = ["DiscoveryEngine", "DiscoveryProtocol"]
