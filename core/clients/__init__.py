"""
Client package for the leverage planner.

Contains the HTTP base client, quote sources and the on-chain preview oracle.
"""

from .base_client import BaseHTTPClient

__all__ = [
    "BaseHTTPClient",
]
