"""On-chain LeverageManager preview oracle."""

from core.clients.leverage.manager import LeverageManagerOracle, PreviewOracleError
from core.clients.leverage.rpc import AsyncRPC, RPCError

__all__ = ["AsyncRPC", "LeverageManagerOracle", "PreviewOracleError", "RPCError"]
