"""Composable router registry."""

from __future__ import annotations

from collections.abc import Sequence

from api.router_registry.base import RouterBinding
from api.router_registry.leverage_registry import get_leverage_router_bindings


def get_router_bindings() -> Sequence[RouterBinding]:
    return (*get_leverage_router_bindings(),)


__all__ = ["RouterBinding", "get_router_bindings"]
