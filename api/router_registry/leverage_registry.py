"""Leverage router bindings."""

from __future__ import annotations

from collections.abc import Sequence

from api.router_registry.base import RouterBinding
from api.routers import leverage


def get_leverage_router_bindings() -> Sequence[RouterBinding]:
    return (RouterBinding(leverage.router, prefix="/api/leverage", tags=("Leverage Planning",)),)
