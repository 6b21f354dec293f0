"""Router registry primitives."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import APIRouter, FastAPI


@dataclass(frozen=True)
class RouterBinding:
    """An APIRouter mounted under ``prefix`` with OpenAPI ``tags``."""

    router: APIRouter
    prefix: str = ""
    tags: tuple[str, ...] = ()

    def include_in(self, app: FastAPI) -> None:
        app.include_router(self.router, prefix=self.prefix, tags=list(self.tags))
