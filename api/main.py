"""
Leverage Planner - API
Plans leveraged mints and redeems; execution happens client side.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from api.router_registry import get_router_bindings
from api.services.leverage import leverage_planning_service
from core.logging import log
from core.settings.config import settings

app = FastAPI(
    title="Leverage Planner API",
    description="Flash-loan and swap planning for leverage token mints and redeems",
    version=settings.app_version,
)


@app.on_event("shutdown")
async def shutdown_event():
    """Close quote source HTTP clients."""
    await leverage_planning_service.close()
    log.info("Leverage planner API stopped")


@app.api_route("/health", methods=["GET", "HEAD"])
async def health_check():
    """Health check endpoint"""
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "service": "leverage-planner",
            "version": settings.app_version,
            "chain": settings.chain,
        },
    )


for binding in get_router_bindings():
    binding.include_in(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
