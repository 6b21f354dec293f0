"""Leverage router: mint and redeem planning."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api.models.leverage import (
    MintPlanRequest,
    MintPlanResponse,
    PlanningErrorDetail,
    PlanningErrorResponse,
    RedeemPlanRequest,
    RedeemPlanResponse,
)
from api.services.leverage import leverage_planning_service
from core.clients.leverage import PreviewOracleError
from core.clients.quotes import QuoteError
from core.logging import log
from core.planning.errors import InvalidParameter, PlanningError, UnsupportedAssetPair

router = APIRouter()

PLANNING_ERROR_RESPONSES = {
    400: {"model": PlanningErrorResponse, "description": "Invalid parameters or unsupported asset pair"},
    422: {"model": PlanningErrorResponse, "description": "No feasible plan for the requested amounts"},
    502: {"model": PlanningErrorResponse, "description": "Quote source or preview oracle failure"},
}


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (InvalidParameter, UnsupportedAssetPair)):
        status_code = 400
    elif isinstance(exc, PlanningError):
        status_code = 422
    else:
        status_code = 502
    detail = PlanningErrorDetail(
        error=type(exc).__name__,
        message=getattr(exc, "message", str(exc)),
        hint=getattr(exc, "hint", "") or "",
    )
    log.warning(f"Planning request failed status={status_code} error={detail.error}: {detail.message}")
    return HTTPException(status_code=status_code, detail=detail.model_dump())


@router.post("/plans/mint", response_model=MintPlanResponse, responses=PLANNING_ERROR_RESPONSES)
async def plan_mint(payload: MintPlanRequest):
    try:
        plan = await leverage_planning_service.plan_mint(payload)
    except (PlanningError, QuoteError, PreviewOracleError) as exc:
        raise _to_http_error(exc) from exc
    return MintPlanResponse(**plan.to_dict())


@router.post("/plans/redeem", response_model=RedeemPlanResponse, responses=PLANNING_ERROR_RESPONSES)
async def plan_redeem(payload: RedeemPlanRequest):
    try:
        plan = await leverage_planning_service.plan_redeem(payload)
    except (PlanningError, QuoteError, PreviewOracleError) as exc:
        raise _to_http_error(exc) from exc
    return RedeemPlanResponse(**plan.to_dict())
