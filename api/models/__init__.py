"""API models package."""

from api.models.leverage import (
    CallModel,
    MintPlanRequest,
    MintPlanResponse,
    PlanningErrorDetail,
    PlanningErrorResponse,
    RedeemPlanRequest,
    RedeemPlanResponse,
)

__all__ = [
    "CallModel",
    "MintPlanRequest",
    "MintPlanResponse",
    "PlanningErrorDetail",
    "PlanningErrorResponse",
    "RedeemPlanRequest",
    "RedeemPlanResponse",
]
