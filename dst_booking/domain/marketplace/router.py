"""Marketplace router - FastAPI endpoints for booking requests and operator staffing"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...context import WorkflowContext, get_context
from ...shared.envelope import http_status_for
from .controller import MarketplaceController
from .schemas import RejectOperatorBody, RoleRequest, SessionRequestBody

logger = logging.getLogger(__name__)

sessions_router = APIRouter(prefix="/sessions", tags=["Sessions"])
router = APIRouter(prefix="/marketplace", tags=["Marketplace"])


class ApplyBody(RoleRequest):
    operatorId: str


def get_marketplace_controller(
    ctx: WorkflowContext = Depends(get_context),
) -> MarketplaceController:
    """Dependency injection for MarketplaceController"""
    return MarketplaceController(ctx)


def _respond(result: dict, success_status: int = 200) -> JSONResponse:
    return JSONResponse(status_code=http_status_for(result, success_status), content=result)


# ============================================================================
# SESSIONS
# ============================================================================


@sessions_router.get("")
async def get_visible_sessions(
    role: str = Query(...),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    """Sessions visible to the caller's role"""
    return _respond(controller.get_visible_sessions(role, entity_id))


@sessions_router.post("/requests")
async def create_session_request(
    data: SessionRequestBody,
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    """Client creates a session request (pending_confirmation, hidden)"""
    result = controller.create_session_request(data.role, data)
    return _respond(result, success_status=201)


@sessions_router.post("/{session_id}/confirm")
async def enterprise_confirm_session(
    session_id: str,
    data: RoleRequest,
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    """Enterprise confirms a request and publishes it to the marketplace"""
    return _respond(controller.enterprise_confirm_session(data.role, session_id))


# ============================================================================
# MARKETPLACE
# ============================================================================


@router.get("/sessions")
async def get_marketplace_sessions(
    role: str = Query(...),
    date_from: Optional[date] = Query(None, alias="date"),
    region: Optional[str] = Query(None),
    sort_by: str = Query("date", alias="sortBy"),
    limit: Optional[int] = Query(None),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(
        controller.get_marketplace_sessions(
            role, date_from=date_from, region_id=region, sort_by=sort_by, limit=limit
        )
    )


@router.post("/sessions/{session_id}/applications")
async def apply_to_session(
    session_id: str,
    data: ApplyBody,
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    result = controller.apply_to_session(data.role, session_id, data.operatorId)
    return _respond(result, success_status=201)


@router.post("/sessions/{session_id}/applications/{operator_id}/accept")
async def accept_operator(
    session_id: str,
    operator_id: str,
    data: RoleRequest,
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(controller.accept_operator(data.role, session_id, operator_id))


@router.post("/sessions/{session_id}/applications/{operator_id}/reject")
async def reject_operator(
    session_id: str,
    operator_id: str,
    data: RejectOperatorBody,
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(controller.reject_operator(data.role, session_id, operator_id, data.reason))


@router.get("/sessions/{session_id}/applications/pending")
async def get_pending_applications(
    session_id: str,
    role: str = Query(...),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(controller.get_pending_applications(role, session_id))


@router.get("/operators/{operator_id}/applications")
async def get_operator_applications(
    operator_id: str,
    role: str = Query(...),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(controller.get_operator_applications(role, operator_id))


# ============================================================================
# STAFFING
# ============================================================================


@router.get("/sessions/{session_id}/staffing")
async def get_staffing_status(
    session_id: str,
    role: str = Query(...),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(controller.get_staffing_status(role, session_id))


@router.get("/sessions/{session_id}/staffing/validation")
async def validate_staffing(
    session_id: str,
    role: str = Query(...),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    return _respond(controller.validate_staffing(role, session_id))


@router.get("/sessions/{session_id}/staffing/confirmation-check")
async def can_confirm_session(
    session_id: str,
    role: str = Query(...),
    controller: MarketplaceController = Depends(get_marketplace_controller),
):
    """Advisory check; confirmation itself does not enforce it"""
    return _respond(controller.can_confirm_session(role, session_id))
