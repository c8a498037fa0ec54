"""Offer router - FastAPI endpoints for credit usage"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...context import WorkflowContext, get_context
from ...shared.envelope import http_status_for
from .controller import OfferController

router = APIRouter(prefix="/offers", tags=["Offers"])


def get_offer_controller(ctx: WorkflowContext = Depends(get_context)) -> OfferController:
    """Dependency injection for OfferController"""
    return OfferController(ctx)


@router.get("/{offer_id}/usage")
async def get_offer_usage(
    offer_id: str,
    role: str = Query(...),
    controller: OfferController = Depends(get_offer_controller),
):
    result = controller.get_offer_usage(role, offer_id)
    return JSONResponse(status_code=http_status_for(result), content=result)


@router.get("/clients/{client_id}/subscriptions")
async def get_client_subscriptions(
    client_id: str,
    role: str = Query(...),
    controller: OfferController = Depends(get_offer_controller),
):
    """Subscriptions of a client with the credit usage of each offer"""
    result = controller.get_client_subscriptions(role, client_id)
    return JSONResponse(status_code=http_status_for(result), content=result)
