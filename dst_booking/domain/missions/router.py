"""Mission router - FastAPI endpoints for mission completion and deletion"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...context import WorkflowContext, get_context
from ...shared.envelope import http_status_for
from .controller import MissionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/missions", tags=["Missions"])


class CompleteMissionBody(BaseModel):
    role: str
    newStatus: str


def get_mission_controller(ctx: WorkflowContext = Depends(get_context)) -> MissionController:
    """Dependency injection for MissionController"""
    return MissionController(ctx)


@router.post("/{session_id}/complete")
async def complete_mission(
    session_id: str,
    data: CompleteMissionBody,
    controller: MissionController = Depends(get_mission_controller),
):
    """Change a mission's status and settle its subscription credit"""
    result = controller.complete_mission(data.role, session_id, data.newStatus)
    return JSONResponse(status_code=http_status_for(result), content=result)


@router.delete("/{session_id}")
async def delete_mission(
    session_id: str,
    role: str = Query(...),
    controller: MissionController = Depends(get_mission_controller),
):
    """Delete a mission, giving back its credit when it was completed"""
    result = controller.delete_mission(role, session_id)
    return JSONResponse(status_code=http_status_for(result), content=result)
