"""Mission controller - role checks in front of the mission workflow"""

from ...context import WorkflowContext
from ...shared.envelope import envelope
from ..access.role_guard import Action
from .workflow import MissionWorkflow


class MissionController:
    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db
        self.workflow = MissionWorkflow(ctx)

    @envelope
    def complete_mission(self, role: str, session_id: str, new_status: str) -> dict:
        self.ctx.guard.require(
            role, Action.COMPLETE_MISSION, "Only enterprise can change mission status"
        )
        return self.workflow.complete_mission(session_id, new_status)

    @envelope
    def delete_mission(self, role: str, session_id: str) -> dict:
        self.ctx.guard.require(role, Action.DELETE_MISSION, "Only enterprise can delete missions")
        return self.workflow.delete_mission(session_id)
