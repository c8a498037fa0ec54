"""Marketplace controller - role checks in front of the booking and staffing workflows"""

from datetime import date
from typing import Optional

from ...context import WorkflowContext
from ...shared.envelope import envelope
from ..access.role_guard import Action, Role
from ..sessions.schemas import serialize_session
from .schemas import SessionRequestCreate
from .staffing import StaffingWorkflow
from .workflow import MarketplaceWorkflow


class MarketplaceController:
    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db
        self.workflow = MarketplaceWorkflow(ctx)
        self.staffing = StaffingWorkflow(ctx)

    # ============================================================================
    # CLIENT
    # ============================================================================

    @envelope
    def create_session_request(self, role: str, data: SessionRequestCreate) -> dict:
        self.ctx.guard.require(
            role, Action.CREATE_SESSION_REQUEST, "Only clients can create session requests"
        )
        return self.workflow.create_session_request(data)

    # ============================================================================
    # ENTERPRISE
    # ============================================================================

    @envelope
    def enterprise_confirm_session(self, role: str, session_id: str) -> dict:
        self.ctx.guard.require(role, Action.CONFIRM_SESSION, "Only enterprise can confirm sessions")
        return self.workflow.enterprise_confirm_session(session_id)

    @envelope
    def accept_operator(self, role: str, session_id: str, operator_id: str) -> dict:
        self.ctx.guard.require(role, Action.ACCEPT_OPERATOR, "Only enterprise can accept operators")
        return self.workflow.accept_operator(session_id, operator_id)

    @envelope
    def reject_operator(
        self, role: str, session_id: str, operator_id: str, reason: Optional[str] = None
    ) -> dict:
        self.ctx.guard.require(role, Action.REJECT_OPERATOR, "Only enterprise can reject operators")
        return self.workflow.reject_operator(session_id, operator_id, reason)

    @envelope
    def get_pending_applications(self, role: str, session_id: str) -> dict:
        self.ctx.guard.require(
            role, Action.VIEW_STAFFING, "Only enterprise can review session applications"
        )
        return self.workflow.get_pending_applications(session_id)

    @envelope
    def get_staffing_status(self, role: str, session_id: str) -> dict:
        self.ctx.guard.require(role, Action.VIEW_STAFFING, "Only enterprise can view staffing")
        return self.staffing.get_staffing_status(session_id)

    @envelope
    def validate_staffing(self, role: str, session_id: str) -> dict:
        self.ctx.guard.require(role, Action.VIEW_STAFFING, "Only enterprise can view staffing")
        return self.staffing.validate_staffing(session_id)

    @envelope
    def can_confirm_session(self, role: str, session_id: str) -> dict:
        self.ctx.guard.require(role, Action.VIEW_STAFFING, "Only enterprise can view staffing")
        return self.staffing.can_confirm_session(session_id)

    # ============================================================================
    # OPERATOR
    # ============================================================================

    @envelope
    def get_marketplace_sessions(
        self,
        role: str,
        date_from: Optional[date] = None,
        region_id: Optional[str] = None,
        sort_by: str = "date",
        limit: Optional[int] = None,
    ) -> dict:
        self.ctx.guard.require(role, Action.VIEW_MARKETPLACE, "Only operators can view marketplace")
        return self.workflow.get_marketplace_sessions(
            date_from=date_from, region_id=region_id, sort_by=sort_by, limit=limit
        )

    @envelope
    def apply_to_session(self, role: str, session_id: str, operator_id: str) -> dict:
        self.ctx.guard.require(
            role, Action.APPLY_TO_SESSION, "Only operators can apply to sessions"
        )
        return self.workflow.apply_to_session(session_id, operator_id)

    @envelope
    def get_operator_applications(self, role: str, operator_id: str) -> dict:
        self.ctx.guard.require(
            role, Action.VIEW_APPLICATIONS, "Clients cannot view operator applications"
        )
        return self.workflow.get_operator_applications(operator_id)

    # ============================================================================
    # ALL ROLES
    # ============================================================================

    @envelope
    def get_visible_sessions(self, role: str, entity_id: Optional[str] = None) -> dict:
        """Sessions the caller may see; entity_id is the caller's client or operator id"""
        parsed = self.ctx.guard.require(role, Action.VIEW_SESSIONS, "Unknown role")

        if parsed is Role.CLIENT:
            candidates = self.ctx.sessions.list_for_client(self.db, entity_id) if entity_id else []
        else:
            candidates = self.ctx.sessions.list_all(self.db)

        sessions = self.ctx.guard.visible_sessions(parsed, candidates, entity_id)
        return {
            "role": parsed.value,
            "sessions": [serialize_session(s) for s in sessions],
            "count": len(sessions),
        }
