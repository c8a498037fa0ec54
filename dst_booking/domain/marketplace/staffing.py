"""Staffing report - how far a session is from being operationally staffed

Read-only: nothing here changes a session or an application, and
confirmation is never blocked by these checks.
"""

import logging

from ...context import WorkflowContext
from ...models import ApplicationStatus, SessionStatus, ShootingSession
from ...shared.envelope import ErrorCode, WorkflowError, envelope
from ...shared.validators import require_id

logger = logging.getLogger(__name__)

# Reasons reported by can_confirm_session
INVALID_STATUS = "INVALID_STATUS"
NO_SETUP_ASSIGNED = "NO_SETUP_ASSIGNED"
NO_OPERATOR_ASSIGNED = "NO_OPERATOR_ASSIGNED"


class StaffingWorkflow:
    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db

    def _load_session(self, session_id: str) -> ShootingSession:
        session = self.ctx.sessions.get_by_id(self.db, require_id(session_id, "sessionId"))
        if not session:
            raise WorkflowError(ErrorCode.SESSION_NOT_FOUND, f"Session {session_id} not found")
        return session

    def _count_by_status(self, session: ShootingSession) -> dict:
        applications = self.ctx.applications.list_for_session(self.db, session.id)
        counts = {status.value: 0 for status in ApplicationStatus}
        for application in applications:
            counts[application.status] = counts.get(application.status, 0) + 1
        counts["total"] = len(applications)
        return counts

    @staticmethod
    def _staffing(session: ShootingSession, accepted: int) -> dict:
        required = session.min_operators if session.min_operators is not None else 1
        missing = max(0, required - accepted)
        return {
            "requiredOperators": required,
            "assignedOperators": accepted,
            "missingOperators": missing,
            "isValid": missing == 0,
        }

    @envelope
    def validate_staffing(self, session_id: str) -> dict:
        """Accepted operators versus the session's minimum"""
        session = self._load_session(session_id)
        counts = self._count_by_status(session)
        return {"sessionId": session.id, **self._staffing(session, counts["accepted"])}

    @envelope
    def can_confirm_session(self, session_id: str) -> dict:
        """
        Advisory pre-confirmation check.

        Reasons: INVALID_STATUS (not pending_confirmation), NO_SETUP_ASSIGNED,
        NO_OPERATOR_ASSIGNED (fewer accepted operators than the minimum).
        """
        session = self._load_session(session_id)
        counts = self._count_by_status(session)
        staffing = self._staffing(session, counts["accepted"])

        reasons = []
        if session.status != SessionStatus.PENDING_CONFIRMATION.value:
            reasons.append(INVALID_STATUS)
        if not session.setup_ids:
            reasons.append(NO_SETUP_ASSIGNED)
        if not staffing["isValid"]:
            reasons.append(NO_OPERATOR_ASSIGNED)

        return {
            "sessionId": session.id,
            "canConfirm": not reasons,
            "reasons": reasons,
            "details": {
                "status": session.status,
                "setups": len(session.setup_ids or []),
                "operators": staffing["assignedOperators"],
                "operatorsRequired": staffing["requiredOperators"],
            },
        }

    @envelope
    def get_staffing_status(self, session_id: str) -> dict:
        session = self._load_session(session_id)
        counts = self._count_by_status(session)
        accepted = counts["accepted"]
        preferred = session.preferred_operators or 0
        staffing = self._staffing(session, accepted)

        return {
            "sessionId": session.id,
            "staffing": {
                "requiredOperators": staffing["requiredOperators"],
                "preferredOperators": preferred,
                "assignedOperators": accepted,
                "openPositions": max(0, preferred - accepted),
                "isStaffed": staffing["isValid"],
                "isFull": accepted >= preferred,
            },
            "applications": counts,
        }
