"""Mission workflow - session completion and deletion with subscription credit accounting

Credits move on the *edge* of a status transition, never on the state alone:

  not terminee -> terminee   consume one credit (clamped to nb_sessions)
  terminee -> not terminee   roll one credit back (clamped to 0)
  terminee -> terminee       nothing

The session write and the ledger write are committed in one transaction, so
a failed session write never leaves a moved credit behind.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from ...context import WorkflowContext
from ...models import SessionStatus, ShootingSession
from ...shared.envelope import ErrorCode, WorkflowError, envelope
from ...shared.validators import require_id

logger = logging.getLogger(__name__)

COMPLETED = SessionStatus.TERMINEE.value


def is_completion(previous_status: str, new_status: str) -> bool:
    return new_status == COMPLETED and previous_status != COMPLETED


def is_reopening(previous_status: str, new_status: str) -> bool:
    return previous_status == COMPLETED and new_status != COMPLETED


class MissionWorkflow:
    """Session status transitions and their side effects on the credit ledger"""

    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db

    def _load_session(self, session_id: str) -> ShootingSession:
        session = self.ctx.sessions.get_by_id(self.db, session_id)
        if not session:
            raise WorkflowError(ErrorCode.SESSION_NOT_FOUND, f"Session {session_id} not found")
        return session

    def _subscription_offer(self, session: ShootingSession):
        """The session's offer, locked, when it is a subscription; otherwise None"""
        if not session.offer_id:
            return None
        offer = self.ctx.offers.get_for_update(self.db, session.offer_id)
        if not self.ctx.offers.is_subscription(offer):
            return None
        return offer

    @envelope
    def complete_mission(self, session_id: str, new_status: str) -> dict:
        """
        Move a session to `new_status` and settle its subscription credit.

        Returns sessionId, previousStatus, newStatus, creditsConsumed (0|1)
        and creditsRolledBack (0|1). creditsConsumed is 1 whenever the ledger
        row was written, even if the clamp kept the counter where it was.
        """
        session_id = require_id(session_id, "sessionId")
        new_status = require_id(new_status, "newStatus")

        session = self._load_session(session_id)
        previous_status = session.status

        updates = {"status": new_status}
        if new_status != SessionStatus.CONFIRMED.value:
            # Only enterprise confirmation may publish a session again
            updates["marketplace_visible"] = False

        try:
            self.ctx.sessions.update(self.db, session, commit=False, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update session {session_id}: {e}")
            raise WorkflowError(ErrorCode.SESSION_UPDATE_FAILED, str(e)) from e

        credits_consumed = 0
        credits_rolled_back = 0

        if is_completion(previous_status, new_status):
            offer = self._subscription_offer(session)
            if offer is not None:
                self.ctx.offers.consume_credit(self.db, offer, commit=False)
                credits_consumed = 1
        elif is_reopening(previous_status, new_status):
            offer = self._subscription_offer(session)
            if offer is not None:
                self.ctx.offers.rollback_credit(self.db, offer, commit=False)
                credits_rolled_back = 1

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to commit completion of session {session_id}: {e}")
            raise WorkflowError(ErrorCode.SESSION_UPDATE_FAILED, str(e)) from e

        logger.info(
            f"✅ Session {session_id} transitioned: {previous_status} → {new_status} "
            f"(consumed={credits_consumed}, rolled_back={credits_rolled_back})"
        )

        return {
            "message": "Session updated",
            "sessionId": session_id,
            "previousStatus": previous_status,
            "newStatus": new_status,
            "creditsConsumed": credits_consumed,
            "creditsRolledBack": credits_rolled_back,
        }

    @envelope
    def delete_mission(self, session_id: str) -> dict:
        """
        Delete a session. A completed session linked to a subscription gives
        its credit back first; both writes commit together.
        """
        session_id = require_id(session_id, "sessionId")
        session = self._load_session(session_id)

        credits_rolled_back = 0
        if session.status == COMPLETED:
            offer = self._subscription_offer(session)
            if offer is not None:
                self.ctx.offers.rollback_credit(self.db, offer, commit=False)
                credits_rolled_back = 1

        try:
            self.ctx.sessions.delete(self.db, session, commit=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete session {session_id}: {e}")
            raise WorkflowError(ErrorCode.SESSION_DELETE_FAILED, str(e)) from e

        logger.info(f"🗑️ Session {session_id} deleted (rolled_back={credits_rolled_back})")

        return {
            "message": "Session deleted",
            "sessionId": session_id,
            "creditsRolledBack": credits_rolled_back,
        }
