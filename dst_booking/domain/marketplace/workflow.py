"""Marketplace workflow - session visibility and operator staffing

Session lifecycle on the marketplace:

  pending_confirmation (hidden) --confirm--> confirmed (visible)

and, in parallel for every operator of a confirmed, visible session:

  pending --accept--> accepted
  pending --reject--> rejected

Accepting an operator has no effect on the session itself or on other
applications; min/preferred operator counts are advisory.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError

from ...config import (
    DEFAULT_MIN_OPERATORS,
    DEFAULT_PREFERRED_OPERATORS,
    MARKETPLACE_MAX_PAGE_SIZE,
    MARKETPLACE_PAGE_SIZE,
)
from ...context import WorkflowContext
from ...models import ApplicationStatus, SessionOperator, SessionStatus, ShootingSession
from ...shared.envelope import ErrorCode, WorkflowError, envelope
from ...shared.validators import require_id, validate_date
from ...utils.sanitization import clean_identifiers, sanitize_string
from ..access.role_guard import is_marketplace_visible
from ..sessions.schemas import serialize_application, serialize_session
from .schemas import SessionRequestCreate

logger = logging.getLogger(__name__)


class MarketplaceWorkflow:
    """Booking requests, confirmation and operator applications"""

    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db

    def _load_session(self, session_id: str) -> ShootingSession:
        session = self.ctx.sessions.get_by_id(self.db, session_id)
        if not session:
            raise WorkflowError(ErrorCode.SESSION_NOT_FOUND, f"Session {session_id} not found")
        return session

    def _load_pending_application(self, session_id: str, operator_id: str) -> SessionOperator:
        application = self.ctx.applications.get(self.db, session_id, operator_id)
        if not application:
            raise WorkflowError(
                ErrorCode.APPLICATION_NOT_FOUND,
                f"Operator {operator_id} has not applied to session {session_id}",
            )
        if application.status != ApplicationStatus.PENDING.value:
            raise WorkflowError(
                ErrorCode.INVALID_STATUS,
                f"Application status is {application.status}, not pending",
            )
        return application

    # ========================================================================
    # CLIENT: session requests
    # ========================================================================

    @envelope
    def create_session_request(self, data: SessionRequestCreate) -> dict:
        """Always created pending_confirmation and hidden from operators"""
        client_id = (data.clientId or "").strip()
        setup_ids = clean_identifiers(data.setupIds)
        if not client_id or not data.date or not setup_ids:
            raise WorkflowError(ErrorCode.INVALID_DATA, "Missing clientId, date, or setupIds")

        try:
            session_date = validate_date(data.date)
        except ValueError as e:
            raise WorkflowError(ErrorCode.INVALID_DATA, str(e)) from e

        requirement = data.operatorRequirement
        min_operators = requirement.minOperators if requirement else DEFAULT_MIN_OPERATORS
        preferred_operators = (
            requirement.preferredOperators if requirement else DEFAULT_PREFERRED_OPERATORS
        )
        if min_operators < 0 or preferred_operators < 0:
            raise WorkflowError(ErrorCode.INVALID_DATA, "Operator counts must be >= 0")

        if data.offerId and not self.ctx.offers.get_by_id(self.db, data.offerId):
            raise WorkflowError(ErrorCode.OFFER_NOT_FOUND, f"Offer {data.offerId} not found")

        session = self.ctx.sessions.create(
            self.db,
            client_id=client_id,
            date=session_date,
            region_id=data.regionId,
            offer_id=data.offerId,
            setup_ids=setup_ids,
            min_operators=min_operators,
            preferred_operators=preferred_operators,
            notes=sanitize_string(data.notes) or "",
            status=SessionStatus.PENDING_CONFIRMATION.value,
            marketplace_visible=False,
        )

        logger.info(f"📥 Session request {session.id} created for client {session.client_id}")

        return {
            "session": serialize_session(session),
            "message": "Session request created. Awaiting enterprise confirmation.",
        }

    # ========================================================================
    # ENTERPRISE: confirmation
    # ========================================================================

    @envelope
    def enterprise_confirm_session(self, session_id: str) -> dict:
        """The only transition that makes a session visible to operators"""
        session_id = require_id(session_id, "sessionId")
        session = self._load_session(session_id)

        if session.status != SessionStatus.PENDING_CONFIRMATION.value:
            raise WorkflowError(
                ErrorCode.INVALID_STATUS,
                f"Session must be pending_confirmation, is {session.status}",
            )

        session = self.ctx.sessions.update(
            self.db,
            session,
            status=SessionStatus.CONFIRMED.value,
            marketplace_visible=True,
        )

        logger.info(f"✅ Session {session_id} confirmed and published to the marketplace")

        return {
            "session": serialize_session(session),
            "message": "Session confirmed and now visible on marketplace",
        }

    # ========================================================================
    # OPERATOR: marketplace
    # ========================================================================

    @envelope
    def get_marketplace_sessions(
        self,
        date_from: Optional[date] = None,
        region_id: Optional[str] = None,
        sort_by: str = "date",
        limit: Optional[int] = None,
    ) -> dict:
        """Confirmed, visible sessions ordered by date ascending by default"""
        if limit is None:
            limit = MARKETPLACE_PAGE_SIZE
        if limit < 1:
            raise WorkflowError(ErrorCode.INVALID_DATA, "limit must be at least 1")
        limit = min(limit, MARKETPLACE_MAX_PAGE_SIZE)

        if date_from is not None:
            try:
                date_from = validate_date(date_from)
            except ValueError as e:
                raise WorkflowError(ErrorCode.INVALID_DATA, str(e)) from e

        sessions = self.ctx.sessions.list_marketplace(
            self.db,
            date_from=date_from,
            region_id=region_id,
            order_by=sort_by or "date",
            limit=limit,
        )

        return {
            "sessions": [serialize_session(s) for s in sessions],
            "count": len(sessions),
            "message": f"Found {len(sessions)} marketplace sessions",
        }

    @envelope
    def apply_to_session(self, session_id: str, operator_id: str) -> dict:
        session_id = require_id(session_id, "sessionId")
        operator_id = require_id(operator_id, "operatorId")

        session = self._load_session(session_id)
        if not is_marketplace_visible(session):
            raise WorkflowError(
                ErrorCode.SESSION_NOT_AVAILABLE, "Session is not available on marketplace"
            )

        if self.ctx.applications.get(self.db, session_id, operator_id):
            raise WorkflowError(
                ErrorCode.ALREADY_APPLIED, "You have already applied to this session"
            )

        try:
            application = self.ctx.applications.create(
                self.db,
                session_id=session_id,
                operator_id=operator_id,
                status=ApplicationStatus.PENDING.value,
                applied_at=self.ctx.clock(),
            )
        except IntegrityError as e:
            # Lost the race against a concurrent application by the same operator
            self.db.rollback()
            raise WorkflowError(
                ErrorCode.ALREADY_APPLIED, "You have already applied to this session"
            ) from e

        logger.info(f"📨 Operator {operator_id} applied to session {session_id}")

        return {
            "application": serialize_application(application),
            "message": "Application sent. Enterprise will review and accept or reject.",
        }

    # ========================================================================
    # ENTERPRISE: staffing decisions
    # ========================================================================

    @envelope
    def accept_operator(self, session_id: str, operator_id: str) -> dict:
        session_id = require_id(session_id, "sessionId")
        operator_id = require_id(operator_id, "operatorId")

        application = self._load_pending_application(session_id, operator_id)
        application = self.ctx.applications.set_status(
            self.db, application, ApplicationStatus.ACCEPTED.value, self.ctx.clock()
        )

        logger.info(f"✅ Operator {operator_id} accepted for session {session_id}")

        return {
            "application": serialize_application(application),
            "message": f"Operator {operator_id} accepted for session {session_id}",
        }

    @envelope
    def reject_operator(
        self, session_id: str, operator_id: str, reason: Optional[str] = None
    ) -> dict:
        session_id = require_id(session_id, "sessionId")
        operator_id = require_id(operator_id, "operatorId")

        application = self._load_pending_application(session_id, operator_id)
        application = self.ctx.applications.set_status(
            self.db,
            application,
            ApplicationStatus.REJECTED.value,
            self.ctx.clock(),
            reason=sanitize_string(reason) if reason else None,
        )

        logger.info(f"❎ Operator {operator_id} rejected for session {session_id}")

        return {
            "application": serialize_application(application),
            "message": f"Operator {operator_id} rejected for session {session_id}",
        }

    # ========================================================================
    # Application listings
    # ========================================================================

    @envelope
    def get_pending_applications(self, session_id: str) -> dict:
        session_id = require_id(session_id, "sessionId")
        self._load_session(session_id)

        applications = self.ctx.applications.list_for_session(
            self.db, session_id, status=ApplicationStatus.PENDING.value
        )
        return {
            "sessionId": session_id,
            "applications": [serialize_application(a) for a in applications],
            "count": len(applications),
        }

    @envelope
    def get_operator_applications(self, operator_id: str) -> dict:
        operator_id = require_id(operator_id, "operatorId")
        applications = self.ctx.applications.list_for_operator(self.db, operator_id)

        summary = {"total": len(applications)}
        for status in ApplicationStatus:
            summary[status.value] = sum(1 for a in applications if a.status == status.value)

        return {
            "operatorId": operator_id,
            "applications": [serialize_application(a) for a in applications],
            "count": len(applications),
            "summary": summary,
        }
