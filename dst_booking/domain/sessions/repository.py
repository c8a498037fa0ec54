"""Session repository - Database operations for shooting sessions and applications"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import SessionOperator, SessionStatus, ShootingSession

# Columns a marketplace listing may be ordered by
SORTABLE_FIELDS = {
    "date": ShootingSession.date,
    "created_at": ShootingSession.created_at,
    "region_id": ShootingSession.region_id,
}


class SessionRepository:
    """Repository for session database operations"""

    @staticmethod
    def get_by_id(db: Session, session_id: str) -> Optional[ShootingSession]:
        """Get a session by ID, None when absent"""
        return db.query(ShootingSession).filter(ShootingSession.id == session_id).first()

    @staticmethod
    def create(db: Session, commit: bool = True, **session_data) -> ShootingSession:
        """Create a new session"""
        session = ShootingSession(**session_data)
        db.add(session)
        if commit:
            db.commit()
            db.refresh(session)
        else:
            db.flush()
        return session

    @staticmethod
    def update(
        db: Session, session: ShootingSession, commit: bool = True, **updates
    ) -> ShootingSession:
        """Update a session with provided fields"""
        for key, value in updates.items():
            if hasattr(session, key):
                setattr(session, key, value)

        if commit:
            db.commit()
            db.refresh(session)
        else:
            db.flush()
        return session

    @staticmethod
    def delete(db: Session, session: ShootingSession, commit: bool = True) -> None:
        """Delete a session (its applications cascade)"""
        db.delete(session)
        if commit:
            db.commit()
        else:
            db.flush()

    @staticmethod
    def list_marketplace(
        db: Session,
        date_from: Optional[date] = None,
        region_id: Optional[str] = None,
        order_by: str = "date",
        ascending: bool = True,
        limit: int = 50,
    ) -> list[ShootingSession]:
        """Confirmed sessions flagged visible with at least one setup, filtered and ordered"""
        query = db.query(ShootingSession).filter(
            ShootingSession.status == SessionStatus.CONFIRMED.value,
            ShootingSession.marketplace_visible.is_(True),
            func.json_array_length(ShootingSession.setup_ids) > 0,
        )

        if date_from:
            query = query.filter(ShootingSession.date >= date_from)

        if region_id:
            query = query.filter(ShootingSession.region_id == region_id)

        column = SORTABLE_FIELDS.get(order_by, ShootingSession.date)
        query = query.order_by(column.asc() if ascending else column.desc(), ShootingSession.id)

        return query.limit(limit).all()

    @staticmethod
    def list_all(db: Session) -> list[ShootingSession]:
        return db.query(ShootingSession).order_by(ShootingSession.date.asc()).all()

    @staticmethod
    def list_for_client(db: Session, client_id: str) -> list[ShootingSession]:
        return (
            db.query(ShootingSession)
            .filter(ShootingSession.client_id == client_id)
            .order_by(ShootingSession.date.asc())
            .all()
        )


class ApplicationRepository:
    """Repository for session_operators rows"""

    @staticmethod
    def get(db: Session, session_id: str, operator_id: str) -> Optional[SessionOperator]:
        """The application of one operator to one session, None when absent"""
        return (
            db.query(SessionOperator)
            .filter(
                SessionOperator.session_id == session_id,
                SessionOperator.operator_id == operator_id,
            )
            .first()
        )

    @staticmethod
    def create(db: Session, commit: bool = True, **application_data) -> SessionOperator:
        application = SessionOperator(**application_data)
        db.add(application)
        if commit:
            db.commit()
            db.refresh(application)
        else:
            db.flush()
        return application

    @staticmethod
    def set_status(
        db: Session,
        application: SessionOperator,
        status: str,
        timestamp: datetime,
        reason: Optional[str] = None,
    ) -> SessionOperator:
        """Record an accept/reject decision with its timestamp"""
        application.status = status
        if status == "accepted":
            application.accepted_at = timestamp
        elif status == "rejected":
            application.rejected_at = timestamp
            application.rejection_reason = reason

        db.commit()
        db.refresh(application)
        return application

    @staticmethod
    def list_for_session(
        db: Session, session_id: str, status: Optional[str] = None
    ) -> list[SessionOperator]:
        query = db.query(SessionOperator).filter(SessionOperator.session_id == session_id)
        if status:
            query = query.filter(SessionOperator.status == status)
        return query.order_by(SessionOperator.applied_at.asc()).all()

    @staticmethod
    def list_for_operator(db: Session, operator_id: str) -> list[SessionOperator]:
        return (
            db.query(SessionOperator)
            .filter(SessionOperator.operator_id == operator_id)
            .order_by(SessionOperator.applied_at.desc())
            .all()
        )
