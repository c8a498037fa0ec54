"""Session domain schemas - Pydantic models for responses"""

from datetime import date as date_type
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...models import SessionOperator, ShootingSession


class OperatorRequirement(BaseModel):
    minOperators: int = 1
    preferredOperators: int = 1


class SessionResponse(BaseModel):
    """Schema for session response"""

    id: str
    clientId: str
    date: date_type
    regionId: Optional[str] = None
    status: str
    marketplaceVisible: bool
    offerId: Optional[str] = None
    setupIds: list[str]
    operatorRequirement: OperatorRequirement
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None


class ApplicationResponse(BaseModel):
    """Schema for an operator application (session_operators row)"""

    id: str
    sessionId: str
    operatorId: str
    status: str
    appliedAt: datetime
    acceptedAt: Optional[datetime] = None
    rejectedAt: Optional[datetime] = None
    rejectionReason: Optional[str] = None


def serialize_session(session: ShootingSession) -> dict:
    return SessionResponse(
        id=session.id,
        clientId=session.client_id,
        date=session.date,
        regionId=session.region_id,
        status=session.status,
        marketplaceVisible=bool(session.marketplace_visible),
        offerId=session.offer_id,
        setupIds=list(session.setup_ids or []),
        operatorRequirement=OperatorRequirement(
            minOperators=session.min_operators,
            preferredOperators=session.preferred_operators,
        ),
        notes=session.notes,
        createdAt=session.created_at,
    ).model_dump(mode="json")


def serialize_application(application: SessionOperator) -> dict:
    return ApplicationResponse(
        id=application.id,
        sessionId=application.session_id,
        operatorId=application.operator_id,
        status=application.status,
        appliedAt=application.applied_at,
        acceptedAt=application.accepted_at,
        rejectedAt=application.rejected_at,
        rejectionReason=application.rejection_reason,
    ).model_dump(mode="json")
