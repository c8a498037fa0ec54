"""Workflow context - the collaborators every workflow and controller is built from"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .domain.access.role_guard import RoleGuard
from .domain.offers.repository import ClientSubscriptionRepository, OfferLedger
from .domain.sessions.repository import ApplicationRepository, SessionRepository


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WorkflowContext:
    """
    Explicit dependencies for the workflow layer.

    Repositories are passed as classes of static methods so tests can swap
    in a subclass that fails on purpose.
    """

    db: Session
    guard: RoleGuard = field(default_factory=RoleGuard)
    sessions: type[SessionRepository] = SessionRepository
    applications: type[ApplicationRepository] = ApplicationRepository
    offers: type[OfferLedger] = OfferLedger
    subscriptions: type[ClientSubscriptionRepository] = ClientSubscriptionRepository
    clock: Callable[[], datetime] = utcnow


def build_context(db: Session) -> WorkflowContext:
    return WorkflowContext(db=db)


def get_context(db: Session = Depends(get_db)) -> WorkflowContext:
    """Dependency injection for the workflow context"""
    return build_context(db)
