import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a unique string identifier for new rows"""
    return str(uuid.uuid4())


class SessionStatus(str, enum.Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    TERMINEE = "terminee"  # completed
    CANCELLED = "cancelled"


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class OfferType(str, enum.Enum):
    ABONNEMENT = "abonnement"  # subscription, the only type tracked by the credit ledger
    SINGLE_SESSION = "single_session"
    PACKAGE = "package"


class Offer(Base):
    __tablename__ = "offers"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    offer_type = Column(String(50), nullable=False, default=OfferType.SINGLE_SESSION.value)
    nb_sessions = Column(Integer, nullable=False, default=0)  # credit capacity
    sessions_consumed = Column(Integer, nullable=False, default=0)  # 0 <= consumed <= nb_sessions
    price = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    sessions = relationship("ShootingSession", back_populates="offer")
    subscriptions = relationship("ClientSubscription", back_populates="offer")


class ShootingSession(Base):
    __tablename__ = "shooting_sessions"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(255), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    region_id = Column(String(100), nullable=True, index=True)
    status = Column(
        String(50), nullable=False, default=SessionStatus.PENDING_CONFIRMATION.value, index=True
    )  # pending_confirmation, confirmed, terminee, cancelled
    # Only ever set to True together with status=confirmed
    marketplace_visible = Column(Boolean, nullable=False, default=False)
    offer_id = Column(String(36), ForeignKey("offers.id"), nullable=True)
    setup_ids = Column(JSON, nullable=False, default=list)
    min_operators = Column(Integer, nullable=False, default=1)
    preferred_operators = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    offer = relationship("Offer", back_populates="sessions")
    applications = relationship(
        "SessionOperator", back_populates="session", cascade="all, delete-orphan"
    )


class SessionOperator(Base):
    """An operator's application to staff a session"""

    __tablename__ = "session_operators"
    __table_args__ = (
        UniqueConstraint("session_id", "operator_id", name="uq_session_operator"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    session_id = Column(
        String(36), ForeignKey("shooting_sessions.id", ondelete="CASCADE"), nullable=False
    )
    operator_id = Column(String(255), nullable=False, index=True)
    status = Column(
        String(20), nullable=False, default=ApplicationStatus.PENDING.value
    )  # pending, accepted, rejected
    applied_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String(1000), nullable=True)

    session = relationship("ShootingSession", back_populates="applications")


class ClientSubscription(Base):
    __tablename__ = "client_subscriptions"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(255), nullable=False, index=True)
    offer_id = Column(String(36), ForeignKey("offers.id"), nullable=False)
    status = Column(String(20), nullable=False, default="active")  # active, paused, cancelled
    subscription_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    offer = relationship("Offer", back_populates="subscriptions")
