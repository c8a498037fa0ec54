"""Offer ledger - Database operations for offers and subscription credits"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ClientSubscription, Offer, OfferType

logger = logging.getLogger(__name__)


class OfferLedger:
    """
    Repository for offers and their consumed-vs-total session credits.

    Only subscription offers ("abonnement") take part in credit accounting,
    and sessions_consumed always stays within [0, nb_sessions].
    """

    @staticmethod
    def get_by_id(db: Session, offer_id: str) -> Optional[Offer]:
        return db.query(Offer).filter(Offer.id == offer_id).first()

    @staticmethod
    def get_for_update(db: Session, offer_id: str) -> Optional[Offer]:
        """Load an offer with a row lock held until the current transaction ends"""
        return db.query(Offer).filter(Offer.id == offer_id).with_for_update().first()

    @staticmethod
    def create(db: Session, **offer_data) -> Offer:
        offer = Offer(**offer_data)
        db.add(offer)
        db.commit()
        db.refresh(offer)
        return offer

    @staticmethod
    def is_subscription(offer: Optional[Offer]) -> bool:
        return offer is not None and offer.offer_type == OfferType.ABONNEMENT.value

    @staticmethod
    def consume_credit(db: Session, offer: Offer, commit: bool = True) -> Offer:
        """Increment sessions_consumed, clamped to nb_sessions"""
        before = offer.sessions_consumed or 0
        offer.sessions_consumed = min(before + 1, offer.nb_sessions or 0)
        if offer.sessions_consumed == before:
            logger.warning(f"⚠️ Offer {offer.id} is full ({before}/{offer.nb_sessions}), credit clamped")

        if commit:
            db.commit()
            db.refresh(offer)
        else:
            db.flush()
        return offer

    @staticmethod
    def rollback_credit(db: Session, offer: Offer, commit: bool = True) -> Offer:
        """Decrement sessions_consumed, never below zero"""
        offer.sessions_consumed = max((offer.sessions_consumed or 0) - 1, 0)

        if commit:
            db.commit()
            db.refresh(offer)
        else:
            db.flush()
        return offer

    @staticmethod
    def usage(offer: Offer) -> dict:
        total = offer.nb_sessions or 0
        consumed = offer.sessions_consumed or 0
        return {
            "offerId": offer.id,
            "type": offer.offer_type,
            "nbSessions": total,
            "sessionsConsumed": consumed,
            "remaining": max(total - consumed, 0),
        }


class ClientSubscriptionRepository:
    """Repository for client_subscriptions rows"""

    @staticmethod
    def create(db: Session, **subscription_data) -> ClientSubscription:
        subscription = ClientSubscription(**subscription_data)
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    @staticmethod
    def list_for_client(db: Session, client_id: str) -> list[ClientSubscription]:
        return (
            db.query(ClientSubscription)
            .filter(ClientSubscription.client_id == client_id)
            .order_by(ClientSubscription.subscription_date.desc())
            .all()
        )
