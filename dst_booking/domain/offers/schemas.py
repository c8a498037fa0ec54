"""Offer domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from ...models import ClientSubscription
from .repository import OfferLedger


class OfferUsageResponse(BaseModel):
    """Credit usage of one offer"""

    offerId: str
    type: str
    nbSessions: int
    sessionsConsumed: int
    remaining: int


class SubscriptionResponse(BaseModel):
    id: str
    clientId: str
    offerId: str
    status: str
    subscriptionDate: date
    endDate: Optional[date] = None
    quantity: int
    usage: Optional[OfferUsageResponse] = None


def serialize_subscription(subscription: ClientSubscription) -> dict:
    usage = OfferLedger.usage(subscription.offer) if subscription.offer else None
    return SubscriptionResponse(
        id=subscription.id,
        clientId=subscription.client_id,
        offerId=subscription.offer_id,
        status=subscription.status,
        subscriptionDate=subscription.subscription_date,
        endDate=subscription.end_date,
        quantity=subscription.quantity,
        usage=usage,
    ).model_dump(mode="json")
