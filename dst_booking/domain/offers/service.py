"""Offer service - Read access to credit usage and client subscriptions"""

import logging

from ...context import WorkflowContext
from ...shared.envelope import ErrorCode, WorkflowError, envelope
from ...shared.validators import require_id
from .schemas import serialize_subscription

logger = logging.getLogger(__name__)


class OfferService:
    """Service layer for offer and subscription queries"""

    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db

    @envelope
    def get_offer_usage(self, offer_id: str) -> dict:
        offer_id = require_id(offer_id, "offerId")
        offer = self.ctx.offers.get_by_id(self.db, offer_id)
        if not offer:
            raise WorkflowError(ErrorCode.OFFER_NOT_FOUND, f"Offer {offer_id} not found")
        return {"usage": self.ctx.offers.usage(offer)}

    @envelope
    def get_client_subscriptions(self, client_id: str) -> dict:
        client_id = require_id(client_id, "clientId")
        subscriptions = self.ctx.subscriptions.list_for_client(self.db, client_id)
        return {
            "clientId": client_id,
            "subscriptions": [serialize_subscription(s) for s in subscriptions],
            "count": len(subscriptions),
        }
