"""Offer controller - role checks in front of the offer service"""

from ...context import WorkflowContext
from ...shared.envelope import envelope
from ..access.role_guard import Action
from .service import OfferService


class OfferController:
    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.db = ctx.db
        self.service = OfferService(ctx)

    @envelope
    def get_offer_usage(self, role: str, offer_id: str) -> dict:
        self.ctx.guard.require(role, Action.VIEW_OFFER_USAGE, "Operators cannot view offer usage")
        return self.service.get_offer_usage(offer_id)

    @envelope
    def get_client_subscriptions(self, role: str, client_id: str) -> dict:
        self.ctx.guard.require(
            role, Action.VIEW_OFFER_USAGE, "Operators cannot view client subscriptions"
        )
        return self.service.get_client_subscriptions(client_id)
