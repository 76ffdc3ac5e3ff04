"""Billing service — plan catalog and mock subscriptions (no payment processor)."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from storymaster.exceptions import InvalidPlan, NotFoundError
from storymaster.schemas.billing import BillingRecord, Subscription, SubscriptionPlan

logger = logging.getLogger(__name__)

PLANS: tuple[SubscriptionPlan, ...] = (
    SubscriptionPlan(
        id="free",
        name="Free",
        price=0,
        token_limit=1000,
        features=["Basic writing agents", "Story export", "Community support"],
    ),
    SubscriptionPlan(
        id="pro",
        name="Pro",
        price=19,
        token_limit=10000,
        features=["All writing agents", "Advanced export formats", "Priority support", "Version history"],
        stripe_price_id="price_pro_monthly",
    ),
    SubscriptionPlan(
        id="team",
        name="Team",
        price=49,
        token_limit=50000,
        features=["Everything in Pro", "Team collaboration", "Admin dashboard", "Custom integrations"],
        stripe_price_id="price_team_monthly",
    ),
)

PLAN_TOKEN_LIMITS: dict[str, int] = {plan.id: plan.token_limit for plan in PLANS}


class BillingService:
    def __init__(self, plans: tuple[SubscriptionPlan, ...] = PLANS):
        self._plans = {plan.id: plan for plan in plans}
        self._subscriptions: dict[str, Subscription] = {}
        self._history: dict[str, list[BillingRecord]] = {}

    def get_plans(self) -> list[SubscriptionPlan]:
        return list(self._plans.values())

    def get_plan(self, plan_id: str) -> SubscriptionPlan | None:
        return self._plans.get(plan_id)

    def create_subscription(
        self, user_id: str, plan_id: str, payment_method_id: str
    ) -> Subscription:
        plan = self.get_plan(plan_id)
        if plan is None or plan.price == 0:
            raise InvalidPlan(f"Cannot subscribe to plan '{plan_id}'")

        subscription_id = uuid.uuid4().hex
        subscription = Subscription(
            id=subscription_id,
            user_id=user_id,
            plan_id=plan.id,
            client_secret=f"mock_client_secret_{subscription_id}",
            created_at=_now(),
        )
        self._subscriptions[subscription_id] = subscription
        self._record(user_id, plan, f"{plan.name} subscription")
        logger.info("User %s subscribed to %s (payment method %s)", user_id, plan.id, payment_method_id)
        return subscription

    def get_subscription(self, subscription_id: str) -> Subscription:
        subscription = self._subscriptions.get(subscription_id)
        if subscription is None:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        return subscription

    def update_subscription(self, subscription_id: str, new_plan_id: str) -> Subscription:
        plan = self.get_plan(new_plan_id)
        if plan is None:
            raise InvalidPlan(f"Unknown plan '{new_plan_id}'")

        subscription = self.get_subscription(subscription_id)
        updated = subscription.model_copy(update={"plan_id": plan.id})
        self._subscriptions[subscription_id] = updated
        return updated

    def cancel_subscription(self, subscription_id: str) -> bool:
        subscription = self._subscriptions.get(subscription_id)
        if subscription is None:
            return False
        self._subscriptions[subscription_id] = subscription.model_copy(
            update={"status": "canceled"}
        )
        return True

    def get_billing_history(self, user_id: str) -> list[BillingRecord]:
        return list(self._history.get(user_id, []))

    @staticmethod
    def calculate_prorated_amount(
        current: SubscriptionPlan, new: SubscriptionPlan, days_remaining: int
    ) -> float:
        """Charge for the remaining days at the price difference (30-day month, never negative)."""
        difference = (new.price / 30 - current.price / 30) * days_remaining
        return max(0.0, difference)

    def _record(self, user_id: str, plan: SubscriptionPlan, description: str) -> None:
        self._history.setdefault(user_id, []).append(
            BillingRecord(
                id=uuid.uuid4().hex,
                user_id=user_id,
                amount=plan.price,
                currency=plan.currency,
                status="succeeded",
                description=description,
                created_at=_now(),
            )
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)
