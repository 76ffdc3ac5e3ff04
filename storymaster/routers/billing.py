"""Billing endpoints — plan catalog and mock subscriptions."""

from fastapi import APIRouter, Depends

from storymaster.dependencies import current_user, get_auth, get_billing
from storymaster.exceptions import NotFoundError
from storymaster.schemas.auth import User
from storymaster.schemas.billing import (
    BillingRecord,
    Subscription,
    SubscriptionChange,
    SubscriptionCreate,
    SubscriptionPlan,
)
from storymaster.services.auth_service import AuthService
from storymaster.services.billing_service import BillingService

router = APIRouter()


@router.get("/plans", response_model=list[SubscriptionPlan])
async def list_plans(billing: BillingService = Depends(get_billing)):
    return billing.get_plans()


@router.post("/subscriptions", response_model=Subscription, status_code=201)
async def create_subscription(
    data: SubscriptionCreate,
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
    auth: AuthService = Depends(get_auth),
):
    subscription = billing.create_subscription(user.id, data.plan_id, data.payment_method_id)
    auth.update_user_plan(user.id, subscription.plan_id)
    return subscription


@router.put("/subscriptions/{subscription_id}", response_model=Subscription)
async def change_subscription(
    subscription_id: str,
    data: SubscriptionChange,
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
    auth: AuthService = Depends(get_auth),
):
    _owned(billing, subscription_id, user)
    subscription = billing.update_subscription(subscription_id, data.plan_id)
    auth.update_user_plan(user.id, subscription.plan_id)
    return subscription


@router.delete("/subscriptions/{subscription_id}", status_code=204)
async def cancel_subscription(
    subscription_id: str,
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
    auth: AuthService = Depends(get_auth),
):
    _owned(billing, subscription_id, user)
    billing.cancel_subscription(subscription_id)
    auth.update_user_plan(user.id, "free")


@router.get("/history", response_model=list[BillingRecord])
async def billing_history(
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
):
    return billing.get_billing_history(user.id)


def _owned(billing: BillingService, subscription_id: str, user: User) -> Subscription:
    subscription = billing.get_subscription(subscription_id)
    if subscription.user_id != user.id:
        raise NotFoundError(f"Subscription {subscription_id} not found")
    return subscription
