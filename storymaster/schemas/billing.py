"""Billing stub schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from storymaster.schemas.auth import PlanId


class SubscriptionPlan(BaseModel):
    id: PlanId
    name: str
    price: float
    currency: str = "usd"
    interval: Literal["month", "year"] = "month"
    token_limit: int
    features: list[str] = []
    stripe_price_id: str = ""


class Subscription(BaseModel):
    id: str
    user_id: str
    plan_id: PlanId
    status: Literal["active", "canceled"] = "active"
    client_secret: str | None = None
    created_at: datetime


class BillingRecord(BaseModel):
    id: str
    user_id: str
    amount: float
    currency: str
    status: Literal["pending", "succeeded", "failed"]
    description: str
    created_at: datetime


class SubscriptionCreate(BaseModel):
    plan_id: PlanId
    payment_method_id: str


class SubscriptionChange(BaseModel):
    plan_id: PlanId
