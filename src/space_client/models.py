"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Wire models for SPACE contracts, subscriptions and feature evaluations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PricingAvailability = Literal["active", "archived"]


class SpaceModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python, extras kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserContact(SpaceModel):
    user_id: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None


class BillingPeriodOptions(SpaceModel):
    auto_renew: bool | None = None
    renewal_days: int | None = None


class BillingPeriod(SpaceModel):
    start_date: datetime | None = None
    end_date: datetime | None = None
    auto_renew: bool | None = None
    renewal_days: int | None = None


class UsageLevel(SpaceModel):
    consumed: float = 0
    reset_time_stamp: datetime | None = None


class Subscription(SpaceModel):
    """Services, plans and add-ons a user is subscribed to."""

    contracted_services: dict[str, str] = Field(default_factory=dict)
    subscription_plans: dict[str, str] = Field(default_factory=dict)
    subscription_add_ons: dict[str, dict[str, int]] = Field(default_factory=dict)


class ContractToCreate(Subscription):
    user_contact: UserContact
    billing_period: BillingPeriodOptions | None = None


class ContractHistoryEntry(Subscription):
    start_date: datetime | None = None
    end_date: datetime | None = None


class Contract(Subscription):
    user_contact: UserContact
    billing_period: BillingPeriod | None = None
    usage_levels: dict[str, dict[str, UsageLevel]] = Field(default_factory=dict)
    history: list[ContractHistoryEntry] = Field(default_factory=list)


class FallbackSubscription(SpaceModel):
    """Subscription contracts are novated to when a pricing is archived."""

    subscription_plan: str
    subscription_add_ons: dict[str, int] = Field(default_factory=dict)


class EvaluationError(SpaceModel):
    code: str
    message: str


class FeatureEvaluationResult(SpaceModel):
    eval: bool
    used: dict[str, bool | int | float] | None = None
    limit: dict[str, bool | int | float] | None = None
    error: EvaluationError | None = None
