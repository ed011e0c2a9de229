# 📄 File: app/modules/plant_identification/domain/models/entitlement.py
# 🧭 Purpose (Layman Explanation):
# Spells out what each subscription plan allows (how many plants a day you can
# identify, how many tours you can make) and what a user is allowed to do right now.
# 🧪 Purpose (Technical Summary):
# Plan tiers, per-tier limits with an explicit UNLIMITED sentinel, the usage
# snapshot and the computed Entitlement answer. Also the minimal Account
# record the gate reads the plan from.
# 🔗 Dependencies:
# pydantic, enum
# 🔄 Connected Modules / Calls From:
# Entitlement service, account repository, entitlement query handler,
# sightings/tours endpoints (enforcement)

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# A limit of UNLIMITED is never compared numerically
UNLIMITED = None


class PlanTier(str, Enum):
    """Subscription plans"""
    FREE = "free"
    PRO = "pro"
    PREMIUM = "premium"


class SubscriptionStatus(str, Enum):
    """Billing state of a subscription"""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class TierLimits(BaseModel):
    """Per-plan allowances; ``None`` (UNLIMITED) means no cap."""

    model_config = ConfigDict(frozen=True)

    daily_identifications: Optional[int] = Field(None, ge=0)
    private_tours: Optional[int] = Field(None, ge=0)
    public_tours: Optional[int] = Field(None, ge=0)
    advanced_features: bool = False

    @staticmethod
    def allows(limit: Optional[int], used: int) -> bool:
        """True when one more use stays within ``limit``."""
        return limit is UNLIMITED or used < limit


PLAN_LIMITS: Dict[PlanTier, TierLimits] = {
    PlanTier.FREE: TierLimits(
        daily_identifications=5,
        private_tours=1,
        public_tours=0,
        advanced_features=False,
    ),
    PlanTier.PRO: TierLimits(
        daily_identifications=UNLIMITED,
        private_tours=UNLIMITED,
        public_tours=5,
        advanced_features=True,
    ),
    PlanTier.PREMIUM: TierLimits(
        daily_identifications=UNLIMITED,
        private_tours=UNLIMITED,
        public_tours=UNLIMITED,
        advanced_features=True,
    ),
}


class UsageSnapshot(BaseModel):
    """What the user has consumed so far."""
    daily_identifications: int = Field(0, ge=0)
    private_tours: int = Field(0, ge=0)
    public_tours: int = Field(0, ge=0)


class Entitlement(BaseModel):
    """What a user may do next, with the plan, usage and limits behind it."""

    plan: PlanTier
    usage: UsageSnapshot
    limits: TierLimits
    can_identify: bool
    can_create_private_tour: bool
    can_create_public_tour: bool

    def can_create_tour(self, is_public: bool) -> bool:
        return self.can_create_public_tour if is_public else self.can_create_private_tour


class Account(BaseModel):
    """
    Minimal user account: enough to know the user's plan.

    Authentication is handled upstream; this record only carries the plan.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: Optional[str] = Field(None, max_length=255)
    name: Optional[str] = Field(None, max_length=200)
    subscription_plan: PlanTier = PlanTier.FREE
    subscription_status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def effective_plan(self) -> PlanTier:
        """Plan whose limits apply; a lapsed subscription falls back to free."""
        if self.subscription_status != SubscriptionStatus.ACTIVE:
            return PlanTier.FREE
        return self.subscription_plan
