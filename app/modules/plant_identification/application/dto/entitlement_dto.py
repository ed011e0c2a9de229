# 📄 File: app/modules/plant_identification/application/dto/entitlement_dto.py
# 🧭 Purpose (Layman Explanation):
# Tells the app what the user's plan still allows today.
# 🧪 Purpose (Technical Summary):
# Entitlement DTO; ``None`` limits mean unlimited.
# 🔗 Dependencies:
# pydantic, domain Entitlement
# 🔄 Connected Modules / Calls From:
# GetEntitlementHandler, entitlements router

from typing import Optional

from pydantic import BaseModel

from app.modules.plant_identification.domain.models.entitlement import (
    Entitlement,
    PlanTier,
    TierLimits,
    UsageSnapshot,
)


class EntitlementDTO(BaseModel):
    user_id: str
    plan: PlanTier
    can_identify: bool
    can_create_private_tour: bool
    can_create_public_tour: bool
    usage: UsageSnapshot
    limits: TierLimits
    remaining_identifications_today: Optional[int] = None

    @classmethod
    def from_domain(cls, user_id: str, entitlement: Entitlement) -> "EntitlementDTO":
        daily_limit = entitlement.limits.daily_identifications
        remaining = (
            None if daily_limit is None
            else max(0, daily_limit - entitlement.usage.daily_identifications)
        )
        return cls(
            user_id=user_id,
            plan=entitlement.plan,
            can_identify=entitlement.can_identify,
            can_create_private_tour=entitlement.can_create_private_tour,
            can_create_public_tour=entitlement.can_create_public_tour,
            usage=entitlement.usage,
            limits=entitlement.limits,
            remaining_identifications_today=remaining,
        )
