# 📄 File: app/modules/plant_identification/domain/services/entitlement_service.py
# 🧭 Purpose (Layman Explanation):
# Answers "may this user identify another plant today, or make another tour?"
# from their plan and what they have already used.
# 🧪 Purpose (Technical Summary):
# Usage/Entitlement Gate: a pure function of plan tier and usage counts.
# Unlimited allowances are the UNLIMITED sentinel and are never compared
# numerically. Advisory only; the orchestrator never consults it.
# 🔗 Dependencies:
# Domain models (PlanTier, TierLimits, UsageSnapshot, Entitlement), datetime
# 🔄 Connected Modules / Calls From:
# Entitlement query handler, sightings and tours endpoints

from datetime import datetime, timezone
from typing import Optional

from ..models.entitlement import PLAN_LIMITS, Entitlement, PlanTier, TierLimits, UsageSnapshot


def compute_entitlement(
    plan: PlanTier,
    daily_identifications: int,
    private_tours: int,
    public_tours: int,
) -> Entitlement:
    """
    Work out what a user may do next.

    Args:
        plan: The plan whose limits apply
        daily_identifications: Identifications started today
        private_tours: Private tours owned
        public_tours: Public tours owned

    Returns:
        Entitlement with the three permissions plus plan, usage and limits
    """
    limits: TierLimits = PLAN_LIMITS[PlanTier(plan)]
    usage = UsageSnapshot(
        daily_identifications=daily_identifications,
        private_tours=private_tours,
        public_tours=public_tours,
    )

    return Entitlement(
        plan=plan,
        usage=usage,
        limits=limits,
        can_identify=TierLimits.allows(limits.daily_identifications, daily_identifications),
        can_create_private_tour=TierLimits.allows(limits.private_tours, private_tours),
        can_create_public_tour=TierLimits.allows(limits.public_tours, public_tours),
    )


def start_of_day_utc(now: Optional[datetime] = None) -> datetime:
    """Midnight UTC of the day containing ``now``; daily counts reset here."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
