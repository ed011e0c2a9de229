# 📄 File: app/modules/plant_identification/domain/repositories/account_repository.py
# 🧭 Purpose (Layman Explanation):
# The rulebook for looking up which plan a user is on.
# 🧪 Purpose (Technical Summary):
# Repository interface for the minimal Account record used by the
# entitlement gate. Unknown users are provisioned on the free plan.
# 🔗 Dependencies:
# Domain models (Account), typing, abc
# 🔄 Connected Modules / Calls From:
# Entitlement query handler, infrastructure implementation

from abc import ABC, abstractmethod
from typing import Optional

from ..models.entitlement import Account, PlanTier, SubscriptionStatus


class AccountRepository(ABC):
    """Repository interface for accounts."""

    @abstractmethod
    async def get_by_id(self, account_id: str) -> Optional[Account]:
        """Get an account by id, None if absent."""

    @abstractmethod
    async def get_or_create(self, account_id: str) -> Account:
        """Get an account, creating an active free account when it does not exist."""

    @abstractmethod
    async def update_subscription(
        self,
        account_id: str,
        plan: PlanTier,
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    ) -> Account:
        """
        Change an account's plan.

        Raises:
            NotFoundError: If the account does not exist
        """
