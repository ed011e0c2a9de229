# 📄 File: app/modules/plant_identification/infrastructure/database/account_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Looks up which plan a user is on, signing them up to the free plan the first
# time we see them.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of AccountRepository. get_or_create inserts inside
# a SAVEPOINT and re-reads on IntegrityError so concurrent first requests
# settle on one row.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - Domain repository interface and models
# - app.shared.core.exceptions (RepositoryError, NotFoundError)
#
# 🔄 Connected Modules / Calls From:
# - Entitlement query handler, tests

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.plant_identification.domain.models.entitlement import (
    Account,
    PlanTier,
    SubscriptionStatus,
)
from app.modules.plant_identification.domain.repositories.account_repository import (
    AccountRepository,
)
from app.shared.core.exceptions import NotFoundError, RepositoryError
from app.shared.utils.logging import get_logger

from .mappers import account_to_domain
from .models import AccountModel

logger = get_logger(__name__)


class AccountRepositoryImpl(AccountRepository):
    """SQLAlchemy implementation of the AccountRepository interface."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, account_id: str) -> Optional[Account]:
        try:
            model = await self._session.get(AccountModel, account_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to retrieve account: {e}", operation="get", entity="account") from e
        return account_to_domain(model) if model else None

    async def get_or_create(self, account_id: str) -> Account:
        existing = await self.get_by_id(account_id)
        if existing:
            return existing

        try:
            async with self._session.begin_nested():
                model = AccountModel(
                    id=account_id,
                    subscription_plan=PlanTier.FREE.value,
                    subscription_status=SubscriptionStatus.ACTIVE.value,
                    created_at=datetime.now(timezone.utc),
                )
                self._session.add(model)
            logger.info(f"Provisioned free account for user {account_id}")
        except IntegrityError:
            logger.debug(f"Account {account_id} created concurrently")
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to create account: {e}", operation="create", entity="account") from e

        account = await self.get_by_id(account_id)
        if account is None:
            raise RepositoryError("Account could not be provisioned", operation="create", entity="account")
        return account

    async def update_subscription(
        self,
        account_id: str,
        plan: PlanTier,
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    ) -> Account:
        try:
            model = await self._session.get(AccountModel, account_id)
            if model is None:
                raise NotFoundError("Account not found", resource_type="account", resource_id=account_id)

            model.subscription_plan = PlanTier(plan).value
            model.subscription_status = SubscriptionStatus(status).value
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to update subscription: {e}", operation="update", entity="account"
            ) from e

        logger.info(f"Account {account_id} moved to {model.subscription_plan}/{model.subscription_status}")
        return account_to_domain(model)
