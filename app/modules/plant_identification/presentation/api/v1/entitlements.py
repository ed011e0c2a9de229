# 📄 File: app/modules/plant_identification/presentation/api/v1/entitlements.py
# 🧭 Purpose (Layman Explanation):
# One endpoint that tells the app what the user's plan still allows today.
# 🧪 Purpose (Technical Summary):
# FastAPI router exposing the usage/entitlement gate.
# 🔗 Dependencies:
# FastAPI, GetEntitlementHandler
# 🔄 Connected Modules / Calls From:
# presentation.api.v1.__init__

from fastapi import APIRouter, Depends

from app.modules.plant_identification.application.dto import EntitlementDTO
from app.modules.plant_identification.application.handlers import GetEntitlementHandler
from app.modules.plant_identification.application.queries import GetEntitlementQuery
from app.modules.plant_identification.presentation.dependencies import (
    get_current_user_id,
    get_entitlement_handler,
)

entitlements_router = APIRouter()


@entitlements_router.get("/me", response_model=EntitlementDTO, summary="My plan and remaining usage")
async def get_my_entitlement(
    user_id: str = Depends(get_current_user_id),
    handler: GetEntitlementHandler = Depends(get_entitlement_handler),
) -> EntitlementDTO:
    return await handler.handle(GetEntitlementQuery(user_id=user_id))
