# 📄 File: app/modules/plant_identification/infrastructure/database/mappers.py
# 🧭 Purpose (Layman Explanation):
# Translates between how records look in the database and how the rest of the
# app thinks about plants, sightings, tours and accounts.
#
# 🧪 Purpose (Technical Summary):
# Model <-> domain entity mapping shared by the repository implementations.
# Datetimes read back without a zone (SQLite) are treated as UTC.
#
# 🔗 Dependencies:
# - Domain models, SQLAlchemy models
#
# 🔄 Connected Modules / Calls From:
# - *_repository_impl.py in this package

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.modules.plant_identification.domain.models.entitlement import (
    Account,
    PlanTier,
    SubscriptionStatus,
)
from app.modules.plant_identification.domain.models.plant_profile import (
    PlantProfile,
    PlantProfileDraft,
)
from app.modules.plant_identification.domain.models.sighting import (
    GeoLocation,
    IdentificationMethod,
    IdentificationStatus,
    Sighting,
)
from app.modules.plant_identification.domain.models.tour import Tour, TourDifficulty, TourStop

from .models import AccountModel, PlantProfileModel, PlantSightingModel, TourModel, TourStopModel

_PROFILE_CONTENT_FIELDS = tuple(
    name for name in PlantProfileDraft.model_fields if name != "scientific_name"
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# PLANT PROFILES
# =============================================================================

def draft_to_row(draft: PlantProfileDraft, plant_id: str, now: datetime) -> Dict[str, Any]:
    """Column values for inserting a draft as a new profile."""
    row = {name: getattr(draft, name) for name in _PROFILE_CONTENT_FIELDS}
    row.update(
        id=plant_id,
        scientific_name=draft.scientific_name,
        scientific_name_key=draft.scientific_name_key,
        search_text=draft.search_text,
        common_names=list(draft.common_names),
        native_regions=list(draft.native_regions),
        created_at=now,
        updated_at=now,
    )
    return row


def profile_to_domain(model: PlantProfileModel) -> PlantProfile:
    data = {name: getattr(model, name) for name in _PROFILE_CONTENT_FIELDS}
    data.update(
        id=model.id,
        scientific_name=model.scientific_name,
        common_names=list(model.common_names or []),
        native_regions=list(model.native_regions or []),
        ai_enhanced=bool(model.ai_enhanced),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )
    return PlantProfile(**data)


# =============================================================================
# SIGHTINGS
# =============================================================================

def sighting_to_domain(model: PlantSightingModel) -> Sighting:
    return Sighting(
        id=model.id,
        user_id=model.user_id,
        plant_id=model.plant_id,
        user_provided_name=model.user_provided_name,
        private_notes=model.private_notes,
        photo_ref=model.photo_ref,
        location=GeoLocation(
            latitude=model.latitude,
            longitude=model.longitude,
            address=model.address,
        ),
        status=IdentificationStatus(model.identification_status),
        identification_method=(
            IdentificationMethod(model.identification_method)
            if model.identification_method else None
        ),
        confidence_score=model.confidence_score,
        alternative_names=list(model.alternative_names or []),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def apply_sighting(model: PlantSightingModel, sighting: Sighting) -> PlantSightingModel:
    """Copy every mutable field of the entity onto the row."""
    model.user_id = sighting.user_id
    model.plant_id = sighting.plant_id
    model.user_provided_name = sighting.user_provided_name
    model.private_notes = sighting.private_notes
    model.photo_ref = sighting.photo_ref
    model.latitude = sighting.location.latitude
    model.longitude = sighting.location.longitude
    model.address = sighting.location.address
    model.identification_status = sighting.status.value
    model.identification_method = (
        sighting.identification_method.value if sighting.identification_method else None
    )
    model.confidence_score = sighting.confidence_score
    model.alternative_names = list(sighting.alternative_names)
    model.updated_at = sighting.updated_at
    return model


# =============================================================================
# TOURS
# =============================================================================

def tour_to_domain(model: TourModel) -> Tour:
    return Tour(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        description=model.description or "",
        is_public=bool(model.is_public),
        difficulty=TourDifficulty(model.difficulty) if model.difficulty else None,
        estimated_duration_minutes=model.estimated_duration_minutes,
        tags=list(model.tags or []),
        created_at=as_utc(model.created_at),
    )


def tour_stop_to_domain(model: TourStopModel) -> TourStop:
    return TourStop(
        id=model.id,
        tour_id=model.tour_id,
        sighting_id=model.sighting_id,
        order=model.stop_order,
        stop_title=model.stop_title,
        custom_notes=model.custom_notes,
        created_at=as_utc(model.created_at),
    )


# =============================================================================
# ACCOUNTS
# =============================================================================

def account_to_domain(model: AccountModel) -> Account:
    return Account(
        id=model.id,
        email=model.email,
        name=model.name,
        subscription_plan=PlanTier(model.subscription_plan),
        subscription_status=SubscriptionStatus(model.subscription_status),
        created_at=as_utc(model.created_at),
    )
