# 📄 File: app/modules/plant_identification/domain/models/plant_profile.py
# 🧭 Purpose (Layman Explanation):
# Describes what we know about one plant species: its scientific name, the
# everyday names people use for it, its family and all the descriptive text
# (care tips, habitat, ecology) that gets added over time.
# 🧪 Purpose (Technical Summary):
# PlantProfile entity plus PlantProfileDraft, the unsaved shape produced by
# providers and merged by the repository. Declares which fields are identity
# fields (never patched) and which are descriptive (patchable/enhanceable).
# 🔗 Dependencies:
# pydantic, datetime, uuid, app.shared.utils.validators
# 🔄 Connected Modules / Calls From:
# Plant profile repository, identification orchestrator, provider adapters,
# presentation schemas

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.shared.utils.validators import clean_plant_name, fold_for_search, normalize_scientific_name


# Identity fields are fixed once a profile exists
IDENTITY_FIELDS = frozenset({"scientific_name", "common_names"})

# Descriptive fields an enhancement may fill or refresh
ENHANCEABLE_FIELDS = (
    "description",
    "detailed_description",
    "care_instructions",
    "ecological_role",
    "cultural_significance",
    "habitat",
    "growth_habits",
    "seasonal_changes",
    "blooming_season",
    "light_requirements",
    "water_needs",
    "soil_preferences",
    "native_regions",
    "conservation_status",
)

# Everything patch_fields accepts
PATCHABLE_FIELDS = frozenset(ENHANCEABLE_FIELDS) | {"family", "image_url", "ai_enhanced"}


class _ProfileContent(BaseModel):
    """Descriptive content shared by drafts and stored profiles."""

    model_config = ConfigDict(validate_assignment=True)

    scientific_name: str = Field(..., min_length=1, max_length=200)
    common_names: List[str] = Field(default_factory=list)
    family: Optional[str] = Field(None, max_length=200)
    image_url: Optional[str] = None

    description: Optional[str] = None
    detailed_description: Optional[str] = None
    care_instructions: Optional[str] = None
    ecological_role: Optional[str] = None
    cultural_significance: Optional[str] = None
    habitat: Optional[str] = None
    growth_habits: Optional[str] = None
    seasonal_changes: Optional[str] = None
    blooming_season: Optional[str] = None
    light_requirements: Optional[str] = None
    water_needs: Optional[str] = None
    soil_preferences: Optional[str] = None
    native_regions: List[str] = Field(default_factory=list)
    conservation_status: Optional[str] = None

    ai_enhanced: bool = False

    @field_validator("scientific_name")
    @classmethod
    def _clean_scientific_name(cls, v: str) -> str:
        cleaned = clean_plant_name(v)
        if not cleaned:
            raise ValueError("Scientific name cannot be empty")
        return cleaned

    @field_validator("common_names")
    @classmethod
    def _dedupe_common_names(cls, v: List[str]) -> List[str]:
        # Keep first-seen order, drop blanks and case-insensitive repeats
        seen = set()
        names = []
        for name in v:
            cleaned = clean_plant_name(name or "")
            if cleaned and cleaned.casefold() not in seen:
                seen.add(cleaned.casefold())
                names.append(cleaned)
        return names

    @field_validator("native_regions")
    @classmethod
    def _dedupe_regions(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(r.strip() for r in v if r and r.strip()))

    @property
    def scientific_name_key(self) -> str:
        """Normalised uniqueness key for the species."""
        return normalize_scientific_name(self.scientific_name)

    @property
    def search_text(self) -> str:
        """Folded scientific name, common names and family, one per line."""
        values = [self.scientific_name, *self.common_names]
        if self.family:
            values.append(self.family)
        return "\n".join(fold_for_search(value) for value in values)


class PlantProfileDraft(_ProfileContent):
    """
    An unsaved plant profile as assembled from a provider answer or a typed name.

    Drafts are handed to ``PlantProfileRepository.create_if_absent``; when a
    profile with the same scientific name already exists the draft is discarded.
    """

    @classmethod
    def from_typed_name(cls, name: str) -> "PlantProfileDraft":
        """Minimal draft used when no generative provider can describe the name."""
        cleaned = clean_plant_name(name)
        return cls(
            scientific_name=cleaned,
            common_names=[cleaned],
            description=f'User-provided identification for "{cleaned}".',
        )

    def with_enhancement(self, fields: Dict[str, Any]) -> "PlantProfileDraft":
        """
        Return a copy with descriptive fields merged in.

        Only non-empty enhanceable fields are applied; identity fields in
        ``fields`` are ignored.
        """
        updates = {
            key: value for key, value in fields.items()
            if key in ENHANCEABLE_FIELDS and value not in (None, "", [])
        }
        if not updates:
            return self
        return self.model_copy(update={**updates, "ai_enhanced": True})


class PlantProfile(_ProfileContent):
    """
    Canonical botanical record, one per distinct scientific name.

    Profiles are created by the identification flows and later refined in place
    by enhancement; they are never deleted by this service.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def match_rank(self, term: str) -> Optional[int]:
        """
        Rank of this profile for a search term, lower is better.

        0 exact scientific name, 1 scientific name substring, 2 common name,
        3 family. ``None`` when the profile does not match at all.
        """
        needle = fold_for_search(term)
        if not needle:
            return None
        scientific = fold_for_search(self.scientific_name)
        if scientific == needle:
            return 0
        if needle in scientific:
            return 1
        if any(needle in fold_for_search(name) for name in self.common_names):
            return 2
        if self.family and needle in fold_for_search(self.family):
            return 3
        return None
