# 📄 File: app/modules/plant_identification/domain/models/sighting.py
# 🧭 Purpose (Layman Explanation):
# A sighting is one moment a user spotted a plant: the photo, where it was,
# their notes and whether we have worked out which plant it is yet.
# 🧪 Purpose (Technical Summary):
# Sighting entity with the identification state machine
# (pending -> identified | failed, re-openable to pending). Transition
# methods enforce that plant_id is present exactly when identified and that
# the identification method only accompanies a terminal status.
# 🔗 Dependencies:
# pydantic, enum, datetime, app.shared.core.exceptions
# 🔄 Connected Modules / Calls From:
# Sighting lifecycle manager, sighting repository, identification
# orchestrator, presentation schemas

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.shared.core.exceptions import InvalidStateTransitionError


class IdentificationStatus(str, Enum):
    """Where a sighting is in its identification lifecycle"""
    PENDING = "pending"
    IDENTIFIED = "identified"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self != IdentificationStatus.PENDING


class IdentificationMethod(str, Enum):
    """How a sighting's plant was resolved"""
    PLANTNET = "plantnet"   # visual provider
    GEMINI = "gemini"       # generative provider
    MANUAL = "manual"       # typed by the user


class GeoLocation(BaseModel):
    """Where the plant was seen"""
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    address: Optional[str] = Field(None, max_length=500)


class Sighting(BaseModel):
    """
    One user-recorded plant observation.

    Status starts at ``pending`` and each identification attempt ends it at
    exactly one terminal value. The transition methods below are the only
    sanctioned way to change status, plant binding, method or confidence.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = Field(..., min_length=1)
    plant_id: Optional[str] = None

    user_provided_name: Optional[str] = Field(None, max_length=200)
    private_notes: Optional[str] = Field(None, max_length=2000)

    photo_ref: str = Field(..., min_length=1)
    location: GeoLocation

    status: IdentificationStatus = IdentificationStatus.PENDING
    identification_method: Optional[IdentificationMethod] = None
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    alternative_names: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_identification_fields(self) -> "Sighting":
        if (self.plant_id is not None) != (self.status == IdentificationStatus.IDENTIFIED):
            raise ValueError("plant_id must be set if and only if the sighting is identified")
        if self.identification_method is not None and not self.status.is_terminal:
            raise ValueError("identification_method requires a terminal status")
        return self

    # =========================================================================
    # STATE TRANSITIONS
    # =========================================================================

    def reopen(self) -> None:
        """Start a new identification attempt; any sighting may be re-opened."""
        self._apply(
            status=IdentificationStatus.PENDING,
            plant_id=None,
            identification_method=None,
            confidence_score=None,
            alternative_names=[],
        )

    def mark_identified(
        self,
        plant_id: str,
        method: IdentificationMethod,
        confidence_score: Optional[float] = None,
        user_provided_name: Optional[str] = None,
    ) -> None:
        """
        Bind the sighting to a plant profile.

        Raises:
            InvalidStateTransitionError: If the sighting is not pending
        """
        self._require_pending(IdentificationStatus.IDENTIFIED)
        self._apply(
            status=IdentificationStatus.IDENTIFIED,
            plant_id=plant_id,
            identification_method=method,
            confidence_score=confidence_score,
            alternative_names=[],
            user_provided_name=user_provided_name or self.user_provided_name,
        )

    def mark_failed(
        self,
        user_provided_name: Optional[str] = None,
        alternative_names: Optional[List[str]] = None,
    ) -> None:
        """
        End the attempt without a plant. A previously recorded name is kept.

        Raises:
            InvalidStateTransitionError: If the sighting is not pending
        """
        self._require_pending(IdentificationStatus.FAILED)
        self._apply(
            status=IdentificationStatus.FAILED,
            plant_id=None,
            identification_method=None,
            confidence_score=None,
            alternative_names=list(alternative_names or []),
            user_provided_name=user_provided_name or self.user_provided_name,
        )

    def edit_user_fields(
        self,
        user_provided_name: Optional[str] = None,
        private_notes: Optional[str] = None,
    ) -> bool:
        """Update the user's own name/notes; status is untouched. Returns True if changed."""
        changed = False
        if user_provided_name is not None and user_provided_name != self.user_provided_name:
            self.user_provided_name = user_provided_name
            changed = True
        if private_notes is not None and private_notes != self.private_notes:
            self.private_notes = private_notes
            changed = True
        if changed:
            self.updated_at = datetime.now(timezone.utc)
        return changed

    @property
    def is_pending(self) -> bool:
        return self.status == IdentificationStatus.PENDING

    def _require_pending(self, target: IdentificationStatus) -> None:
        if not self.is_pending:
            raise InvalidStateTransitionError(
                current_status=self.status.value,
                target_status=target.value,
                sighting_id=self.id,
            )

    def _apply(self, **values) -> None:
        values["updated_at"] = datetime.now(timezone.utc)
        # Validate the combined state before touching this instance
        self.__class__.model_validate({**self.model_dump(), **values})
        for field_name, value in values.items():
            setattr(self, field_name, value)
