# 📄 File: app/modules/plant_identification/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines the database tables that hold plant species, sightings, tours with
# their stops, and the minimal account records that carry a user's plan.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for the plant identification module. The unique
# ``scientific_name_key`` index backs atomic create-if-absent; tour stops
# cascade away with their sighting or tour at the database level.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - app.shared.infrastructure.database.connection (declarative Base)
#
# 🔄 Connected Modules / Calls From:
# - Repository implementations in this package
# - app.shared.infrastructure.database.connection.create_tables
# - migrations/versions/001_plant_identification_tables.py

"""
SQLAlchemy Models for Plant Identification

Models:
- PlantProfileModel: canonical species records
- PlantSightingModel: user observations with identification state
- TourModel / TourStopModel: ordered walks over sightings
- AccountModel: plan and subscription status for the usage gate

String(36) UUID keys keep the schema portable between PostgreSQL and the
SQLite database used in tests.
"""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.shared.infrastructure.database.connection import Base


def _uuid() -> str:
    return str(uuid4())


# =============================================================================
# PLANT PROFILES
# =============================================================================

class PlantProfileModel(Base):
    """Canonical botanical record, one row per normalised scientific name."""
    __tablename__ = "plant_profiles"

    id = Column(String(36), primary_key=True, default=_uuid)

    scientific_name = Column(String(200), nullable=False, comment="Scientific name as first recorded")
    scientific_name_key = Column(
        String(200),
        nullable=False,
        unique=True,
        comment="Trimmed, whitespace-collapsed, casefolded scientific name"
    )
    common_names = Column(JSON, nullable=False, default=list)
    family = Column(String(200), nullable=True, index=True)
    search_text = Column(
        Text,
        nullable=False,
        default="",
        comment="Casefolded scientific name, common names and family, one per line"
    )
    image_url = Column(String(1000), nullable=True)

    # Descriptive content
    description = Column(Text, nullable=True)
    detailed_description = Column(Text, nullable=True)
    care_instructions = Column(Text, nullable=True)
    ecological_role = Column(Text, nullable=True)
    cultural_significance = Column(Text, nullable=True)
    habitat = Column(Text, nullable=True)
    growth_habits = Column(Text, nullable=True)
    seasonal_changes = Column(Text, nullable=True)
    blooming_season = Column(String(200), nullable=True)
    light_requirements = Column(String(500), nullable=True)
    water_needs = Column(String(500), nullable=True)
    soil_preferences = Column(String(500), nullable=True)
    native_regions = Column(JSON, nullable=False, default=list)
    conservation_status = Column(String(200), nullable=True)

    ai_enhanced = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    sightings = relationship("PlantSightingModel", back_populates="plant")

    def __repr__(self):
        return f"<PlantProfileModel(id={self.id}, scientific_name={self.scientific_name})>"


# =============================================================================
# SIGHTINGS
# =============================================================================

class PlantSightingModel(Base):
    """One user observation and its identification state."""
    __tablename__ = "plant_sightings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    plant_id = Column(
        String(36),
        ForeignKey("plant_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    user_provided_name = Column(String(200), nullable=True)
    private_notes = Column(Text, nullable=True)
    photo_ref = Column(String(1000), nullable=False, comment="Storage path or absolute URL")

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String(500), nullable=True)

    identification_status = Column(String(20), nullable=False, default="pending", index=True)
    identification_method = Column(String(20), nullable=True)
    confidence_score = Column(Float, nullable=True)
    alternative_names = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    plant = relationship("PlantProfileModel", back_populates="sightings")
    tour_stops = relationship(
        "TourStopModel",
        back_populates="sighting",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_plant_sightings_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<PlantSightingModel(id={self.id}, status={self.identification_status})>"


# =============================================================================
# TOURS
# =============================================================================

class TourModel(Base):
    """A user-curated walk over sightings."""
    __tablename__ = "tours"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=False, index=True)
    difficulty = Column(String(20), nullable=True)
    estimated_duration_minutes = Column(Integer, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    stops = relationship(
        "TourStopModel",
        back_populates="tour",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TourStopModel.stop_order",
    )

    def __repr__(self):
        return f"<TourModel(id={self.id}, name={self.name})>"


class TourStopModel(Base):
    """A sighting's place in a tour; removed with either side."""
    __tablename__ = "tour_stops"

    id = Column(String(36), primary_key=True, default=_uuid)
    tour_id = Column(
        String(36),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    sighting_id = Column(
        String(36),
        ForeignKey("plant_sightings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    stop_order = Column(Integer, nullable=False)
    stop_title = Column(String(200), nullable=True)
    custom_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    tour = relationship("TourModel", back_populates="stops")
    sighting = relationship("PlantSightingModel", back_populates="tour_stops")

    __table_args__ = (
        UniqueConstraint("tour_id", "stop_order", name="uq_tour_stops_tour_order"),
    )

    def __repr__(self):
        return f"<TourStopModel(tour_id={self.tour_id}, order={self.stop_order})>"


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountModel(Base):
    """Plan and subscription state of a user, read by the usage gate."""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=True, unique=True)
    name = Column(String(200), nullable=True)
    subscription_plan = Column(String(20), nullable=False, default="free")
    subscription_status = Column(String(20), nullable=False, default="active")

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_accounts_subscription", "subscription_plan", "subscription_status"),
    )

    def __repr__(self):
        return f"<AccountModel(id={self.id}, plan={self.subscription_plan})>"
