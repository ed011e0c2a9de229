"""Create plant identification tables

Revision ID: 001
Revises:
Create Date: 2025-06-02 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create plant profiles, sightings, tours, tour stops and accounts"""

    # 1. Plant profiles
    op.create_table('plant_profiles',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('scientific_name', sa.String(200), nullable=False),
        sa.Column('scientific_name_key', sa.String(200), nullable=False),
        sa.Column('common_names', sa.JSON(), nullable=False),
        sa.Column('family', sa.String(200), nullable=True),
        sa.Column('search_text', sa.Text(), nullable=False, server_default=''),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('detailed_description', sa.Text(), nullable=True),
        sa.Column('care_instructions', sa.Text(), nullable=True),
        sa.Column('ecological_role', sa.Text(), nullable=True),
        sa.Column('cultural_significance', sa.Text(), nullable=True),
        sa.Column('habitat', sa.Text(), nullable=True),
        sa.Column('growth_habits', sa.Text(), nullable=True),
        sa.Column('seasonal_changes', sa.Text(), nullable=True),
        sa.Column('blooming_season', sa.String(200), nullable=True),
        sa.Column('light_requirements', sa.String(500), nullable=True),
        sa.Column('water_needs', sa.String(500), nullable=True),
        sa.Column('soil_preferences', sa.String(500), nullable=True),
        sa.Column('native_regions', sa.JSON(), nullable=False),
        sa.Column('conservation_status', sa.String(200), nullable=True),
        sa.Column('ai_enhanced', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('scientific_name_key', name='uq_plant_profiles_scientific_name_key'),
    )
    op.create_index('ix_plant_profiles_family', 'plant_profiles', ['family'])
    op.create_index('ix_plant_profiles_ai_enhanced', 'plant_profiles', ['ai_enhanced'])

    # 2. Sightings
    op.create_table('plant_sightings',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('plant_id', sa.String(36), nullable=True),
        sa.Column('user_provided_name', sa.String(200), nullable=True),
        sa.Column('private_notes', sa.Text(), nullable=True),
        sa.Column('photo_ref', sa.String(1000), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('identification_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('identification_method', sa.String(20), nullable=True),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('alternative_names', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['plant_id'], ['plant_profiles.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "identification_status IN ('pending', 'identified', 'failed')",
            name='ck_plant_sightings_status'
        ),
        sa.CheckConstraint('latitude BETWEEN -90 AND 90', name='ck_plant_sightings_latitude'),
        sa.CheckConstraint('longitude BETWEEN -180 AND 180', name='ck_plant_sightings_longitude'),
    )
    op.create_index('ix_plant_sightings_user_id', 'plant_sightings', ['user_id'])
    op.create_index('ix_plant_sightings_plant_id', 'plant_sightings', ['plant_id'])
    op.create_index('ix_plant_sightings_identification_status', 'plant_sightings', ['identification_status'])
    op.create_index('ix_plant_sightings_user_created', 'plant_sightings', ['user_id', 'created_at'])

    # 3. Tours
    op.create_table('tours',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('difficulty', sa.String(20), nullable=True),
        sa.Column('estimated_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tours_user_id', 'tours', ['user_id'])
    op.create_index('ix_tours_is_public', 'tours', ['is_public'])

    # 4. Tour stops
    op.create_table('tour_stops',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('tour_id', sa.String(36), nullable=False),
        sa.Column('sighting_id', sa.String(36), nullable=False),
        sa.Column('stop_order', sa.Integer(), nullable=False),
        sa.Column('stop_title', sa.String(200), nullable=True),
        sa.Column('custom_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sighting_id'], ['plant_sightings.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('tour_id', 'stop_order', name='uq_tour_stops_tour_order'),
        sa.CheckConstraint('stop_order >= 0', name='ck_tour_stops_order'),
    )
    op.create_index('ix_tour_stops_tour_id', 'tour_stops', ['tour_id'])
    op.create_index('ix_tour_stops_sighting_id', 'tour_stops', ['sighting_id'])

    # 5. Accounts
    op.create_table('accounts',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('subscription_plan', sa.String(20), nullable=False, server_default='free'),
        sa.Column('subscription_status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_accounts_email'),
        sa.CheckConstraint("subscription_plan IN ('free', 'pro', 'premium')", name='ck_accounts_plan'),
    )
    op.create_index('ix_accounts_subscription', 'accounts', ['subscription_plan', 'subscription_status'])


def downgrade() -> None:
    """Drop plant identification tables"""
    op.drop_index('ix_accounts_subscription', table_name='accounts')
    op.drop_table('accounts')

    op.drop_index('ix_tour_stops_sighting_id', table_name='tour_stops')
    op.drop_index('ix_tour_stops_tour_id', table_name='tour_stops')
    op.drop_table('tour_stops')

    op.drop_index('ix_tours_is_public', table_name='tours')
    op.drop_index('ix_tours_user_id', table_name='tours')
    op.drop_table('tours')

    op.drop_index('ix_plant_sightings_user_created', table_name='plant_sightings')
    op.drop_index('ix_plant_sightings_identification_status', table_name='plant_sightings')
    op.drop_index('ix_plant_sightings_plant_id', table_name='plant_sightings')
    op.drop_index('ix_plant_sightings_user_id', table_name='plant_sightings')
    op.drop_table('plant_sightings')

    op.drop_index('ix_plant_profiles_ai_enhanced', table_name='plant_profiles')
    op.drop_index('ix_plant_profiles_family', table_name='plant_profiles')
    op.drop_table('plant_profiles')
