"""
Shared fixtures for the Plant Sightings test suite.

The database is an in-memory SQLite engine per test; providers are replaced
by scriptable fakes so no test touches the network.
"""

import os

# Settings are cached on first import, so the environment is fixed up front
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENFORCE_USAGE_LIMITS"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"
for _key in ("PLANTNET_API_KEY", "GEMINI_API_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"):
    os.environ.pop(_key, None)

from typing import Dict, List, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from app.modules.plant_identification.domain.models.identification import (  # noqa: E402
    ContentIntent,
    OutcomeKind,
    ProviderOutcome,
)
from app.modules.plant_identification.domain.models.plant_profile import PlantProfileDraft  # noqa: E402
from app.modules.plant_identification.domain.models.sighting import GeoLocation  # noqa: E402
from app.modules.plant_identification.domain.providers.identification_providers import (  # noqa: E402
    BotanicalContentGenerator,
    VisualIdentifier,
)
from app.modules.plant_identification.domain.providers.photo_storage import PhotoStorage  # noqa: E402
from app.modules.plant_identification.domain.services.identification_orchestrator import (  # noqa: E402
    IdentificationOrchestrator,
)
from app.modules.plant_identification.domain.services.sighting_lifecycle import (  # noqa: E402
    SightingLifecycleManager,
)
from app.modules.plant_identification.infrastructure.database import (  # noqa: E402
    AccountRepositoryImpl,
    PlantProfileRepositoryImpl,
    SightingRepositoryImpl,
    TourRepositoryImpl,
)
from app.modules.plant_identification.infrastructure.external.provider_registry import (  # noqa: E402
    ProviderRegistry,
)
from app.shared.config.settings import Settings  # noqa: E402
from app.shared.infrastructure.database.connection import DatabaseConnectionManager  # noqa: E402
from app.shared.infrastructure.database.session import initialize_sessions  # noqa: E402


# =============================================================================
# PROVIDER FAKES
# =============================================================================

class FakeVisualIdentifier(VisualIdentifier):
    """Visual provider that answers with queued outcomes."""

    name = "plantnet"

    def __init__(self, configured: bool = True, outcome: Optional[ProviderOutcome] = None):
        self.configured = configured
        self.outcome = outcome or ProviderOutcome.failure(OutcomeKind.NO_MATCH, self.name)
        self.calls: List[str] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def identify(self, image_url: str) -> ProviderOutcome:
        self.calls.append(image_url)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeContentGenerator(BotanicalContentGenerator):
    """Generative provider with one scripted outcome per intent."""

    name = "gemini"

    def __init__(self, configured: bool = True, image_identification: bool = False):
        self.configured = configured
        self.image_identification = image_identification
        self.outcomes: Dict[ContentIntent, object] = {}
        self.calls: List[Tuple[ContentIntent, object]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    @property
    def supports_image_identification(self) -> bool:
        return self.configured and self.image_identification

    def respond(self, intent: ContentIntent, outcome) -> None:
        self.outcomes[intent] = outcome

    def calls_for(self, intent: ContentIntent) -> list:
        return [subject for called, subject in self.calls if called == intent]

    async def generate_content(self, intent, subject) -> ProviderOutcome:
        self.calls.append((intent, subject))
        if not self.configured:
            return ProviderOutcome.failure(OutcomeKind.NOT_CONFIGURED, self.name)
        outcome = self.outcomes.get(intent)
        if outcome is None:
            return ProviderOutcome.failure(OutcomeKind.UNAVAILABLE, self.name, message="no script")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakePhotoStorage(PhotoStorage):
    """In-memory photo bucket; references are ``photos/<user>/<n>``."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.unresolvable = set()
        self.deleted: List[str] = []

    async def upload(self, user_id, data, filename, content_type=None) -> str:
        ref = f"photos/{user_id}/{len(self.objects) + 1}-{filename}"
        self.objects[ref] = data
        return ref

    async def resolve_url(self, photo_ref: str) -> Optional[str]:
        if photo_ref.startswith(("http://", "https://")):
            return photo_ref
        if photo_ref in self.unresolvable or photo_ref not in self.objects:
            return None
        return f"https://storage.test/signed/{photo_ref}"

    async def delete(self, photo_ref: str) -> bool:
        self.deleted.append(photo_ref)
        return self.objects.pop(photo_ref, None) is not None


def make_draft(scientific_name: str, **fields) -> PlantProfileDraft:
    fields.setdefault("common_names", [])
    return PlantProfileDraft(scientific_name=scientific_name, **fields)


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
async def db_engine():
    manager = DatabaseConnectionManager()
    await manager.initialize(Settings())
    await manager.create_tables()
    yield manager.engine
    await manager.close()


@pytest.fixture
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def profile_repo(db_session):
    return PlantProfileRepositoryImpl(db_session)


@pytest.fixture
def sighting_repo(db_session):
    return SightingRepositoryImpl(db_session)


@pytest.fixture
def tour_repo(db_session):
    return TourRepositoryImpl(db_session)


@pytest.fixture
def account_repo(db_session):
    return AccountRepositoryImpl(db_session)


@pytest.fixture
def lifecycle(sighting_repo, profile_repo):
    return SightingLifecycleManager(sighting_repo, profile_repo)


@pytest.fixture
def new_sighting(lifecycle):
    """Factory creating pending sightings for ``user-1`` by default."""

    async def _create(user_id: str = "user-1", photo_ref: str = "https://photos.test/leaf.jpg", **kwargs):
        return await lifecycle.create(
            user_id=user_id,
            photo_ref=photo_ref,
            location=GeoLocation(latitude=51.5, longitude=-0.12),
            **kwargs,
        )

    return _create


# =============================================================================
# PROVIDERS AND ORCHESTRATOR
# =============================================================================

@pytest.fixture
def visual_identifier():
    return FakeVisualIdentifier()


@pytest.fixture
def content_generator():
    return FakeContentGenerator()


@pytest.fixture
def photo_storage():
    return FakePhotoStorage()


@pytest.fixture
def orchestrator(profile_repo, lifecycle, visual_identifier, content_generator, photo_storage):
    return IdentificationOrchestrator(
        plant_profile_repository=profile_repo,
        lifecycle=lifecycle,
        visual_identifier=visual_identifier,
        content_generator=content_generator,
        photo_storage=photo_storage,
    )


# =============================================================================
# HTTP API
# =============================================================================

@pytest.fixture
async def api_client(db_engine, visual_identifier, content_generator):
    """ASGI client against the real app, wired to the test engine and fakes."""
    from app.main import app

    initialize_sessions(db_engine)
    app.state.providers = ProviderRegistry(
        visual_identifier=visual_identifier,
        content_generator=content_generator,
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.state.providers = None
