"""
End-to-end tests through the HTTP API.

Requests go through the real FastAPI app over an ASGI transport, with the
database on in-memory SQLite and providers replaced by fakes.
"""

import logging

from app.modules.plant_identification.domain.models.entitlement import PlanTier
from app.modules.plant_identification.domain.models.identification import (
    ContentIntent,
    OutcomeKind,
    ProviderOutcome,
)

from conftest import make_draft

USER = {"X-User-ID": "user-1"}
OTHER_USER = {"X-User-ID": "user-2"}


async def create_sighting(client, headers=USER, **form) -> dict:
    data = {"latitude": "51.5", "longitude": "-0.12", "photo_url": "https://photos.test/fern.jpg"}
    data.update(form)
    response = await client.post("/api/v1/sightings", data=data, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    async def test_health(self, api_client):
        response = await api_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_request_id_is_echoed(self, api_client):
        response = await api_client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_requests_are_logged_with_timing(self, api_client, caplog):
        with caplog.at_level(logging.INFO, logger="app.main"):
            await api_client.get("/api/v1/health", headers=USER)

        messages = [record.getMessage() for record in caplog.records if record.name == "app.main"]
        assert any(message.startswith("HTTP GET /api/v1/health - 200 - ") for message in messages)

    async def test_detailed_health_lists_provider_clients(self, api_client):
        response = await api_client.get("/api/v1/health/detailed")

        components = response.json()["components"]
        assert components["providers"]["plantnet"] is True
        assert components["provider_clients"] == {}


class TestSightingsApi:
    """Tests for sighting CRUD."""

    async def test_requires_caller_identity(self, api_client):
        response = await api_client.get("/api/v1/sightings")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    async def test_create_and_fetch(self, api_client):
        created = await create_sighting(api_client, user_provided_name="Fern", address="Hyde Park")

        response = await api_client.get(f"/api/v1/sightings/{created['id']}", headers=USER)

        body = response.json()
        assert response.status_code == 200
        assert body["identification_status"] == "pending"
        assert body["photo_url"] == "https://photos.test/fern.jpg"
        assert body["address"] == "Hyde Park"

    async def test_create_without_photo_is_rejected(self, api_client):
        response = await api_client.post(
            "/api/v1/sightings", data={"latitude": "1", "longitude": "2"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_create_with_upload_needs_storage(self, api_client):
        response = await api_client.post(
            "/api/v1/sightings",
            data={"latitude": "1", "longitude": "2"},
            files={"photo": ("leaf.jpg", b"jpeg-bytes", "image/jpeg")},
            headers=USER,
        )

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"

    async def test_other_users_sighting_is_forbidden(self, api_client):
        created = await create_sighting(api_client)

        response = await api_client.get(f"/api/v1/sightings/{created['id']}", headers=OTHER_USER)

        assert response.status_code == 403

    async def test_missing_sighting_is_not_found(self, api_client):
        response = await api_client.get("/api/v1/sightings/nope", headers=USER)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_list_edit_and_delete(self, api_client):
        created = await create_sighting(api_client)
        await create_sighting(api_client, headers=OTHER_USER)

        listed = (await api_client.get("/api/v1/sightings", headers=USER)).json()
        edited = await api_client.patch(
            f"/api/v1/sightings/{created['id']}", json={"private_notes": "near the pond"}, headers=USER
        )
        deleted = await api_client.delete(f"/api/v1/sightings/{created['id']}", headers=USER)
        after = await api_client.get(f"/api/v1/sightings/{created['id']}", headers=USER)

        assert [s["id"] for s in listed["sightings"]] == [created["id"]]
        assert edited.json()["private_notes"] == "near the pond"
        assert deleted.status_code == 204
        assert after.status_code == 404

    async def test_daily_allowance_is_enforced(self, api_client):
        for _ in range(5):
            await create_sighting(api_client)

        response = await api_client.post(
            "/api/v1/sightings",
            data={"latitude": "1", "longitude": "2", "photo_url": "https://photos.test/x.jpg"},
            headers=USER,
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "USAGE_LIMIT_EXCEEDED"


class TestIdentificationApi:
    """Tests for the identification endpoints."""

    async def test_identify_by_name(self, api_client, content_generator):
        content_generator.respond(
            ContentIntent.VALIDATE_AND_DESCRIBE,
            ProviderOutcome.success(
                "gemini", draft=make_draft("Pteridium aquilinum", common_names=["Bracken"])
            ),
        )
        created = await create_sighting(api_client)

        response = await api_client.post(
            f"/api/v1/sightings/{created['id']}/identify/name", json={"plant_name": "bracken"}, headers=USER
        )
        sighting = (await api_client.get(f"/api/v1/sightings/{created['id']}", headers=USER)).json()

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["plant_profile"]["scientific_name"] == "Pteridium aquilinum"
        assert sighting["identification_status"] == "identified"
        assert sighting["plant_profile"]["common_names"] == ["Bracken"]

    async def test_identify_by_name_with_suggestions(self, api_client, content_generator):
        content_generator.respond(
            ContentIntent.VALIDATE_AND_DESCRIBE,
            ProviderOutcome.failure(OutcomeKind.NEEDS_CLARIFICATION, "gemini", suggestions=["Bellis perennis"]),
        )
        created = await create_sighting(api_client)

        response = await api_client.post(
            f"/api/v1/sightings/{created['id']}/identify/name", json={"plant_name": "dasy"}, headers=USER
        )

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is False
        assert body["suggestions"] == ["Bellis perennis"]

    async def test_identify_by_photo_reports_attempts(self, api_client, visual_identifier):
        visual_identifier.outcome = ProviderOutcome.success(
            "plantnet", draft=make_draft("Dryopteris filix-mas"), confidence=0.81
        )
        created = await create_sighting(api_client)

        response = await api_client.post(f"/api/v1/sightings/{created['id']}/identify/photo", headers=USER)

        body = response.json()
        assert body["success"] is True
        assert body["method"] == "plantnet"
        assert body["confidence"] == 0.81
        assert (body["attempts"][0]["strategy"], body["attempts"][0]["outcome"]) == ("plantnet", "success")
        assert visual_identifier.calls == ["https://photos.test/fern.jpg"]

    async def test_cannot_identify_someone_elses_sighting(self, api_client):
        created = await create_sighting(api_client)

        response = await api_client.post(
            f"/api/v1/sightings/{created['id']}/identify/name", json={"plant_name": "Oak"}, headers=OTHER_USER
        )

        assert response.status_code == 403


class TestPlantProfilesApi:
    async def test_search_and_enhance(self, api_client, content_generator):
        content_generator.configured = False
        created = await create_sighting(api_client)
        identified = (await api_client.post(
            f"/api/v1/sightings/{created['id']}/identify/name", json={"plant_name": "Hedera helix"}, headers=USER
        )).json()

        search = (await api_client.get("/api/v1/plants/search", params={"q": "hedera"}, headers=USER)).json()
        enhance = (await api_client.post(f"/api/v1/plants/{identified['plant_id']}/enhance", headers=USER)).json()

        assert [p["id"] for p in search["profiles"]] == [identified["plant_id"]]
        assert enhance["success"] is False
        assert enhance["status"] == "not_configured"

    async def test_unknown_profile(self, api_client):
        response = await api_client.get("/api/v1/plants/missing", headers=USER)

        assert response.status_code == 404


class TestToursApi:
    """Tests for tours and entitlements over HTTP."""

    async def test_build_tour_with_ordered_stops(self, api_client):
        first, second = await create_sighting(api_client), await create_sighting(api_client)
        tour = (await api_client.post("/api/v1/tours", json={"name": "Fern trail"}, headers=USER)).json()

        for sighting in (first, second):
            response = await api_client.post(
                f"/api/v1/tours/{tour['id']}/stops", json={"sighting_id": sighting["id"]}, headers=USER
            )
            assert response.status_code == 201

        detail = (await api_client.get(f"/api/v1/tours/{tour['id']}", headers=USER)).json()

        assert [(s["order"], s["sighting_id"]) for s in detail["stops"]] == [(0, first["id"]), (1, second["id"])]

    async def test_private_tour_hidden_from_others(self, api_client):
        tour = (await api_client.post("/api/v1/tours", json={"name": "Secret garden"}, headers=USER)).json()

        response = await api_client.get(f"/api/v1/tours/{tour['id']}", headers=OTHER_USER)

        assert response.status_code == 403

    async def test_free_plan_cannot_publish_tours(self, api_client):
        response = await api_client.post(
            "/api/v1/tours", json={"name": "Open walk", "is_public": True}, headers=USER
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "USAGE_LIMIT_EXCEEDED"

    async def test_entitlement_reflects_usage(self, api_client):
        await create_sighting(api_client)

        body = (await api_client.get("/api/v1/entitlements/me", headers=USER)).json()

        assert body["plan"] == "free"
        assert body["usage"]["daily_identifications"] == 1
        assert body["remaining_identifications_today"] == 4
        assert body["can_create_public_tour"] is False

    async def test_remove_stop_closes_the_gap(self, api_client):
        sightings = [await create_sighting(api_client) for _ in range(3)]
        tour = (await api_client.post("/api/v1/tours", json={"name": "Orchard"}, headers=USER)).json()
        stops = [
            (await api_client.post(
                f"/api/v1/tours/{tour['id']}/stops", json={"sighting_id": s["id"]}, headers=USER
            )).json()
            for s in sightings
        ]

        response = await api_client.delete(f"/api/v1/tours/{tour['id']}/stops/{stops[0]['id']}", headers=USER)
        detail = (await api_client.get(f"/api/v1/tours/{tour['id']}", headers=USER)).json()

        assert response.status_code == 204
        assert [(s["order"], s["id"]) for s in detail["stops"]] == [(0, stops[1]["id"]), (1, stops[2]["id"])]

    async def test_stop_from_another_tour_is_not_found(self, api_client):
        sighting = await create_sighting(api_client)
        tour = (await api_client.post("/api/v1/tours", json={"name": "Orchard"}, headers=USER)).json()
        stop = (await api_client.post(
            f"/api/v1/tours/{tour['id']}/stops", json={"sighting_id": sighting["id"]}, headers=USER
        )).json()
        other = (await api_client.post("/api/v1/tours", json={"name": "Other"}, headers=OTHER_USER)).json()

        response = await api_client.delete(f"/api/v1/tours/{other['id']}/stops/{stop['id']}", headers=OTHER_USER)

        assert response.status_code == 404

    async def test_edit_stop_notes(self, api_client):
        sighting = await create_sighting(api_client)
        tour = (await api_client.post("/api/v1/tours", json={"name": "Orchard"}, headers=USER)).json()
        stop = (await api_client.post(
            f"/api/v1/tours/{tour['id']}/stops", json={"sighting_id": sighting["id"]}, headers=USER
        )).json()

        response = await api_client.patch(
            f"/api/v1/tours/{tour['id']}/stops/{stop['id']}", json={"custom_notes": "Best in May"}, headers=USER
        )

        assert response.status_code == 200
        assert response.json()["custom_notes"] == "Best in May"
        assert response.json()["order"] == 0

    async def test_delete_tour(self, api_client):
        sighting = await create_sighting(api_client)
        tour = (await api_client.post("/api/v1/tours", json={"name": "Orchard"}, headers=USER)).json()
        await api_client.post(f"/api/v1/tours/{tour['id']}/stops", json={"sighting_id": sighting["id"]}, headers=USER)

        forbidden = await api_client.delete(f"/api/v1/tours/{tour['id']}", headers=OTHER_USER)
        deleted = await api_client.delete(f"/api/v1/tours/{tour['id']}", headers=USER)
        after = await api_client.get(f"/api/v1/tours/{tour['id']}", headers=USER)
        kept = await api_client.get(f"/api/v1/sightings/{sighting['id']}", headers=USER)

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        assert after.status_code == 404
        assert kept.status_code == 200

    async def test_free_plan_cannot_publish_by_editing(self, api_client):
        tour = (await api_client.post("/api/v1/tours", json={"name": "Orchard"}, headers=USER)).json()

        renamed = await api_client.patch(f"/api/v1/tours/{tour['id']}", json={"name": "Old orchard"}, headers=USER)
        published = await api_client.patch(f"/api/v1/tours/{tour['id']}", json={"is_public": True}, headers=USER)

        assert renamed.json()["name"] == "Old orchard"
        assert published.status_code == 403
        assert published.json()["error"]["code"] == "USAGE_LIMIT_EXCEEDED"

    async def test_public_tours_are_listed_for_everyone(self, api_client, account_repo, db_session):
        await account_repo.get_or_create("user-1")
        await account_repo.update_subscription("user-1", PlanTier.PREMIUM)
        await db_session.commit()
        sighting = await create_sighting(api_client)
        public = (await api_client.post(
            "/api/v1/tours", json={"name": "Open orchard", "is_public": True}, headers=USER
        )).json()
        await api_client.post("/api/v1/tours", json={"name": "Private orchard"}, headers=USER)
        await api_client.post(f"/api/v1/tours/{public['id']}/stops", json={"sighting_id": sighting["id"]}, headers=USER)

        response = await api_client.get("/api/v1/tours/public")

        assert response.status_code == 200
        assert [(t["id"], t["stop_count"]) for t in response.json()] == [(public["id"], 1)]
