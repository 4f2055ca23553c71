"""
Tests for venue endpoints
Repositories are replaced by in-memory doubles, see conftest.py
"""

import pytest
from httpx import AsyncClient


def facebook_event(facebook_id, starts, name="Friday Jazz"):
    return {
        "name": name,
        "dates": [{"from": start} for start in starts],
        "facebook": {"id": facebook_id},
    }


class TestCreateVenue:
    """Test POST /venues"""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient, venue_payload):
        response = await client.post("/api/v1/venues/", json=venue_payload)

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["error"]["code"] == "AUTH_ERROR"

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, venue_payload, auth_headers_user):
        response = await client.post("/api/v1/venues/", json=venue_payload, headers=auth_headers_user)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, venue_payload, auth_headers_admin, venue_repository):
        response = await client.post("/api/v1/venues/", json=venue_payload, headers=auth_headers_admin)

        assert response.status_code == 201
        venue = response.json()
        assert venue["name"] == "Café Øl"
        assert venue["priceClass"] == 3
        assert venue["capacityRange"] == [100, 200]
        assert venue["currency"] == "DKK"
        assert venue["entranceFeeRange"] == [50, 100]
        assert venue["location"]["coordinates"] == {"longitude": 12.55, "latitude": 55.69}
        assert "queryText" not in venue

        stored = venue_repository.venues[venue["id"]]
        assert stored["queryText"] == "cafe ol"
        assert stored["location"]["coordinates"] == {"type": "Point", "coordinates": [12.55, 55.69]}
        for field in ("capacityRange", "currency", "entranceFeeRange"):
            assert field not in stored

    @pytest.mark.asyncio
    async def test_create_with_id(self, client: AsyncClient, venue_payload, auth_headers_admin, venue_repository):
        response = await client.post(
            "/api/v1/venues/", json={**venue_payload, "id": "my-venue"}, headers=auth_headers_admin
        )

        assert response.status_code == 201
        assert response.json()["id"] == "my-venue"
        assert "my-venue" in venue_repository.venues

    @pytest.mark.asyncio
    async def test_create_unknown_city(self, client: AsyncClient, venue_payload, auth_headers_admin):
        venue_payload["location"]["city"] = "Odense"

        response = await client.post("/api/v1/venues/", json=venue_payload, headers=auth_headers_admin)

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "location"}

    @pytest.mark.asyncio
    async def test_create_missing_name(self, client: AsyncClient, venue_payload, auth_headers_admin):
        del venue_payload["name"]

        response = await client.post("/api/v1/venues/", json=venue_payload, headers=auth_headers_admin)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_unknown_field(self, client: AsyncClient, venue_payload, auth_headers_admin):
        response = await client.post(
            "/api/v1/venues/", json={**venue_payload, "rating": 5}, headers=auth_headers_admin
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_location_without_city(self, client: AsyncClient, venue_payload, auth_headers_admin):
        del venue_payload["location"]["city"]

        response = await client.post("/api/v1/venues/", json=venue_payload, headers=auth_headers_admin)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_bad_coordinates(self, client: AsyncClient, venue_payload, auth_headers_admin):
        venue_payload["location"]["coordinates"] = {"longitude": 200, "latitude": 55}

        response = await client.post("/api/v1/venues/", json=venue_payload, headers=auth_headers_admin)

        assert response.status_code == 422


class TestGetVenue:
    """Test GET /venues/{id}"""

    @pytest.mark.asyncio
    async def test_get(self, client: AsyncClient, stored_venue):
        response = await client.get("/api/v1/venues/venue-1")

        assert response.status_code == 200
        venue = response.json()
        assert venue["id"] == "venue-1"
        assert "sourceId" not in venue
        assert venue["capacityRange"] == [100, 200]

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/venues/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "venue_not_found"

    @pytest.mark.asyncio
    async def test_missing_city_config(self, client: AsyncClient, venue_repository):
        venue_repository.venues["broken"] = {
            "_id": "broken",
            "name": "Broken",
            "location": {"country": "XX", "city": "Nowhere"},
        }

        response = await client.get("/api/v1/venues/broken")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CITY_CONFIG_NOT_FOUND"


class TestListVenues:
    """Test GET /venues"""

    @pytest.mark.asyncio
    async def test_list(self, client: AsyncClient, stored_venue):
        response = await client.get("/api/v1/venues/")

        assert response.status_code == 200
        data = response.json()
        assert data["offset"] == 0
        assert data["limit"] == 20
        assert data["totalCount"] == 1
        venue = data["results"][0]
        assert venue["id"] == "venue-1"
        assert venue["name"] == "Café Øl"
        # Only the default fields are returned
        assert "capacity" not in venue
        assert "capacityRange" not in venue

    @pytest.mark.asyncio
    async def test_list_with_fields(self, client: AsyncClient, stored_venue):
        response = await client.get("/api/v1/venues/?fields=name,capacity")

        venue = response.json()["results"][0]
        assert venue["capacity"] == 120
        assert venue["capacityRange"] == [100, 200]
        assert "description" not in venue

    @pytest.mark.asyncio
    async def test_hidden_venues_are_excluded(self, client: AsyncClient, stored_venue, venue_repository):
        venue_repository.venues["venue-1"]["hidden"] = True

        response = await client.get("/api/v1/venues/")

        assert response.json()["totalCount"] == 0

    @pytest.mark.asyncio
    async def test_show_hidden_requires_admin(self, client: AsyncClient, auth_headers_user):
        response = await client.get("/api/v1/venues/?showHidden=true", headers=auth_headers_user)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_show_hidden_as_admin(self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin):
        venue_repository.venues["venue-1"]["hidden"] = True

        response = await client.get("/api/v1/venues/?showHidden=true", headers=auth_headers_admin)

        assert response.status_code == 200
        assert response.json()["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_invalid_cap_range(self, client: AsyncClient):
        response = await client.get("/api/v1/venues/?capRange=75")

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "capRange"}

    @pytest.mark.asyncio
    async def test_limit_is_bounded(self, client: AsyncClient):
        response = await client.get("/api/v1/venues/?limit=1000")

        assert response.status_code == 422


class TestUpdateVenue:
    """Test PUT /venues/{id}"""

    @pytest.mark.asyncio
    async def test_partial_update(self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin):
        response = await client.put(
            "/api/v1/venues/venue-1", json={"description": "Now with a terrace"}, headers=auth_headers_admin
        )

        assert response.status_code == 200
        venue = response.json()
        assert venue["description"] == "Now with a terrace"
        assert venue["name"] == "Café Øl"

        stored = venue_repository.venues["venue-1"]
        assert stored["queryText"] == "cafe ol"
        assert stored["priceClass"] == 3

    @pytest.mark.asyncio
    async def test_rename_updates_query_text(self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin):
        await client.put("/api/v1/venues/venue-1", json={"name": "Bødega"}, headers=auth_headers_admin)

        assert venue_repository.venues["venue-1"]["queryText"] == "bodega"

    @pytest.mark.asyncio
    async def test_price_update_recomputes_class(self, client: AsyncClient, stored_venue, auth_headers_admin):
        response = await client.put(
            "/api/v1/venues/venue-1",
            json={"location": {"country": "DK", "city": "Copenhagen"}, "prices": {"coke": 15}},
            headers=auth_headers_admin
        )

        assert response.json()["priceClass"] == 1

    @pytest.mark.asyncio
    async def test_prices_without_location_use_stored_city(
        self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin
    ):
        response = await client.put(
            "/api/v1/venues/venue-1", json={"prices": {"coke": 5, "beer": 5}}, headers=auth_headers_admin
        )

        assert response.status_code == 200
        assert response.json()["priceClass"] == 1
        stored = venue_repository.venues["venue-1"]
        assert stored["priceClass"] == 1
        assert stored["location"]["city"] == "Copenhagen"

    @pytest.mark.asyncio
    async def test_name_cannot_be_cleared(self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin):
        response = await client.put("/api/v1/venues/venue-1", json={"name": None}, headers=auth_headers_admin)

        assert response.status_code == 422
        assert venue_repository.venues["venue-1"]["name"] == "Café Øl"

    @pytest.mark.asyncio
    async def test_location_cannot_be_cleared(self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin):
        response = await client.put("/api/v1/venues/venue-1", json={"location": None}, headers=auth_headers_admin)

        assert response.status_code == 422
        assert venue_repository.venues["venue-1"]["location"]["country"] == "DK"

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, auth_headers_admin):
        response = await client.put("/api/v1/venues/missing", json={"name": "X"}, headers=auth_headers_admin)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, stored_venue, auth_headers_user):
        response = await client.put("/api/v1/venues/venue-1", json={"name": "X"}, headers=auth_headers_user)

        assert response.status_code == 403


class TestDeleteVenue:
    """Test DELETE /venues/{id}"""

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, stored_venue, auth_headers_admin):
        response = await client.delete("/api/v1/venues/venue-1", headers=auth_headers_admin)

        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = await client.get("/api/v1/venues/venue-1")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, auth_headers_admin):
        response = await client.delete("/api/v1/venues/missing", headers=auth_headers_admin)

        assert response.status_code == 404


class TestVenueImages:
    """Test POST /venues/{id}/images"""

    @pytest.mark.asyncio
    async def test_upload_files(self, client: AsyncClient, stored_venue, venue_repository, auth_headers_admin):
        response = await client.post(
            "/api/v1/venues/venue-1/images",
            files=[
                ("images", ("front.png", b"\x89PNG front", "image/png")),
                ("images", ("bar.jpg", b"\xff\xd8 bar", "image/jpeg")),
            ],
            headers=auth_headers_admin
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert [image["mime"] for image in results] == ["image/png", "image/jpeg"]
        assert all("id" in image and "_id" not in image for image in results)
        assert len(venue_repository.venues["venue-1"]["images"]) == 2

        response = await client.get(f"/api/v1/venues/venue-1/images/{results[0]['id']}")
        assert response.status_code == 200
        assert response.content == b"\x89PNG front"
        assert response.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_too_many_files(self, client: AsyncClient, stored_venue, auth_headers_admin):
        files = [("images", (f"{i}.png", b"png", "image/png")) for i in range(11)]

        response = await client.post("/api/v1/venues/venue-1/images", files=files, headers=auth_headers_admin)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_urls(self, client: AsyncClient, stored_venue, auth_headers_admin):
        response = await client.post(
            "/api/v1/venues/venue-1/images",
            json={"images": ["https://example.com/a.jpg"]},
            headers=auth_headers_admin
        )

        assert response.status_code == 200
        assert response.json()["results"][0]["url"] == "https://example.com/a.jpg"

        venue = (await client.get("/api/v1/venues/venue-1")).json()
        assert venue["images"][0]["url"] == "https://example.com/a.jpg"
        assert "id" in venue["images"][0]

    @pytest.mark.asyncio
    async def test_bad_body(self, client: AsyncClient, stored_venue, auth_headers_admin):
        response = await client.post(
            "/api/v1/venues/venue-1/images", json={"images": []}, headers=auth_headers_admin
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_venue(self, client: AsyncClient, auth_headers_admin):
        response = await client.post(
            "/api/v1/venues/missing/images",
            json={"images": ["https://example.com/a.jpg"]},
            headers=auth_headers_admin
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_image(self, client: AsyncClient, stored_venue):
        response = await client.get("/api/v1/venues/venue-1/images/missing")

        assert response.status_code == 404


class TestFacebookEvents:
    """Test PUT /venues/{id}/facebook-events"""

    @pytest.mark.asyncio
    async def test_import_new_events(self, client: AsyncClient, stored_venue, event_repository, auth_headers_admin):
        response = await client.put(
            "/api/v1/venues/venue-1/facebook-events",
            json=[facebook_event("fb-1", ["2025-10-10T20:00:00Z"], name="Fredagsbar på Café")],
            headers=auth_headers_admin
        )

        assert response.status_code == 200
        assert response.content == b""

        event = event_repository.events["fb-1"]
        assert event["location"] == {"type": "venue"}
        assert event["organiser"] == {"venue": "venue-1"}
        assert event["queryText"] == "fredagsbar pa cafe"
        assert len(event["dates"]) == 1
        assert "datesChanged" not in event["facebook"]

    @pytest.mark.asyncio
    async def test_reimport_merges_dates(self, client: AsyncClient, stored_venue, event_repository, auth_headers_admin):
        url = "/api/v1/venues/venue-1/facebook-events"
        await client.put(
            url,
            json=[facebook_event("fb-1", ["2025-10-17T20:00:00Z", "2025-10-10T20:00:00Z"])],
            headers=auth_headers_admin
        )

        await client.put(
            url,
            json=[facebook_event("fb-1", ["2025-10-17T20:00:00Z", "2025-10-24T20:00:00Z"])],
            headers=auth_headers_admin
        )

        event = event_repository.events["fb-1"]
        assert [date["from"][:10] for date in event["dates"]] == ["2025-10-10", "2025-10-17", "2025-10-24"]
        assert event["facebook"]["datesChanged"] is True

    @pytest.mark.asyncio
    async def test_reimport_without_new_dates(self, client: AsyncClient, stored_venue, event_repository, auth_headers_admin):
        url = "/api/v1/venues/venue-1/facebook-events"
        payload = [facebook_event("fb-1", ["2025-10-10T20:00:00Z"])]
        await client.put(url, json=payload, headers=auth_headers_admin)

        await client.put(url, json=payload, headers=auth_headers_admin)

        assert "datesChanged" not in event_repository.events["fb-1"]["facebook"]

    @pytest.mark.asyncio
    async def test_unknown_venue(self, client: AsyncClient, auth_headers_admin):
        response = await client.put(
            "/api/v1/venues/missing/facebook-events",
            json=[facebook_event("fb-1", ["2025-10-10T20:00:00Z"])],
            headers=auth_headers_admin
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_event_without_dates(self, client: AsyncClient, stored_venue, auth_headers_admin):
        response = await client.put(
            "/api/v1/venues/venue-1/facebook-events",
            json=[{"name": "No dates", "dates": [], "facebook": {"id": "fb-2"}}],
            headers=auth_headers_admin
        )

        assert response.status_code == 422
