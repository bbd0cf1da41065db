"""Integration tests for geofence API endpoints."""

import pytest

API = "/api/v1/geofences"

SQUARE = [
    {"lat": 0, "lng": 0},
    {"lat": 0, "lng": 10},
    {"lat": 10, "lng": 10},
    {"lat": 10, "lng": 0},
]


def polygon_payload(**overrides):
    payload = {
        "name": "Test Square",
        "description": "Ten degree square",
        "fence_type": "polygon",
        "coordinates": SQUARE,
    }
    payload.update(overrides)
    return payload


def circle_payload(**overrides):
    center = {"lat": 37.7749, "lng": -122.4194}
    payload = {
        "name": "Downtown",
        "fence_type": "circle",
        "coordinates": [center],
        "center": center,
        "radius": 1000,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create(client, auth_headers):
    def _create(payload, headers=None):
        response = client.post(API, json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateGeofence:
    def test_create_polygon(self, client, auth_headers, user):
        response = client.post(API, json=polygon_payload(), headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Test Square"
        assert data["fence_type"] == "polygon"
        assert data["created_by"] == str(user.id)
        assert data["is_active"] is True
        assert data["geometry"] == {
            "type": "Polygon",
            "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]],
        }

    def test_presentation_defaults(self, create):
        data = create(polygon_payload())
        assert data["color"] == "#FF0000"
        assert data["fill_color"] == "#FF0000"
        assert data["fill_opacity"] == 0.3
        assert data["stroke_weight"] == 2
        assert data["tags"] == []

    def test_create_circle(self, create):
        data = create(circle_payload())
        assert data["fence_type"] == "circle"
        assert data["radius"] == 1000
        assert data["geometry"] == {"type": "Point", "coordinates": [-122.4194, 37.7749]}

    def test_circle_stores_center_as_only_vertex(self, create):
        data = create(circle_payload(coordinates=[{"lat": 1, "lng": 2}, {"lat": 3, "lng": 4}]))
        assert data["coordinates"] == [{"lat": 37.7749, "lng": -122.4194}]

    def test_create_rectangle(self, create):
        corners = [
            {"lat": 10, "lng": 10},
            {"lat": 10, "lng": 0},
            {"lat": 0, "lng": 0},
            {"lat": 0, "lng": 10},
        ]
        data = create(polygon_payload(fence_type="rectangle", coordinates=corners))
        assert data["geometry"]["type"] == "Polygon"
        assert len(data["geometry"]["coordinates"][0]) == 5

    def test_tags_are_trimmed(self, create):
        data = create(polygon_payload(tags=[" parks ", "", "zoning"]))
        assert data["tags"] == ["parks", "zoning"]

    @pytest.mark.parametrize(
        "payload",
        [
            polygon_payload(name=""),
            polygon_payload(name="   "),
            polygon_payload(name="x" * 101),
            polygon_payload(description="x" * 501),
            polygon_payload(coordinates=[]),
            polygon_payload(coordinates=SQUARE[:2]),
            polygon_payload(coordinates=[{"lat": 91, "lng": 0}] * 3),
            polygon_payload(fill_opacity=1.5),
            polygon_payload(stroke_weight=11),
            polygon_payload(fence_type="hexagon"),
            circle_payload(radius=None),
            circle_payload(radius=0),
            circle_payload(center=None),
        ],
    )
    def test_invalid_payload_is_rejected(self, client, auth_headers, payload):
        response = client.post(API, json=payload, headers=auth_headers)
        assert response.status_code == 422

    def test_rectangle_with_one_corner_is_rejected(self, client, auth_headers):
        payload = polygon_payload(fence_type="rectangle", coordinates=SQUARE[:1])

        response = client.post(API, json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert "at least 2" in response.json()["detail"]
        assert client.get(API, headers=auth_headers).json()["total"] == 0

    def test_requires_authentication(self, client):
        response = client.post(API, json=polygon_payload())
        assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


class TestReadGeofences:
    def test_list_own_active_geofences(self, client, auth_headers, create, other_user, headers_for):
        mine = create(polygon_payload(name="Mine"))
        create(circle_payload(name="Mine too"))
        create(polygon_payload(name="Theirs"), headers=headers_for(other_user))

        response = client.get(API, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {g["name"] for g in data["geofences"]} == {"Mine", "Mine too"}
        assert mine["id"] in {g["id"] for g in data["geofences"]}

    def test_get_geofence(self, client, auth_headers, create):
        created = create(polygon_payload())

        response = client.get(f"{API}/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["coordinates"] == SQUARE

    def test_get_unknown_geofence(self, client, auth_headers):
        response = client.get(f"{API}/00000000-0000-0000-0000-000000000000", headers=auth_headers)
        assert response.status_code == 404

    def test_other_users_geofence_is_hidden(self, client, create, other_user, headers_for):
        created = create(polygon_payload())

        response = client.get(f"{API}/{created['id']}", headers=headers_for(other_user))

        assert response.status_code == 404

    def test_admin_can_read_any_geofence(self, client, create, admin_user, headers_for):
        created = create(polygon_payload())

        response = client.get(f"{API}/{created['id']}", headers=headers_for(admin_user))

        assert response.status_code == 200

    def test_tags(self, client, auth_headers, create):
        create(polygon_payload(name="Park", tags=["parks", "north"]))
        create(polygon_payload(name="Lot", tags=["parking", "north"]))
        deleted = create(polygon_payload(name="Gone", tags=["archived"]))
        client.delete(f"{API}/{deleted['id']}", headers=auth_headers)

        response = client.get(f"{API}/tags", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"tags": ["north", "parking", "parks"], "total": 3}

    def test_geofences_by_tag(self, client, auth_headers, create):
        create(polygon_payload(name="Park", tags=["parks", "north"]))
        create(polygon_payload(name="Lot", tags=["parking", "north"]))

        response = client.get(f"{API}/tags/parks", headers=auth_headers)

        data = response.json()
        assert data["tag"] == "parks"
        assert data["total"] == 1
        assert data["geofences"][0]["name"] == "Park"
        assert client.get(f"{API}/tags/north", headers=auth_headers).json()["total"] == 2


# ---------------------------------------------------------------------------
# Update and delete
# ---------------------------------------------------------------------------


class TestUpdateGeofence:
    def test_rename_keeps_geometry(self, client, auth_headers, create):
        created = create(polygon_payload())

        response = client.patch(
            f"{API}/{created['id']}", json={"name": "Renamed"}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert data["geometry"] == created["geometry"]

    def test_new_vertices_rederive_geometry(self, client, auth_headers, create):
        created = create(polygon_payload())
        triangle = [{"lat": 0, "lng": 0}, {"lat": 0, "lng": 4}, {"lat": 4, "lng": 0}]

        response = client.patch(
            f"{API}/{created['id']}", json={"coordinates": triangle}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["geometry"]["coordinates"] == [[[0, 0], [4, 0], [0, 4], [0, 0]]]

    def test_switch_to_circle(self, client, auth_headers, create):
        created = create(polygon_payload())
        update = {"fence_type": "circle", "center": {"lat": 5, "lng": 5}, "radius": 250}

        response = client.patch(f"{API}/{created['id']}", json=update, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["geometry"] == {"type": "Point", "coordinates": [5, 5]}

    def test_blank_name_is_rejected(self, client, auth_headers, create):
        created = create(polygon_payload())

        response = client.patch(
            f"{API}/{created['id']}", json={"name": "   "}, headers=auth_headers
        )

        assert response.status_code == 422
        stored = client.get(f"{API}/{created['id']}", headers=auth_headers).json()
        assert stored["name"] == "Test Square"

    def test_name_is_trimmed(self, client, auth_headers, create):
        created = create(polygon_payload())

        response = client.patch(
            f"{API}/{created['id']}", json={"name": "  Renamed  "}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    def test_moving_circle_center_moves_its_vertex(self, client, auth_headers, create):
        created = create(circle_payload())
        center = {"lat": 40.7128, "lng": -74.006}

        response = client.patch(
            f"{API}/{created['id']}", json={"center": center}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["coordinates"] == [center]
        assert data["geometry"] == {"type": "Point", "coordinates": [-74.006, 40.7128]}

    def test_insufficient_shape_is_rejected(self, client, auth_headers, create):
        created = create(polygon_payload())

        response = client.patch(
            f"{API}/{created['id']}",
            json={"fence_type": "circle", "name": "Broken"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        stored = client.get(f"{API}/{created['id']}", headers=auth_headers).json()
        assert stored["name"] == "Test Square"
        assert stored["fence_type"] == "polygon"
        assert stored["geometry"] == created["geometry"]

    def test_other_user_cannot_update(self, client, create, other_user, headers_for):
        created = create(polygon_payload())

        response = client.patch(
            f"{API}/{created['id']}", json={"name": "Mine now"}, headers=headers_for(other_user)
        )

        assert response.status_code == 404

    def test_owner_cannot_be_changed(self, client, auth_headers, create, other_user, user):
        created = create(polygon_payload())

        response = client.patch(
            f"{API}/{created['id']}",
            json={"created_by": str(other_user.id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["created_by"] == str(user.id)

    def test_delete_is_logical(self, client, auth_headers, create):
        created = create(polygon_payload())

        response = client.delete(f"{API}/{created['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(API, headers=auth_headers).json()["total"] == 0
        stored = client.get(f"{API}/{created['id']}", headers=auth_headers).json()
        assert stored["is_active"] is False

    def test_reactivate(self, client, auth_headers, create):
        created = create(polygon_payload())
        client.delete(f"{API}/{created['id']}", headers=auth_headers)

        response = client.patch(
            f"{API}/{created['id']}", json={"is_active": True}, headers=auth_headers
        )

        assert response.json()["is_active"] is True
        assert client.get(API, headers=auth_headers).json()["total"] == 1


# ---------------------------------------------------------------------------
# Containment
# ---------------------------------------------------------------------------


class TestCheckPoint:
    def test_point_inside_one_geofence(self, client, auth_headers, create):
        create(circle_payload())
        square = create(polygon_payload())

        response = client.post(f"{API}/check-point", json={"lat": 5, "lng": 5}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["point"] == {"lat": 5, "lng": 5}
        assert data["is_inside"] is True
        assert data["count"] == 1
        assert [g["id"] for g in data["geofences"]] == [square["id"]]

    def test_point_outside_all_geofences(self, client, auth_headers, create):
        create(circle_payload())
        create(polygon_payload())

        response = client.post(f"{API}/check-point", json={"lat": 20, "lng": 20}, headers=auth_headers)

        data = response.json()
        assert data["is_inside"] is False
        assert data["count"] == 0
        assert data["geofences"] == []

    def test_inactive_and_foreign_geofences_are_ignored(
        self, client, auth_headers, create, other_user, headers_for
    ):
        deleted = create(polygon_payload(name="Deleted"))
        client.delete(f"{API}/{deleted['id']}", headers=auth_headers)
        create(polygon_payload(name="Foreign"), headers=headers_for(other_user))

        response = client.post(f"{API}/check-point", json={"lat": 5, "lng": 5}, headers=auth_headers)

        assert response.json()["count"] == 0

    def test_invalid_point(self, client, auth_headers):
        response = client.post(f"{API}/check-point", json={"lat": 95, "lng": 5}, headers=auth_headers)
        assert response.status_code == 422

    def test_check_single_circle(self, client, auth_headers, create):
        circle = create(circle_payload())

        response = client.post(
            f"{API}/{circle['id']}/check", json={"lat": 37.7849, "lng": -122.4194}, headers=auth_headers
        )

        data = response.json()
        assert data["inside"] is False
        assert data["geofence_id"] == circle["id"]
        assert data["geofence_name"] == "Downtown"
        assert data["distance_from_center"] == pytest.approx(1111.95, abs=0.5)

    def test_check_single_polygon(self, client, auth_headers, create):
        square = create(polygon_payload())

        response = client.post(
            f"{API}/{square['id']}/check", json={"lat": 5, "lng": 5}, headers=auth_headers
        )

        data = response.json()
        assert data["inside"] is True
        assert data["distance_from_center"] is None
