import pytest

from rentdesk.api.routes.properties import generate_unit_numbers
from rentdesk.models import Unit


@pytest.mark.parametrize("unit_format,expected", [
    ("101", ["101", "102", "103", "201", "202", "203"]),
    ("01", ["01", "02", "03", "04", "05", "06"]),
    ("1", ["1", "2", "3", "4", "5", "6"]),
    ("A1", ["A1", "A2", "A3", "B1", "B2", "B3"]),
])
def test_generate_unit_numbers(unit_format, expected):
    numbers = generate_unit_numbers(2, 3, unit_format)
    assert [n for _, n in numbers] == expected
    assert [f for f, _ in numbers] == [1, 1, 1, 2, 2, 2]


def test_create_property_generates_units(client, db):
    response = client.post("/api/properties", json={
        "name": "Palm Residence",
        "location": "Dammam",
        "floors": 3,
        "units_per_floor": 2,
        "unit_format": "101",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["total_units"] == 6
    assert data["available_units"] == 6
    assert isinstance(data["display_id"], int)
    assert db.query(Unit).count() == 6


def test_create_property_with_explicit_units(client):
    response = client.post("/api/properties", json={
        "name": "Market Row",
        "property_type": "shops",
        "units": [{"unit_number": "S1"}, {"unit_number": "S2", "is_available": False}],
    })

    assert response.status_code == 201
    data = response.json()
    assert data["total_units"] == 2
    assert data["reserved_units"] == 1


def test_unknown_unit_format_is_rejected(client):
    response = client.post("/api/properties", json={"name": "X", "units_per_floor": 2, "unit_format": "ZZ"})
    assert response.status_code == 422


def test_letter_format_is_limited_to_26_floors(client):
    response = client.post("/api/properties", json={
        "name": "Skyline", "floors": 27, "units_per_floor": 2, "unit_format": "A1",
    })
    assert response.status_code == 422

    response = client.post("/api/properties", json={
        "name": "Skyline", "floors": 26, "units_per_floor": 1, "unit_format": "A1",
    })
    assert response.status_code == 201
    assert response.json()["total_units"] == 26


def test_explicit_units_must_be_unique(client, db):
    response = client.post("/api/properties", json={
        "name": "Market Row",
        "units": [{"unit_number": "S1"}, {"unit_number": "S1"}],
    })

    assert response.status_code == 409
    assert db.query(Unit).count() == 0


def test_property_crud(client, building):
    listed = client.get("/api/properties").json()
    assert [p["name"] for p in listed] == ["Al Noor Tower"]

    response = client.put(f"/api/properties/{building.id}", json={"price": 950000})
    assert response.status_code == 200
    assert response.json()["price"] == 950000

    assert client.delete(f"/api/properties/{building.id}").status_code == 204
    assert client.get(f"/api/properties/{building.id}").status_code == 404


def test_deleting_property_removes_units(client, db, building):
    client.delete(f"/api/properties/{building.id}")
    assert db.query(Unit).count() == 0


def test_add_unit_and_reject_duplicate_number(client, building):
    response = client.post(f"/api/properties/{building.id}/units", json={"unit_number": "301", "floor": 3})
    assert response.status_code == 201
    assert response.json()["property_id"] == str(building.id)

    duplicate = client.post(f"/api/properties/{building.id}/units", json={"unit_number": "301"})
    assert duplicate.status_code == 409

    units = client.get(f"/api/properties/{building.id}/units").json()
    assert len(units) == 5
    assert all("occupancy" in u for u in units)


def test_manual_flag_via_unit_update(client, building):
    unit_id = client.get(f"/api/properties/{building.id}/units").json()[0]["id"]

    response = client.put(f"/api/units/{unit_id}", json={"is_available": False})
    assert response.status_code == 200

    unit = client.get(f"/api/units/{unit_id}").json()
    assert unit["occupancy"]["reserved"] is True
    assert unit["occupancy"]["occupied"] is False


# ==================== Clients ====================

def test_client_crud_and_search(client):
    created = client.post("/api/clients", json={"name": "Khalid", "phone": "0551234567", "email": "k@example.com"})
    assert created.status_code == 201
    client_id = created.json()["id"]

    assert len(client.get("/api/clients", params={"search": "0551"}).json()) == 1
    assert client.get("/api/clients", params={"search": "nobody"}).json() == []

    updated = client.put(f"/api/clients/{client_id}", json={"nationality": "Saudi"})
    assert updated.json()["nationality"] == "Saudi"


# ==================== Maintenance ====================

def test_maintenance_lifecycle(client, building):
    created = client.post("/api/maintenance", json={
        "property_id": str(building.id),
        "description": "Water leak in unit 201",
        "priority": "high",
    })
    assert created.status_code == 201
    request_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    response = client.put(f"/api/maintenance/{request_id}", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["completed_date"] is not None

    assert len(client.get("/api/maintenance", params={"status": "completed"}).json()) == 1
    assert client.delete(f"/api/maintenance/{request_id}").status_code == 204


def test_maintenance_for_unknown_property(client):
    response = client.post("/api/maintenance", json={
        "property_id": "00000000-0000-4000-8000-000000000000",
        "description": "Broken door",
    })
    assert response.status_code == 404


# ==================== Preferences ====================

def test_preferences_defaults_and_update(client):
    response = client.get("/api/settings/preferences")
    assert response.json() == {"currency": "SAR", "theme": "light", "language": "ar"}

    response = client.put("/api/settings/preferences", json={"theme": "dark", "currency": "USD"})
    assert response.json() == {"currency": "USD", "theme": "dark", "language": "ar"}
