import uuid
from datetime import date, timedelta
from types import SimpleNamespace

from rentdesk.services.occupancy_service import derive_occupancy, is_contract_active, property_occupancy

TODAY = date(2024, 6, 15)
PROPERTY_ID = uuid.uuid4()


def contract(end_date, status="active", unit_number="101", property_id=PROPERTY_ID, client_id=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        property_id=property_id,
        unit_number=unit_number,
        client_id=client_id or uuid.uuid4(),
        status=status,
        end_date=end_date,
    )


def unit(unit_number="101", is_available=True, rented_by=None, property_id=PROPERTY_ID):
    return SimpleNamespace(
        id=uuid.uuid4(),
        property_id=property_id,
        unit_number=unit_number,
        is_available=is_available,
        rented_by=rented_by,
    )


# ==================== Derivation ====================

def test_active_contract_occupies_unit():
    c = contract(TODAY + timedelta(days=10))
    occupancy = derive_occupancy([c], PROPERTY_ID, "101", TODAY)

    assert occupancy.occupied is True
    assert occupancy.source == "contract"
    assert occupancy.contract_id == c.id
    assert occupancy.client_id == c.client_id


def test_contract_ending_today_still_occupies():
    assert is_contract_active(contract(TODAY), TODAY) is True


def test_moving_end_date_before_today_frees_unit():
    c = contract(TODAY + timedelta(days=90))
    assert derive_occupancy([c], PROPERTY_ID, "101", TODAY).occupied is True

    c.end_date = TODAY - timedelta(days=1)
    occupancy = derive_occupancy([c], PROPERTY_ID, "101", TODAY)

    assert occupancy.occupied is False
    assert occupancy.available is True


def test_terminated_contract_does_not_occupy():
    c = contract(TODAY + timedelta(days=90), status="terminated")
    assert derive_occupancy([c], PROPERTY_ID, "101", TODAY).occupied is False


def test_unit_number_and_property_must_match_exactly():
    contracts = [
        contract(TODAY + timedelta(days=30), unit_number="1010"),
        contract(TODAY + timedelta(days=30), property_id=uuid.uuid4()),
    ]
    assert derive_occupancy(contracts, PROPERTY_ID, "101", TODAY).occupied is False


def test_first_active_contract_wins():
    first = contract(TODAY + timedelta(days=30))
    second = contract(TODAY + timedelta(days=60))
    assert derive_occupancy([first, second], PROPERTY_ID, "101", TODAY).contract_id == first.id


def test_end_date_string_is_accepted():
    c = contract("2024-06-20")
    assert derive_occupancy([c], PROPERTY_ID, "101", TODAY).occupied is True


def test_stored_flag_never_overrides_active_contract():
    c = contract(TODAY + timedelta(days=30))
    stale = unit(is_available=True)

    occupancy = derive_occupancy([c], PROPERTY_ID, "101", TODAY, unit=stale)

    assert occupancy.occupied is True
    assert occupancy.source == "contract"


def test_manual_flag_reports_reserved_without_contract():
    held = unit(is_available=False)
    occupancy = derive_occupancy([], PROPERTY_ID, "101", TODAY, unit=held)

    assert occupancy.occupied is False
    assert occupancy.reserved is True
    assert occupancy.available is False
    assert occupancy.source == "manual_flag"


def test_flag_left_by_ended_contract_reads_as_available():
    tenant = uuid.uuid4()
    ended = contract(TODAY - timedelta(days=1), client_id=tenant)
    terminated = contract(TODAY + timedelta(days=90), status="terminated", client_id=tenant)
    flagged = unit(is_available=False, rented_by=tenant)

    for history in ([ended], [terminated]):
        occupancy = derive_occupancy(history, PROPERTY_ID, "101", TODAY, unit=flagged)
        assert occupancy.available is True
        assert occupancy.source == "none"

    other = contract(TODAY - timedelta(days=1))
    assert derive_occupancy([other], PROPERTY_ID, "101", TODAY, unit=flagged).reserved is True


def test_property_counts():
    units = [unit("101"), unit("102", is_available=False), unit("201"), unit("202")]
    contracts = [
        contract(TODAY + timedelta(days=30), unit_number="101"),
        contract(TODAY - timedelta(days=1), unit_number="201"),
    ]

    rows, counts = property_occupancy(units, contracts, TODAY)

    assert len(rows) == 4
    assert counts == {"total_units": 4, "rented_units": 1, "reserved_units": 1, "available_units": 2}


# ==================== API ====================

def test_property_occupancy_endpoint(client, building, renter, make_contract):
    make_contract(building.id, renter.id, unit_number="102")

    response = client.get(f"/api/properties/{building.id}/occupancy")

    assert response.status_code == 200
    data = response.json()
    assert data["total_units"] == 4
    assert data["rented_units"] == 1
    assert data["available_units"] == 3
    occupied = [u for u in data["units"] if u["occupancy"]["occupied"]]
    assert [u["unit_number"] for u in occupied] == ["102"]
    assert occupied[0]["occupancy"]["client_id"] == str(renter.id)


def test_expired_contract_does_not_count_as_rented(client, building, renter, make_contract, today):
    make_contract(building.id, renter.id, unit_number="101",
                  start=today - timedelta(days=400), end=today - timedelta(days=1))

    response = client.get(f"/api/properties/{building.id}")

    assert response.status_code == 200
    assert response.json()["rented_units"] == 0
    assert response.json()["available_units"] == 4


def test_sync_units_marks_contracted_units_taken(client, db, building, renter, make_contract):
    make_contract(building.id, renter.id, unit_number="201")

    response = client.post(f"/api/properties/{building.id}/sync-units")

    assert response.status_code == 200
    assert response.json()["updated"] == 1
    units = {u.unit_number: u for u in building.units}
    db.refresh(units["201"])
    assert units["201"].is_available is False
    assert units["201"].rented_by == renter.id


def test_standalone_shops_listing(client, db, renter, make_contract):
    created = client.post("/api/units", json={"unit_number": "S-7", "unit_type": "shop", "name": "Corner shop"})
    assert created.status_code == 201
    assert created.json()["property_id"] is None

    make_contract(None, renter.id, unit_number="S-7")

    response = client.get("/api/units", params={"standalone": True})

    assert response.status_code == 200
    shops = response.json()
    assert len(shops) == 1
    assert shops[0]["occupancy"]["occupied"] is True
