import uuid
from datetime import timedelta

import pytest

from rentdesk.models import Contract, Payment, Unit


def contract_payload(building, renter, today, **overrides):
    payload = {
        "property_id": str(building.id),
        "client_id": str(renter.id),
        "unit_number": "101",
        "start_date": (today - timedelta(days=10)).isoformat(),
        "end_date": (today + timedelta(days=355)).isoformat(),
        "monthly_rent": 4000,
        "payment_method": "cheque",
        "payment_dates": ", ".join(
            (today + timedelta(days=offset)).strftime("%d-%m-%Y") for offset in (-10, 80, 170, 260)
        ),
        "payment_amounts": "1000, 1000, 1000, 1000",
        "check_numbers": "A1, A2, A3, A4",
    }
    payload.update(overrides)
    return payload


def _unit(db, building, number="101"):
    return db.query(Unit).filter(Unit.property_id == building.id, Unit.unit_number == number).one()


def test_create_contract_generates_payments_and_takes_unit(client, db, building, renter, today):
    response = client.post("/api/contracts", json=contract_payload(building, renter, today))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "active"
    assert data["is_active"] is True

    payments = db.query(Payment).filter(Payment.contract_id == uuid.UUID(data["id"])).all()
    assert len(payments) == 4
    assert sorted(p.status for p in payments) == ["pending", "scheduled", "scheduled", "scheduled"]
    assert sorted(p.check_number for p in payments) == ["A1", "A2", "A3", "A4"]

    unit = _unit(db, building)
    db.refresh(unit)
    assert unit.is_available is False
    assert unit.rented_by == renter.id


def test_second_contract_on_occupied_unit_is_refused(client, db, building, renter, other_renter, today):
    assert client.post("/api/contracts", json=contract_payload(building, renter, today)).status_code == 201

    response = client.post("/api/contracts", json=contract_payload(building, other_renter, today))

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "conflicting_reservation"
    assert db.query(Contract).count() == 1


def test_contract_dates_must_be_ordered(client, building, renter, today):
    payload = contract_payload(building, renter, today, end_date=(today - timedelta(days=20)).isoformat())
    assert client.post("/api/contracts", json=payload).status_code == 422


def test_contract_for_unknown_client(client, building, renter, today):
    payload = contract_payload(building, renter, today, client_id=str(uuid.uuid4()))
    assert client.post("/api/contracts", json=payload).status_code == 404


def test_schedule_endpoint(client, building, renter, today):
    created = client.post("/api/contracts", json=contract_payload(building, renter, today)).json()
    payment_id = client.get("/api/payments", params={"contract_id": created["id"]}).json()[0]["id"]
    client.post(f"/api/payments/{payment_id}/confirm")

    response = client.get(f"/api/contracts/{created['id']}/schedule")

    assert response.status_code == 200
    data = response.json()
    assert len(data["entries"]) == 4
    assert [e["due_date"] for e in data["entries"]] == [d.strip() for d in created["payment_dates"].split(",")]
    assert data["entries"][0]["status"] == "paid"
    assert data["entries"][0]["matched_by"] == "date"
    assert data["summary"]["paid_count"] == 1
    assert data["summary"]["total_amount"] == 4000.0


def test_terminate_contract(client, db, building, renter, today):
    created = client.post("/api/contracts", json=contract_payload(building, renter, today)).json()

    response = client.post(f"/api/contracts/{created['id']}/terminate")

    assert response.status_code == 200
    assert response.json()["status"] == "terminated"
    assert response.json()["terminated_date"] == today.isoformat()
    assert response.json()["is_active"] is False

    db.expire_all()
    statuses = {p.status for p in db.query(Payment).filter(Payment.contract_id == uuid.UUID(created["id"]))}
    assert statuses == {"overdue"}
    assert _unit(db, building).is_available is True

    occupancy = client.get(f"/api/properties/{building.id}/occupancy").json()
    assert occupancy["rented_units"] == 0


def test_renew_contract_reactivates_expired_one(client, db, building, renter, make_contract, today):
    expired = make_contract(building.id, renter.id, unit_number="201",
                            start=today - timedelta(days=400), end=today - timedelta(days=1))
    assert client.get(f"/api/contracts/{expired.id}").json()["is_active"] is False

    new_end = today + timedelta(days=365)
    response = client.post(f"/api/contracts/{expired.id}/renew", json={"end_date": new_end.isoformat()})

    assert response.status_code == 200
    assert response.json()["end_date"] == new_end.isoformat()
    assert response.json()["is_active"] is True
    db.expire_all()
    assert _unit(db, building, "201").is_available is False


def test_renew_onto_relet_unit_is_refused(client, building, renter, other_renter, make_contract, today):
    expired = make_contract(building.id, renter.id, unit_number="202",
                            start=today - timedelta(days=400), end=today - timedelta(days=1))
    make_contract(building.id, other_renter.id, unit_number="202")

    response = client.post(
        f"/api/contracts/{expired.id}/renew",
        json={"end_date": (today + timedelta(days=365)).isoformat()},
    )

    assert response.status_code == 409
    assert client.get(f"/api/contracts/{expired.id}").json()["is_active"] is False


def test_renew_before_start_is_rejected(client, building, renter, make_contract, today):
    contract = make_contract(building.id, renter.id)
    response = client.post(
        f"/api/contracts/{contract.id}/renew",
        json={"end_date": (today - timedelta(days=60)).isoformat()},
    )
    assert response.status_code == 422


def test_update_contract_keeps_payments(client, db, building, renter, today):
    created = client.post("/api/contracts", json=contract_payload(building, renter, today)).json()

    response = client.put(f"/api/contracts/{created['id']}", json={"bank_name": "SNB", "payment_amounts": "900, 1100, 1000, 1000"})

    assert response.status_code == 200
    assert response.json()["bank_name"] == "SNB"
    assert db.query(Payment).count() == 4


def test_delete_contract_removes_payments_and_frees_unit(client, db, building, renter, today):
    created = client.post("/api/contracts", json=contract_payload(building, renter, today)).json()

    response = client.delete(f"/api/contracts/{created['id']}")

    assert response.status_code == 204
    db.expire_all()
    assert db.query(Contract).count() == 0
    assert db.query(Payment).count() == 0
    assert _unit(db, building).is_available is True


def test_list_contracts_filters(client, building, renter, other_renter, make_contract, today):
    make_contract(building.id, renter.id, unit_number="101")
    make_contract(building.id, renter.id, unit_number="102", end=today + timedelta(days=10))
    make_contract(building.id, other_renter.id, unit_number="201", status="terminated")

    assert len(client.get("/api/contracts").json()) == 3
    assert len(client.get("/api/contracts", params={"status": "active"}).json()) == 2
    assert len(client.get("/api/contracts", params={"status": "terminated"}).json()) == 1
    expiring = client.get("/api/contracts", params={"status": "expiring"}).json()
    assert [c["unit_number"] for c in expiring] == ["102"]
    assert len(client.get("/api/contracts", params={"client_id": str(other_renter.id)}).json()) == 1


def test_other_users_contract_is_not_found(client, building, renter, make_contract):
    foreign = make_contract(building.id, renter.id, user_id=uuid.uuid4())

    assert client.get(f"/api/contracts/{foreign.id}").status_code == 404
    assert client.get(f"/api/contracts/{foreign.id}/schedule").status_code == 404
    assert client.post(f"/api/contracts/{foreign.id}/terminate").status_code == 404
    assert client.delete(f"/api/contracts/{foreign.id}").status_code == 404


def test_client_with_active_contract_cannot_be_deleted(client, db, building, renter, make_contract):
    make_contract(building.id, renter.id)

    response = client.delete(f"/api/clients/{renter.id}")

    assert response.status_code == 409


def test_client_with_finished_contracts_is_deleted(client, db, building, renter, make_contract):
    make_contract(building.id, renter.id, status="terminated")

    assert client.delete(f"/api/clients/{renter.id}").status_code == 204
    assert db.query(Contract).count() == 0


def test_expiring_includes_contract_ending_today(client, building, renter, make_contract, today):
    make_contract(building.id, renter.id, unit_number="202", end=today)

    expiring = client.get("/api/contracts", params={"status": "expiring"}).json()
    assert [c["unit_number"] for c in expiring] == ["202"]


# ==================== Editing units and dates ====================

def _sources(client, building):
    occupancy = client.get(f"/api/properties/{building.id}/occupancy").json()
    return {u["unit_number"]: u["occupancy"]["source"] for u in occupancy["units"]}


def test_moving_contract_onto_occupied_unit_is_refused(client, db, building, renter, other_renter, today):
    client.post("/api/contracts", json=contract_payload(building, renter, today))
    second = client.post(
        "/api/contracts", json=contract_payload(building, other_renter, today, unit_number="102")
    ).json()

    response = client.put(f"/api/contracts/{second['id']}", json={"unit_number": "101"})

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "conflicting_reservation"
    db.expire_all()
    assert db.get(Contract, uuid.UUID(second["id"])).unit_number == "102"
    assert _unit(db, building, "102").rented_by == other_renter.id
    assert _sources(client, building)["102"] == "contract"


def test_moving_contract_frees_the_old_unit(client, db, building, renter, today):
    created = client.post("/api/contracts", json=contract_payload(building, renter, today)).json()

    response = client.put(f"/api/contracts/{created['id']}", json={"unit_number": "201"})

    assert response.status_code == 200
    db.expire_all()
    assert _unit(db, building, "101").is_available is True
    assert _unit(db, building, "201").rented_by == renter.id
    sources = _sources(client, building)
    assert sources["101"] == "none"
    assert sources["201"] == "contract"


def test_unit_is_relet_after_end_date_moves_to_yesterday(client, db, building, renter, other_renter, today):
    created = client.post("/api/contracts", json=contract_payload(building, renter, today)).json()

    response = client.put(
        f"/api/contracts/{created['id']}", json={"end_date": (today - timedelta(days=1)).isoformat()}
    )

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert _sources(client, building)["101"] == "none"

    relet = client.post("/api/contracts", json=contract_payload(building, other_renter, today))
    assert relet.status_code == 201


def test_extending_expired_contract_onto_relet_unit_is_refused(client, building, renter, other_renter,
                                                                make_contract, today):
    expired = make_contract(building.id, renter.id, unit_number="201",
                            start=today - timedelta(days=400), end=today - timedelta(days=1))
    make_contract(building.id, other_renter.id, unit_number="201")

    response = client.put(
        f"/api/contracts/{expired.id}", json={"end_date": (today + timedelta(days=90)).isoformat()}
    )

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "conflicting_reservation"


@pytest.mark.parametrize("field", ["end_date", "start_date", "monthly_rent", "payment_dates"])
def test_null_for_required_contract_field_is_rejected(client, db, building, renter, make_contract, field):
    contract = make_contract(building.id, renter.id)
    end_date = contract.end_date

    response = client.put(f"/api/contracts/{contract.id}", json={field: None})

    assert response.status_code == 422
    db.expire_all()
    assert db.get(Contract, contract.id).end_date == end_date


def test_null_for_optional_contract_field_is_saved(client, building, renter, make_contract):
    contract = make_contract(building.id, renter.id)

    response = client.put(f"/api/contracts/{contract.id}", json={"bank_name": None})

    assert response.status_code == 200
    assert response.json()["bank_name"] is None
