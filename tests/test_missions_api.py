from datetime import date

import pytest
from sqlmodel import select

from app.db.schema import Mission, MissionStatus, SystemAuditLog
from conftest import auth_headers, make_mission, mission_payload


def test_driver_creates_completed_mission_with_computed_net(client, session, driver, driver_headers, refs):
    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, net_weight_tons=999),
        headers=driver_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["net_weight_tons"] == pytest.approx(33.752)
    assert data["status"] == "completed"
    assert data["driver_id"] == str(driver.id)
    assert data["validated_at"] is None
    assert data["version"] == 1
    assert data["client_name"] == "Scierie du Moulin"


def test_weights_sent_as_strings_are_accepted(client, driver_headers, refs):
    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, empty_weight_kg="2000", loaded_weight_kg="35752"),
        headers=driver_headers,
    )

    assert response.status_code == 201
    assert response.json()["net_weight_tons"] == pytest.approx(33.752)


def test_loaded_not_above_empty_writes_nothing(client, session, driver_headers, refs):
    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, empty_weight_kg=5000, loaded_weight_kg=4000),
        headers=driver_headers,
    )

    assert response.status_code == 422
    assert session.exec(select(Mission)).all() == []


def test_admin_mission_defaults_to_validated(client, admin_headers, driver, refs):
    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, driver_id=str(driver.id)),
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "validated"
    assert data["validated_at"] is not None


def test_admin_must_pick_a_driver(client, admin_headers, refs):
    response = client.post("/api/v1/missions", json=mission_payload(refs), headers=admin_headers)

    assert response.status_code == 422


def test_driver_cannot_create_validated_mission(client, driver_headers, refs):
    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, status="validated"),
        headers=driver_headers,
    )

    assert response.status_code == 403


def test_driver_id_of_another_driver_is_ignored_for_drivers(client, driver, other_driver, driver_headers, refs):
    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, driver_id=str(other_driver.id)),
        headers=driver_headers,
    )

    assert response.status_code == 201
    assert response.json()["driver_id"] == str(driver.id)


def test_site_of_another_client_is_rejected(client, session, driver_headers, refs):
    from app.db.schema import Client, CollectionSite

    stranger = Client(name="Other", email="o@example.com", tracking_token="tok-other")
    session.add(stranger)
    session.flush()
    foreign_site = CollectionSite(client_id=stranger.id, name="Elsewhere", address="x")
    session.add(foreign_site)
    session.commit()

    response = client.post(
        "/api/v1/missions",
        json=mission_payload(refs, collection_site_id=str(foreign_site.id)),
        headers=driver_headers,
    )

    assert response.status_code == 422


def test_inactive_reference_is_rejected_on_create(client, session, driver_headers, refs):
    refs.vehicle.is_active = False
    session.add(refs.vehicle)
    session.commit()

    response = client.post("/api/v1/missions", json=mission_payload(refs), headers=driver_headers)

    assert response.status_code == 422


def test_drivers_only_list_their_own_missions(client, session, driver, other_driver, driver_headers, admin_headers, refs):
    mine = make_mission(session, refs, driver, date(2024, 1, 10))
    make_mission(session, refs, other_driver, date(2024, 1, 12))

    as_driver = client.get("/api/v1/missions", headers=driver_headers).json()
    as_admin = client.get("/api/v1/missions", headers=admin_headers).json()

    assert [m["id"] for m in as_driver] == [str(mine.id)]
    assert len(as_admin) == 2
    # most recent first
    assert as_admin[0]["mission_date"] == "2024-01-12"


def test_list_filters_on_mission_date(client, session, driver, driver_headers, refs):
    make_mission(session, refs, driver, date(2024, 1, 10))
    make_mission(session, refs, driver, date(2024, 1, 11))

    response = client.get("/api/v1/missions?mission_date=2024-01-11", headers=driver_headers)

    assert [m["mission_date"] for m in response.json()] == ["2024-01-11"]


def test_driver_cannot_read_someone_elses_mission(client, session, other_driver, driver_headers, refs):
    theirs = make_mission(session, refs, other_driver, date(2024, 1, 10))

    response = client.get(f"/api/v1/missions/{theirs.id}", headers=driver_headers)

    assert response.status_code == 403


def test_update_recomputes_net_and_bumps_version(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), status=MissionStatus.COMPLETED)

    response = client.patch(
        f"/api/v1/missions/{mission.id}",
        json={"loaded_weight_kg": 7000, "expected_version": 1},
        headers=driver_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["net_weight_tons"] == pytest.approx(5.0)
    assert data["version"] == 2


def test_update_with_stale_version_conflicts(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), status=MissionStatus.COMPLETED)

    response = client.patch(
        f"/api/v1/missions/{mission.id}",
        json={"driver_comment": "late", "expected_version": 7},
        headers=driver_headers,
    )

    assert response.status_code == 409


def test_update_merged_weights_are_checked(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), empty=2000, loaded=12000,
                           status=MissionStatus.COMPLETED)

    response = client.patch(
        f"/api/v1/missions/{mission.id}",
        json={"empty_weight_kg": 15000},
        headers=driver_headers,
    )

    assert response.status_code == 422
    session.refresh(mission)
    assert mission.empty_weight_kg == 2000


def test_validated_mission_cannot_go_back_through_update(client, session, driver, admin_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10))

    response = client.patch(
        f"/api/v1/missions/{mission.id}",
        json={"status": "draft"},
        headers=admin_headers,
    )

    assert response.status_code == 422


def test_validate_then_unvalidate(client, session, driver, admin_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), status=MissionStatus.COMPLETED)

    validated = client.post(f"/api/v1/missions/{mission.id}/validate", headers=admin_headers)
    assert validated.status_code == 200
    assert validated.json()["status"] == "validated"
    assert validated.json()["validated_at"] is not None

    back = client.post(f"/api/v1/missions/{mission.id}/unvalidate", headers=admin_headers)
    assert back.status_code == 200
    assert back.json()["status"] == "completed"
    assert back.json()["validated_at"] is None
    assert back.json()["version"] == 3


def test_driver_cannot_validate(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), status=MissionStatus.COMPLETED)

    response = client.post(f"/api/v1/missions/{mission.id}/validate", headers=driver_headers)

    assert response.status_code == 403


def test_delete_requires_confirmation(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10))

    response = client.delete(f"/api/v1/missions/{mission.id}", headers=driver_headers)

    assert response.status_code == 400
    assert session.get(Mission, mission.id) is not None


def test_delete_removes_mission_and_writes_audit(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10))

    response = client.delete(f"/api/v1/missions/{mission.id}?confirm=true", headers=driver_headers)

    assert response.status_code == 200
    session.expire_all()
    assert session.get(Mission, mission.id) is None
    logs = session.exec(select(SystemAuditLog).where(SystemAuditLog.entity_id == mission.id)).all()
    assert [log.action.value for log in logs] == ["delete"]


def test_delete_of_missing_mission_is_a_no_op(client, admin_headers):
    response = client.delete(
        "/api/v1/missions/00000000-0000-0000-0000-000000000000?confirm=true",
        headers=admin_headers,
    )

    assert response.status_code == 200


def test_driver_cannot_delete_someone_elses_mission(client, session, other_driver, driver_headers, refs):
    theirs = make_mission(session, refs, other_driver, date(2024, 1, 10))

    response = client.delete(f"/api/v1/missions/{theirs.id}?confirm=true", headers=driver_headers)

    assert response.status_code == 403


def test_missions_require_authentication(client):
    assert client.get("/api/v1/missions").status_code == 401


def test_inactive_profile_token_is_refused(client, session, driver, refs):
    headers = auth_headers(session, driver)
    driver.is_active = False
    session.add(driver)
    session.commit()

    assert client.get("/api/v1/missions", headers=headers).status_code == 400


@pytest.mark.parametrize("field", ["mission_date", "client_id", "vehicle_id", "empty_weight_kg"])
def test_null_on_a_required_field_leaves_it_unchanged(client, session, driver, driver_headers, refs, field):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), status=MissionStatus.COMPLETED)
    before = getattr(mission, field)

    response = client.patch(
        f"/api/v1/missions/{mission.id}",
        json={field: None, "driver_comment": "rechecked"},
        headers=driver_headers,
    )

    assert response.status_code == 200
    session.refresh(mission)
    assert getattr(mission, field) == before
    assert mission.driver_comment == "rechecked"


def test_null_clears_an_optional_field(client, session, driver, driver_headers, refs):
    mission = make_mission(session, refs, driver, date(2024, 1, 10), status=MissionStatus.COMPLETED)
    mission.order_number = "PO-9"
    session.add(mission)
    session.commit()

    response = client.patch(
        f"/api/v1/missions/{mission.id}",
        json={"order_number": None},
        headers=driver_headers,
    )

    assert response.status_code == 200
    assert response.json()["order_number"] is None
