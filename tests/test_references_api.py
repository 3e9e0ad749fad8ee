from datetime import date

from conftest import make_mission


def test_client_crud_and_search(client, admin_headers):
    created = client.post(
        "/api/v1/clients",
        json={"name": "Menuiserie Leroy", "email": "contact@leroy.example", "siret": "98765432100011"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    assert created.json()["tracking_token"]

    by_siret = client.get("/api/v1/clients?search=9876", headers=admin_headers).json()
    by_name = client.get("/api/v1/clients?search=leroy", headers=admin_headers).json()
    assert [c["name"] for c in by_siret] == ["Menuiserie Leroy"]
    assert [c["name"] for c in by_name] == ["Menuiserie Leroy"]

    client_id = created.json()["id"]
    updated = client.patch(f"/api/v1/clients/{client_id}", json={"phone": "0102030405"}, headers=admin_headers)
    assert updated.json()["phone"] == "0102030405"

    # the token from creation resolves
    assert client.get(f"/api/v1/tracking/{created.json()['tracking_token']}").status_code == 200

    assert client.delete(f"/api/v1/clients/{client_id}", headers=admin_headers).status_code == 200


def test_drivers_cannot_write_reference_data(client, driver_headers):
    response = client.post(
        "/api/v1/material-types", json={"name": "Cardboard"}, headers=driver_headers)

    assert response.status_code == 403


def test_drivers_only_see_active_entries(client, session, refs, admin_headers, driver_headers):
    refs.material.is_active = False
    session.add(refs.material)
    session.commit()

    as_driver = client.get("/api/v1/material-types?include_inactive=true", headers=driver_headers).json()
    as_admin = client.get("/api/v1/material-types?include_inactive=true", headers=admin_headers).json()

    assert as_driver == []
    assert [m["name"] for m in as_admin] == ["Green waste"]


def test_reference_in_use_cannot_be_deleted(client, session, driver, refs, admin_headers):
    make_mission(session, refs, driver, date(2024, 1, 10))

    for url in (
        f"/api/v1/clients/{refs.client.id}",
        f"/api/v1/collection-sites/{refs.site.id}",
        f"/api/v1/deposit-sites/{refs.deposit.id}",
        f"/api/v1/vehicles/{refs.vehicle.id}",
        f"/api/v1/material-types/{refs.material.id}",
    ):
        assert client.delete(url, headers=admin_headers).status_code == 409, url


def test_unused_references_can_be_deleted(client, refs, admin_headers):
    assert client.delete(f"/api/v1/vehicles/{refs.vehicle.id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/v1/deposit-sites/{refs.deposit.id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/v1/collection-sites/{refs.site.id}", headers=admin_headers).status_code == 200


def test_vehicle_plates_are_unique(client, refs, admin_headers):
    response = client.post(
        "/api/v1/vehicles",
        json={"name": "Second", "license_plate": "ab-123-cd", "vehicle_type": "Plateau"},
        headers=admin_headers,
    )

    assert response.status_code == 409


def test_collection_site_requires_existing_client(client, admin_headers):
    response = client.post(
        "/api/v1/collection-sites",
        json={"client_id": "00000000-0000-0000-0000-000000000000", "name": "Nowhere", "address": "x"},
        headers=admin_headers,
    )

    assert response.status_code == 404


def test_collection_sites_filtered_by_client(client, refs, driver_headers):
    sites = client.get(
        f"/api/v1/collection-sites?client_id={refs.client.id}", headers=driver_headers).json()

    assert [s["name"] for s in sites] == ["Cour Nord"]
