from datetime import date, timedelta

import pytest

from app.db.schema import MissionStatus
from app.services import exports
from conftest import make_mission


def test_tracking_shows_only_validated_missions_of_the_client(client, session, driver, refs):
    make_mission(session, refs, driver, date(2024, 1, 10), empty=2000, loaded=12000)
    make_mission(session, refs, driver, date(2024, 1, 11), status=MissionStatus.COMPLETED)

    response = client.get(f"/api/v1/tracking/{refs.client.tracking_token}")

    assert response.status_code == 200
    data = response.json()
    assert data["client_name"] == "Scierie du Moulin"
    assert data["report"]["stats"]["total_count"] == 1
    assert data["report"]["stats"]["total_weight"] == pytest.approx(10.0)
    assert data["report"]["stats"]["by_material"][0]["name"] == "Green waste"


def test_unknown_or_inactive_token_is_not_found(client, session, refs):
    assert client.get("/api/v1/tracking/unknown").status_code == 404

    refs.client.is_active = False
    session.add(refs.client)
    session.commit()

    assert client.get(f"/api/v1/tracking/{refs.client.tracking_token}").status_code == 404


def test_week_filter_on_tracking_page(client, session, driver, refs):
    today = date.today()
    make_mission(session, refs, driver, today - timedelta(days=3))
    make_mission(session, refs, driver, today - timedelta(days=60))

    response = client.get(f"/api/v1/tracking/{refs.client.tracking_token}?period=week")

    assert response.json()["report"]["stats"]["total_count"] == 1
    assert response.json()["report"]["period_label"] == "Last 7 days"


def test_pagination_does_not_change_totals(client, session, driver, refs):
    for day in range(35):
        make_mission(session, refs, driver, date(2024, 1, 1) + timedelta(days=day))

    first = client.get(f"/api/v1/tracking/{refs.client.tracking_token}").json()["report"]
    more = client.get(
        f"/api/v1/tracking/{refs.client.tracking_token}?limit={first['next_limit']}").json()["report"]

    assert len(first["missions"]) == 30
    assert first["has_more"] is True
    assert len(more["missions"]) == 35
    assert first["stats"] == more["stats"]


def test_tracking_csv_export_contains_every_filtered_mission(client, session, driver, refs):
    for day in range(35):
        make_mission(session, refs, driver, date(2024, 1, 1) + timedelta(days=day))

    response = client.get(f"/api/v1/tracking/{refs.client.tracking_token}/export.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    assert len(response.content.decode("utf-8-sig").splitlines()) == 36


def test_tracking_pdf_export(client, session, driver, refs, monkeypatch):
    make_mission(session, refs, driver, date(2024, 1, 10))

    tables = []
    real_table = exports.Table

    def recording_table(data, *args, **kwargs):
        tables.append(data)
        return real_table(data, *args, **kwargs)

    monkeypatch.setattr(exports, "Table", recording_table)

    response = client.get(f"/api/v1/tracking/{refs.client.tracking_token}/export.pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")

    missions_table = tables[-1]
    titles = missions_table[0]
    assert titles == [title for title, _ in exports.CLIENT_COLUMNS]
    assert "Driver" not in titles
    assert "Vehicle" not in titles
    assert missions_table[-1][0] == "TOTAL"
    assert missions_table[-1][titles.index(exports.NET_WEIGHT)] == "10.00 T"


def test_tracking_sites_and_requests(client, refs):
    sites = client.get(f"/api/v1/tracking/{refs.client.tracking_token}/sites").json()
    assert [s["name"] for s in sites] == ["Cour Nord"]

    client.post(
        f"/api/v1/tracking/{refs.client.tracking_token}/requests",
        json={"collection_site_id": sites[0]["id"], "estimated_weight_tons": 4},
    )
    requests = client.get(f"/api/v1/tracking/{refs.client.tracking_token}/requests").json()
    assert len(requests) == 1


def test_rotated_token_keeps_old_links_unless_revoked(client, refs, admin_headers):
    old_token = refs.client.tracking_token

    rotated = client.post(
        f"/api/v1/clients/{refs.client.id}/tracking-token/rotate",
        json={"revoke_previous": False},
        headers=admin_headers,
    ).json()
    new_token = rotated["tracking_token"]

    assert new_token != old_token
    assert client.get(f"/api/v1/tracking/{old_token}").status_code == 200
    assert client.get(f"/api/v1/tracking/{new_token}").status_code == 200

    client.post(
        f"/api/v1/clients/{refs.client.id}/tracking-token/rotate",
        json={"revoke_previous": True},
        headers=admin_headers,
    )

    assert client.get(f"/api/v1/tracking/{old_token}").status_code == 404
    assert client.get(f"/api/v1/tracking/{new_token}").status_code == 404


def test_tracking_qr_code(client, refs, admin_headers):
    response = client.get(f"/api/v1/clients/{refs.client.id}/tracking-qr", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["tracking_url"].endswith(f"/tracking/{refs.client.tracking_token}")
    assert data["qr_code_url"].endswith(f"tracking_{refs.client.tracking_token}.png")


def test_admin_reports_and_statistics(client, session, driver, admin_headers, refs):
    make_mission(session, refs, driver, date(2024, 1, 10), empty=2000, loaded=12000)
    make_mission(session, refs, driver, date(2024, 1, 11), empty=2000, loaded=4000,
                 status=MissionStatus.COMPLETED)

    report = client.get("/api/v1/reports/missions", headers=admin_headers).json()
    completed = client.get("/api/v1/reports/missions?status=completed", headers=admin_headers).json()
    stats = client.get("/api/v1/reports/statistics", headers=admin_headers).json()

    assert report["stats"]["total_count"] == 2
    assert completed["stats"]["total_count"] == 1
    assert stats["total_count"] == 1
    assert stats["total_weight"] == pytest.approx(10.0)
    assert stats["by_driver"][0]["name"] == "Jean Driver"
    assert stats["by_client"][0]["name"] == "Scierie du Moulin"


def test_accounting_exports(client, session, driver, admin_headers, driver_headers, refs):
    make_mission(session, refs, driver, date(2024, 1, 10))

    csv_response = client.get("/api/v1/reports/missions/export.csv", headers=admin_headers)
    pdf_response = client.get("/api/v1/reports/missions/export.pdf", headers=admin_headers)

    assert csv_response.status_code == 200
    lines = csv_response.content.decode("utf-8-sig").splitlines()
    assert lines[1].endswith('"Validated"')
    assert pdf_response.content.startswith(b"%PDF")
    assert client.get("/api/v1/reports/missions", headers=driver_headers).status_code == 403
