from conftest import PASSWORD


def signin(client, email, password=PASSWORD):
    return client.post("/api/v1/auth/token", json={"email": email, "password": password})


def test_signin_and_me(client, driver):
    tokens = signin(client, "Driver@Example.com").json()

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})

    assert me.status_code == 200
    assert me.json()["email"] == "driver@example.com"
    assert me.json()["role"] == "driver"
    assert "hashed_password" not in me.json()


def test_wrong_password(client, driver):
    assert signin(client, "driver@example.com", "nope").status_code == 401


def test_deactivated_profile_cannot_sign_in(client, session, driver):
    driver.is_active = False
    session.add(driver)
    session.commit()

    assert signin(client, "driver@example.com").status_code == 403


def test_refresh_gives_a_new_access_token(client, driver):
    tokens = signin(client, "driver@example.com").json()

    refreshed = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    misused = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert refreshed.status_code == 200
    assert "access_token" in refreshed.json()
    assert misused.status_code == 401


def test_change_own_password(client, driver, driver_headers):
    wrong = client.put(
        "/api/v1/auth/me/password",
        json={"current_password": "nope", "new_password": "another-pass"},
        headers=driver_headers,
    )
    ok = client.put(
        "/api/v1/auth/me/password",
        json={"current_password": PASSWORD, "new_password": "another-pass"},
        headers=driver_headers,
    )

    assert wrong.status_code == 400
    assert ok.status_code == 200
    assert signin(client, "driver@example.com", "another-pass").status_code == 200


def test_change_own_email(client, driver, other_driver, driver_headers):
    taken = client.put(
        "/api/v1/auth/me/email",
        json={"new_email": "other@example.com", "password": PASSWORD},
        headers=driver_headers,
    )
    ok = client.put(
        "/api/v1/auth/me/email",
        json={"new_email": "jean@example.com", "password": PASSWORD},
        headers=driver_headers,
    )

    assert taken.status_code == 409
    assert ok.status_code == 200
    assert ok.json()["email"] == "jean@example.com"


def test_health_endpoints(client):
    assert client.get("/api/v1/").json()["status"] == "API is running"
    assert client.get("/api/v1/readiness").json() == {"status": "ready", "database": "online"}
