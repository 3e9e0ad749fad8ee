"""Shared fixtures: a throwaway SQLite database and signed-in profiles."""
import os
import shutil
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

TMP = Path(__file__).resolve().parent / ".tmp"
TMP.mkdir(parents=True, exist_ok=True)
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{TMP / 'test.db'}"
os.environ["STATIC_DIR"] = str(TMP / "static")
os.environ["LOG_FILE"] = str(TMP / "test.log")
os.environ["SERVICE_ROLE_KEY"] = "service-key"
os.environ["INITIAL_ADMIN_EMAIL"] = "boss@example.com"
os.environ["INITIAL_ADMIN_PASSWORD"] = "bootstrap-pass"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from app.main import app  # noqa: E402
from app.db.core import engine, init_db  # noqa: E402
from app.db.schema import (  # noqa: E402
    Client, CollectionSite, DepositSite, MaterialType, Mission, MissionStatus,
    Profile, ProfileRole, TrackingToken, Vehicle,
)
from app.services.mission_rules import compute_net_weight_tons  # noqa: E402
from app.services.password import get_password_hash  # noqa: E402
from app.services.profile import ProfileService  # noqa: E402


PASSWORD = "password123"


@pytest.fixture(autouse=True)
def database():
    init_db()
    yield
    SQLModel.metadata.drop_all(engine)
    shutil.rmtree(TMP / "static" / "qrcodes", ignore_errors=True)


@pytest.fixture
def session(database):
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def client():
    return TestClient(app)


def make_profile(session: Session, email: str, role: ProfileRole, name: str, is_active: bool = True) -> Profile:
    profile = Profile(
        email=email,
        full_name=name,
        role=role,
        is_active=is_active,
        hashed_password=get_password_hash(PASSWORD),
    )
    session.add(profile)
    session.commit()
    return profile


def auth_headers(session: Session, profile: Profile) -> dict:
    token = ProfileService(session).generate_access_token(profile)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(session):
    return make_profile(session, "admin@example.com", ProfileRole.SUPER_ADMIN, "Admin")


@pytest.fixture
def driver(session):
    return make_profile(session, "driver@example.com", ProfileRole.DRIVER, "Jean Driver")


@pytest.fixture
def other_driver(session):
    return make_profile(session, "other@example.com", ProfileRole.DRIVER, "Paul Other")


@pytest.fixture
def admin_headers(session, admin):
    return auth_headers(session, admin)


@pytest.fixture
def driver_headers(session, driver):
    return auth_headers(session, driver)


@pytest.fixture
def refs(session):
    """One client with a site, plus a deposit site, a vehicle and a material type."""
    customer = Client(
        name="Scierie du Moulin",
        email="contact@moulin.example",
        siret="12345678900012",
        tracking_token="track-moulin",
    )
    customer.tokens.append(TrackingToken(token="track-moulin"))
    session.add(customer)
    session.flush()

    site = CollectionSite(client_id=customer.id, name="Cour Nord", address="12 route de Nantes")
    deposit = DepositSite(name="Plateforme Est", address="ZI Est")
    vehicle = Vehicle(name="Benne 26T", license_plate="AB-123-CD", vehicle_type="Ampliroll")
    material = MaterialType(name="Green waste")

    session.add_all([site, deposit, vehicle, material])
    session.commit()

    return SimpleNamespace(
        client=customer, site=site, deposit=deposit, vehicle=vehicle, material=material)


def mission_payload(refs, **overrides) -> dict:
    payload = {
        "client_id": str(refs.client.id),
        "collection_site_id": str(refs.site.id),
        "deposit_site_id": str(refs.deposit.id),
        "vehicle_id": str(refs.vehicle.id),
        "material_type_id": str(refs.material.id),
        "mission_date": "2024-01-15",
        "empty_weight_kg": 2000,
        "loaded_weight_kg": 35752,
    }
    payload.update(overrides)
    return payload


def make_mission(
    session: Session,
    refs,
    driver: Profile,
    mission_date: date,
    empty: float = 2000,
    loaded: float = 12000,
    status: MissionStatus = MissionStatus.VALIDATED,
) -> Mission:
    mission = Mission(
        client_id=refs.client.id,
        driver_id=driver.id,
        collection_site_id=refs.site.id,
        deposit_site_id=refs.deposit.id,
        vehicle_id=refs.vehicle.id,
        material_type_id=refs.material.id,
        mission_date=mission_date,
        empty_weight_kg=empty,
        loaded_weight_kg=loaded,
        net_weight_tons=compute_net_weight_tons(empty, loaded),
        status=status,
    )
    session.add(mission)
    session.commit()
    return mission
