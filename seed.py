from loguru import logger
from sqlmodel import Session, select
from app.db.core import engine, init_db
from app.db.schema import MaterialType, Profile, ProfileRole
from app.core.config import settings
from app.services.password import get_password_hash


# Default material catalogue, editable afterwards from the admin screens
DEFAULT_MATERIAL_TYPES = {
    "Green waste": "Branches, grass cuttings and hedge trimmings",
    "Wood class A": "Untreated wood, pallets and crates",
    "Wood class B": "Painted or varnished wood, panels",
    "Inert waste": "Rubble, concrete, stones",
    "Mixed industrial waste": None,
}


def seed_admin(session: Session):
    """Creates the configured administrator if no profile uses that email."""
    logger.info("--- Seeding Administrator ---")

    if not settings.initial_admin_password:
        logger.warning(
            "INITIAL_ADMIN_PASSWORD not set, skipping administrator creation")
        return

    email = settings.initial_admin_email.lower()
    admin = session.exec(select(Profile).where(Profile.email == email)).first()

    if admin:
        logger.info(f"Existing Administrator: {email}")
        return

    session.add(Profile(
        email=email,
        full_name=settings.initial_admin_name,
        role=ProfileRole.SUPER_ADMIN,
        is_active=True,
        hashed_password=get_password_hash(settings.initial_admin_password)
    ))
    logger.info(f"Created Administrator: {email}")


def seed_material_types(session: Session):
    logger.info("--- Seeding Material Types ---")

    for name, description in DEFAULT_MATERIAL_TYPES.items():
        material_type = session.exec(
            select(MaterialType).where(MaterialType.name == name)).first()

        if not material_type:
            session.add(MaterialType(name=name, description=description))
            logger.info(f"Created Material Type: {name}")
        else:
            logger.info(f"Existing Material Type: {name}")


def main():
    # Ensure tables exist (if not using Alembic)
    init_db()

    with Session(engine) as session:
        try:
            seed_admin(session)
            seed_material_types(session)

            session.commit()
            logger.success("Database seeded successfully!")
        except Exception as e:
            session.rollback()
            logger.error(f"Seeding failed: {e}")
            raise e


if __name__ == "__main__":
    main()
