from app.core.config import settings
from sqlmodel import Session, SQLModel, create_engine


connect_args = {}
if settings.database_url.startswith("sqlite"):
    # TestClient and background tasks run in worker threads
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)


def get_session():
    with Session(engine) as session:
        yield session


def init_db():
    """Creates all tables. Used by seed.py and the test suite; production goes through Alembic."""
    import app.db.schema  # noqa: F401

    SQLModel.metadata.create_all(engine)
