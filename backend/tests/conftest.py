from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.database import get_db
from app.main import app
from app.config import settings
from app.services import advert_service


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "TestAdverts"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "adverts.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    from app.database import init_db
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def client(tmp_data, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


@pytest.fixture
def time_multiplier():
    """Set settings.time_multiplier for one test."""
    original = settings.time_multiplier

    def _set(value: float):
        settings.time_multiplier = value

    yield _set
    settings.time_multiplier = original


@pytest.fixture
def advert_payload():
    def _payload(**overrides) -> dict:
        data = {
            "reference": "REF-001",
            "job_title": "Senior Care Assistant",
            "job_type": "Permanent",
            "description": "Day shifts in a friendly residential home.",
            "telephone": "01632 960123",
            "submitters_forename": "Sam",
            "submitters_surname": "Taylor",
            "email": "sam@example.co.uk",
            "email_confirmation": "sam@example.co.uk",
            "password": "secret123",
            "password_retype": "secret123",
        }
        data.update(overrides)
        return data

    return _payload


@pytest.fixture
def make_advert(db, advert_payload):
    def _make(now: datetime | None = None, advertiser_id: int | None = None, **overrides):
        return advert_service.create_advert(
            db, advert_payload(**overrides), advertiser_id=advertiser_id, now=now
        )

    return _make
