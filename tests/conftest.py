import os
import tempfile
import threading

import pytest

# Configure the application before it is imported
os.environ["TESTING"] = "1"
os.environ.setdefault(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'test.db')}"
)

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from vaccine_scheduler.main import app
from vaccine_scheduler.core.database import create_db_engine, get_db, get_redis, init_db
from vaccine_scheduler.models import Caregiver, Patient


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the app uses."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])


@pytest.fixture
def engine(tmp_path):
    # File-backed: each connection runs its own transaction
    engine = create_db_engine(f"sqlite:///{tmp_path / 'scheduler.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def accounts(db):
    """Insert caregiver and patient rows without paying for password hashing."""
    def create(caregivers=(), patients=()):
        for username in caregivers:
            db.add(Caregiver(username=username, password_hash="unused"))
        for username in patients:
            db.add(Patient(username=username, password_hash="unused"))
        db.commit()

    return create


@pytest.fixture
def run_concurrently(session_factory):
    """Start every call at the same moment, each with its own session.

    Each call receives a session and returns a value; exceptions are
    returned in place of the value.
    """
    def run(*calls):
        barrier = threading.Barrier(len(calls))
        results = [None] * len(calls)

        def worker(index, call):
            session = session_factory()
            try:
                barrier.wait()
                results[index] = call(session)
            except Exception as e:
                results[index] = e
            finally:
                session.close()

        threads = [
            threading.Thread(target=worker, args=(index, call))
            for index, call in enumerate(calls)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return results

    return run


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(session_factory, fake_redis):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis

    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    """Create an account for the role and return bearer headers for it."""
    def login(role, username, password="TestPassword123"):
        client.post(f"/api/v1/auth/{role}s", json={"username": username, "password": password})
        response = client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": password, "role": role}
        )
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return login
