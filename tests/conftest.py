import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from portal.app import create_app
from portal.config import Settings


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    # Cheap argon2 parameters keep the suite fast.
    return Settings(
        secret_key="test-secret",
        data_dir=tmp_path / "data",
        hash_time_cost=1,
        hash_memory_cost=1024,
    )


@pytest.fixture()
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture()
def ctx(app):
    return app.state.ctx


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def signup(client: TestClient, name="A", email="a@x.com", password="secret", role=None):
    data = {"name": name, "email": email, "password": password}
    if role is not None:
        data["role"] = role
    return client.post("/signup", data=data, follow_redirects=False)


def login(client: TestClient, email="a@x.com", password="secret"):
    return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)
