import pytest
from fastapi.testclient import TestClient

from agrichannel.core.config import Settings
from agrichannel.core.database import Base
from agrichannel.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        app_env="development",
        database_url=f"sqlite:///{tmp_path / 'data' / 'test.sqlite'}",
        media_root=tmp_path / "uploads",
        secret_key="test-secret",
        bcrypt_rounds=4,
        keepalive_enabled=False,
        # keep heartbeat frames out of the way of event assertions
        online_count_interval_seconds=30.0,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, settings, tmp_path):
    """Session for service-level tests (no HTTP client involved)."""
    (tmp_path / "data").mkdir(exist_ok=True)
    settings.media_root.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=app.state.engine)
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()
        app.state.engine.dispose()


@pytest.fixture
def register(client):
    """Register an account and return (user_id, auth headers)."""

    def _register(password="abcd"):
        resp = client.post("/api/register", json={"password": password})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        return body["userId"], {"Authorization": f"Bearer {body['token']}"}

    return _register
