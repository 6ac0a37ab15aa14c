import pytest

from portal.config import Settings


def test_from_env_defaults(tmp_path):
    s = Settings.from_env({"SECRET_KEY": "k", "PORTAL_DATA_DIR": str(tmp_path)})
    assert s.secret_key == "k"
    assert s.session_ttl_seconds == 3600
    assert s.users_path == tmp_path.resolve() / "users.yml"
    assert s.sessions_path == tmp_path.resolve() / "sessions.yml"
    assert s.cookie_secure is False
    assert s.port == 3000


def test_from_env_overrides(tmp_path):
    s = Settings.from_env(
        {
            "PORTAL_SECRET_KEY": "k",
            "PORTAL_USERS_PATH": str(tmp_path / "u.yml"),
            "PORTAL_SESSION_TTL": "60",
            "PORTAL_COOKIE_SECURE": "yes",
            "PORT": "8080",
        }
    )
    assert s.users_path == tmp_path / "u.yml"
    assert s.session_ttl_seconds == 60
    assert s.cookie_secure is True
    assert s.port == 8080


def test_missing_secret():
    with pytest.raises(RuntimeError):
        Settings.from_env({})
