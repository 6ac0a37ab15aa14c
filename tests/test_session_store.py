import pytest
import yaml
from cryptography.fernet import Fernet

from portal.auth.session import CookieSigner, SessionSnapshot, SessionStore, fernet_from_secret
from portal.auth.users import Role

SNAP = SessionSnapshot(name="Ann", email="ann@x.com", role=Role.USER)


@pytest.fixture()
def store(tmp_path, clock):
    return SessionStore(tmp_path / "sessions.yml", Fernet(Fernet.generate_key()), ttl_seconds=3600, clock=clock)


def test_create_then_load(store):
    token = store.create_session(SNAP)
    assert len(token) >= 32
    assert store.load_session(token) == SNAP


def test_tokens_are_unique(store):
    assert store.create_session(SNAP) != store.create_session(SNAP)


def test_load_absent_or_unknown(store):
    assert store.load_session(None) is None
    assert store.load_session("") is None
    assert store.load_session("unknown-token") is None


def test_destroy_is_idempotent(store):
    token = store.create_session(SNAP)
    store.destroy_session(token)
    assert store.load_session(token) is None
    store.destroy_session(token)
    store.destroy_session("never-existed")
    store.destroy_session(None)


def test_expiry_is_absolute(store, clock):
    token = store.create_session(SNAP)
    clock.advance(3599)
    assert store.load_session(token) == SNAP
    # Loading must not have pushed the deadline out.
    clock.advance(1)
    assert store.load_session(token) is None
    clock.advance(-10)
    assert store.load_session(token) is None


def test_disk_holds_neither_token_nor_plain_snapshot(store):
    token = store.create_session(SNAP)
    text = store.path.read_text(encoding="utf-8")
    assert token not in text
    assert "ann@x.com" not in text
    raw = yaml.safe_load(text)
    assert len(raw["sessions"]) == 1


def test_record_sealed_with_another_key_is_ignored(tmp_path, clock):
    path = tmp_path / "sessions.yml"
    token = SessionStore(path, Fernet(Fernet.generate_key()), clock=clock).create_session(SNAP)
    other = SessionStore(path, Fernet(Fernet.generate_key()), clock=clock)
    assert other.load_session(token) is None


def test_purge_expired(store, clock):
    old = store.create_session(SNAP)
    clock.advance(1800)
    fresh = store.create_session(SNAP)
    clock.advance(1800)
    assert store.purge_expired() == 1
    assert store.load_session(old) is None
    assert store.load_session(fresh) == SNAP


def test_fernet_from_secret_is_stable():
    a = fernet_from_secret("s3cret")
    b = fernet_from_secret("s3cret")
    assert b.decrypt(a.encrypt(b"x")) == b"x"


def test_cookie_signer():
    signer = CookieSigner("k1")
    value = signer.sign("tok")
    assert value != "tok"
    assert signer.unsign(value) == "tok"
    assert CookieSigner("k2").unsign(value) is None
    assert signer.unsign("garbage") is None
    assert signer.unsign(None) is None


def test_new_session_drops_abandoned_records(store, clock):
    for _ in range(5):
        store.create_session(SNAP)
    clock.advance(7200)
    live = store.create_session(SNAP)
    raw = yaml.safe_load(store.path.read_text(encoding="utf-8"))
    assert len(raw["sessions"]) == 1
    assert store.load_session(live) == SNAP
