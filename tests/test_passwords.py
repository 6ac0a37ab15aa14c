import pytest

from portal.auth.passwords import PasswordHasher, hash_password, verify_password


@pytest.fixture()
def hasher():
    return PasswordHasher(time_cost=1, memory_cost=1024)


@pytest.mark.parametrize("plain", ["secret", "hunter22", "ünïcødé-pass", "x" * 30])
def test_hash_is_not_plaintext_and_verifies(hasher, plain):
    digest = hasher.hash(plain)
    assert digest != plain
    assert plain not in digest
    assert hasher.verify(plain, digest)


def test_wrong_password_is_rejected(hasher):
    digest = hasher.hash("secret")
    assert not hasher.verify("secreT", digest)
    assert not hasher.verify("secret ", digest)


def test_salt_differs_per_call(hasher):
    assert hasher.hash("secret") != hasher.hash("secret")


def test_empty_inputs(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")
    assert not hasher.verify("", hasher.hash("secret"))
    assert not hasher.verify("secret", "")


def test_malformed_digest_does_not_raise(hasher):
    assert not hasher.verify("secret", "not-an-argon2-hash")


def test_module_helpers_roundtrip():
    digest = hash_password("secret")
    assert verify_password("secret", digest)
    assert not verify_password("other", digest)
