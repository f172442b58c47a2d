import pytest

from acquisitions.auth import PasswordHasher
from acquisitions.errors import HashingError, VerificationError


@pytest.mark.parametrize("password", ["secret1", "correct horse battery staple", "pässwörd-ü", "x" * 125])
def test_verify_matches_own_hash(hasher, password):
    digest = hasher.hash(password)
    assert digest != password
    assert hasher.verify(password, digest) is True


def test_verify_rejects_other_password(hasher):
    assert hasher.verify("secret1", hasher.hash("secret2")) is False


def test_hash_is_salted(hasher):
    assert hasher.hash("secret1") != hasher.hash("secret1")


def test_verify_malformed_digest_raises(hasher):
    with pytest.raises(VerificationError):
        hasher.verify("secret1", "not-a-real-digest")


def test_hash_rejects_non_string(hasher):
    with pytest.raises(HashingError):
        hasher.hash(None)


def test_dummy_verify_does_not_raise(hasher):
    assert hasher.dummy_verify("anything") is None


def test_custom_scheme():
    hasher = PasswordHasher(schemes=("pbkdf2_sha512",))
    digest = hasher.hash("secret1")
    assert digest.startswith("$pbkdf2-sha512$")
    assert hasher.verify("secret1", digest)
