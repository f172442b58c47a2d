"""Tests for UserStore against a real SQLite database."""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from acquisitions.errors import DuplicateEmailError, InternalError, NotFoundError, ValidationError
from acquisitions.models import User


def test_insert_hashes_password_and_lowercases_email(store, db_session, hasher):
    user = store.insert(name="Ann", email="Ann@x.com", password="secret1")

    assert user.email == "ann@x.com"
    assert user.role == "user"
    assert not hasattr(user, "password")

    row = db_session.query(User).filter(User.id == user.id).first()
    assert row.password != "secret1"
    assert hasher.verify("secret1", row.password)
    assert row.created_at is not None
    assert row.updated_at is not None


def test_find_by_id_never_returns_password(store):
    created = store.insert(name="Ann", email="ann@x.com", password="secret1")
    found = store.find_by_id(created.id)
    assert found is not None
    assert "password" not in found.model_dump()


def test_find_by_id_missing(store):
    assert store.find_by_id(12345) is None


def test_find_by_email_is_case_insensitive(store):
    store.insert(name="Ann", email="ann@x.com", password="secret1")
    assert store.find_by_email("ANN@X.COM").email == "ann@x.com"


def test_find_credentials_includes_hash(store, hasher):
    store.insert(name="Ann", email="ann@x.com", password="secret1")
    creds = store.find_credentials("ann@x.com")
    assert creds.email == "ann@x.com"
    assert hasher.verify("secret1", creds.password_hash)
    assert store.find_credentials("nobody@x.com") is None


def test_insert_duplicate_email(store):
    store.insert(name="Alpha", email="A@x.com", password="secret1")
    with pytest.raises(DuplicateEmailError):
        store.insert(name="Alpha", email="a@x.com", password="secret2")


def test_unique_constraint_is_authoritative(store, db_session, monkeypatch):
    """A concurrent insert that slips past the lookup still fails with DuplicateEmailError."""
    store.insert(name="First", email="race@x.com", password="secret1")
    monkeypatch.setattr(store, "_get_by_email", lambda email: None)

    with pytest.raises(DuplicateEmailError):
        store.insert(name="Second", email="race@x.com", password="secret2")

    assert db_session.query(User).filter(User.email == "race@x.com").count() == 1


def test_list_all(store):
    store.insert(name="One", email="one@x.com", password="secret1")
    store.insert(name="Two", email="two@x.com", password="secret1")
    assert [u.email for u in store.list_all()] == ["one@x.com", "two@x.com"]


def test_update_role_only(store):
    user = store.insert(name="Ann", email="ann@x.com", password="secret1")
    updated = store.update(user.id, {"role": "admin"})
    assert updated.role == "admin"
    assert updated.name == "Ann"
    assert updated.updated_at >= user.updated_at


def test_update_password_is_hashed(store, db_session, hasher):
    user = store.insert(name="Ann", email="ann@x.com", password="secret1")
    store.update(user.id, {"password": "secret2"})

    row = db_session.query(User).filter(User.id == user.id).first()
    db_session.refresh(row)
    assert row.password != "secret2"
    assert hasher.verify("secret2", row.password)
    assert not hasher.verify("secret1", row.password)


def test_update_empty_fields(store):
    user = store.insert(name="Ann", email="ann@x.com", password="secret1")
    with pytest.raises(ValidationError):
        store.update(user.id, {})


def test_update_ignores_unknown_and_blank_fields(store):
    user = store.insert(name="Ann", email="ann@x.com", password="secret1")
    with pytest.raises(ValidationError):
        store.update(user.id, {"is_admin": True, "name": "", "email": None})


def test_update_not_found(store):
    with pytest.raises(NotFoundError):
        store.update(999, {"name": "Nobody"})


def test_update_email_collision(store):
    store.insert(name="Ann", email="ann@x.com", password="secret1")
    bob = store.insert(name="Bob", email="bob@x.com", password="secret1")
    with pytest.raises(DuplicateEmailError):
        store.update(bob.id, {"email": "ANN@x.com"})


def test_update_email_to_own_address(store):
    ann = store.insert(name="Ann", email="ann@x.com", password="secret1")
    assert store.update(ann.id, {"email": "ann@x.com", "name": "Annie"}).name == "Annie"


def test_delete_twice(store):
    user = store.insert(name="Ann", email="ann@x.com", password="secret1")
    assert store.delete(user.id) is True
    with pytest.raises(NotFoundError):
        store.delete(user.id)
    assert store.find_by_id(user.id) is None


def test_storage_failure_becomes_internal_error(store, db_session, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with pytest.raises(InternalError):
        store.insert(name="Ann", email="ann@x.com", password="secret1")
