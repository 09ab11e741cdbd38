import asyncio

import pytest

from auth import get_current_user, register, sign_in, sign_out
from database import CREDENTIALS
from errors import DuplicateEmailError, InvalidCredentialsError, StorageUnavailableError


def run(coro):
    return asyncio.run(coro)


def test_register_strips_password(repo):
    user = run(register(repo, "Ada", "Lovelace", "ada@example.com", "secret"))
    assert user.email == "ada@example.com"
    assert "password" not in user.to_store()
    assert repo.read(CREDENTIALS)[0]["password"] == "secret"


def test_duplicate_email_is_rejected(repo):
    first = run(register(repo, "Ada", "Lovelace", "ada@example.com", "secret"))
    with pytest.raises(DuplicateEmailError):
        run(register(repo, "Other", "Person", "ada@example.com", "different"))
    assert len(repo.read(CREDENTIALS)) == 1
    assert run(sign_in(repo, "ada@example.com", "secret")).id == first.id


def test_sign_in_sets_current_user(repo):
    user = run(register(repo, "Ada", "Lovelace", "ada@example.com", "secret"))
    assert run(get_current_user(repo)) is None
    run(sign_in(repo, "ada@example.com", "secret"))
    current = run(get_current_user(repo))
    assert current == user


def test_wrong_password_leaves_session_unset(repo):
    run(register(repo, "Ada", "Lovelace", "ada@example.com", "secret"))
    with pytest.raises(InvalidCredentialsError) as wrong_password:
        run(sign_in(repo, "ada@example.com", "nope"))
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        run(sign_in(repo, "bob@example.com", "secret"))
    assert str(wrong_password.value) == str(unknown_email.value)
    assert run(get_current_user(repo)) is None


def test_sign_out_clears_session(repo):
    run(register(repo, "Ada", "Lovelace", "ada@example.com", "secret"))
    run(sign_in(repo, "ada@example.com", "secret"))
    run(sign_out(repo))
    assert run(get_current_user(repo)) is None


def test_without_storage(offline_repo):
    with pytest.raises(StorageUnavailableError):
        run(register(offline_repo, "Ada", "Lovelace", "ada@example.com", "secret"))
    with pytest.raises(StorageUnavailableError):
        run(sign_in(offline_repo, "ada@example.com", "secret"))
    assert run(get_current_user(offline_repo)) is None
    run(sign_out(offline_repo))


def test_email_is_kept_exactly_as_registered(repo):
    user = run(register(repo, "Ada", "Lovelace", "Ada@Example.COM", "secret"))
    assert user.email == "Ada@Example.COM"
    assert repo.read(CREDENTIALS)[0]["email"] == "Ada@Example.COM"
    assert run(sign_in(repo, "Ada@Example.COM", "secret")).id == user.id
    with pytest.raises(InvalidCredentialsError):
        run(sign_in(repo, "ada@example.com", "secret"))


def test_invalid_email_is_rejected(repo):
    with pytest.raises(ValueError):
        run(register(repo, "Ada", "Lovelace", "not-an-email", "secret"))
    assert repo.read(CREDENTIALS) == []
