"""
Accounts and the signed-in session.

Credentials are kept in plaintext under the "credentials" key; this is a demo
store and must not be deployed as-is. Emails are stored and matched exactly
as entered.
"""

import logging
from typing import Optional

from codes import timestamp_id
from database import CREDENTIALS, CURRENT_USER, Repository
from errors import DuplicateEmailError, InvalidCredentialsError, StorageUnavailableError
from schemas import Credential, User

logger = logging.getLogger(__name__)


def _register(repo: Repository, credential: Credential) -> None:
    with repo.collection(CREDENTIALS) as rows:
        if any(row.get("email") == credential.email for row in rows):
            raise DuplicateEmailError(credential.email)
        rows.append(credential.to_store())


def _sign_in(repo: Repository, email: str, password: str) -> User:
    for row in repo.read(CREDENTIALS):
        if row.get("email") == email and row.get("password") == password:
            user = Credential(**row).public()
            break
    else:
        raise InvalidCredentialsError()
    repo.write(CURRENT_USER, user.to_store())
    return user


def _current_user(repo: Repository) -> Optional[User]:
    data = repo.read(CURRENT_USER)
    if not data:
        return None
    return User(**data)


async def register(repo: Repository, first_name: str, last_name: str, email: str, password: str) -> User:
    if not repo.available:
        logger.warning("register refused: no storage")
        raise StorageUnavailableError("Cannot register user without storage")
    await repo.pause("register")

    credential = Credential(
        id=timestamp_id(),
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=password,
    )
    await repo.run(_register, repo, credential)
    logger.info("Registered user %s", credential.id)
    return credential.public()


async def sign_in(repo: Repository, email: str, password: str) -> User:
    if not repo.available:
        logger.warning("sign_in refused: no storage")
        raise StorageUnavailableError("Cannot sign in user without storage")
    await repo.pause("sign_in")

    try:
        user = await repo.run(_sign_in, repo, email, password)
    except InvalidCredentialsError:
        logger.warning("Failed sign-in attempt")
        raise
    logger.info("User %s signed in", user.id)
    return user


async def get_current_user(repo: Repository) -> Optional[User]:
    if not repo.available:
        return None
    await repo.pause("get_current_user")
    return await repo.run(_current_user, repo)


async def sign_out(repo: Repository) -> None:
    if not repo.available:
        return
    await repo.pause("sign_out")
    await repo.run(repo.remove, CURRENT_USER)
