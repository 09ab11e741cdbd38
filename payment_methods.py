import logging
from typing import Any, Dict, List, Optional

from codes import timestamp_id
from database import PAYMENT_METHODS, Repository
from errors import StorageUnavailableError
from schemas import PaymentMethod, PaymentMethodCreate, PaymentMethodUpdate

logger = logging.getLogger(__name__)

CARD_TYPES = ("credit", "debit")


def mask_card_number(card_number: str) -> str:
    return f"**** **** **** {card_number[-4:]}"


def _save(rows: List[Dict[str, Any]], method: PaymentMethod) -> None:
    """Insert or replace a row, keeping at most one default per user."""
    if method.is_default:
        for row in rows:
            if row.get("userId") == method.user_id and row.get("id") != method.id:
                row["isDefault"] = False

    record = method.to_store()
    for index, row in enumerate(rows):
        if row.get("id") == method.id:
            rows[index] = record
            return
    rows.append(record)


def _add(repo: Repository, method: PaymentMethod) -> None:
    with repo.collection(PAYMENT_METHODS) as rows:
        _save(rows, method)


def _find(repo: Repository, payment_method_id: str) -> Optional[PaymentMethod]:
    for row in repo.read(PAYMENT_METHODS):
        if row.get("id") == payment_method_id:
            return PaymentMethod(**row)
    return None


def _update(repo: Repository, payment_method_id: str, updates: PaymentMethodUpdate) -> Optional[PaymentMethod]:
    # Explicit nulls mean "leave as is"; none of these fields can be cleared
    changes = updates.model_dump(exclude_unset=True, exclude_none=True)
    with repo.collection(PAYMENT_METHODS) as rows:
        existing = next((row for row in rows if row.get("id") == payment_method_id), None)
        if existing is None:
            return None
        method = PaymentMethod(**{**PaymentMethod(**existing).model_dump(), **changes})
        if "card_number" in changes and method.type in CARD_TYPES:
            method.card_number = mask_card_number(method.card_number)
        _save(rows, method)
    return method


def _remove(repo: Repository, payment_method_id: str) -> bool:
    with repo.collection(PAYMENT_METHODS) as rows:
        for index, row in enumerate(rows):
            if row.get("id") == payment_method_id:
                del rows[index]
                return True
    return False


def _set_default(repo: Repository, user_id: str, payment_method_id: str) -> bool:
    with repo.collection(PAYMENT_METHODS) as rows:
        owned = [row for row in rows if row.get("userId") == user_id]
        if not any(row.get("id") == payment_method_id for row in owned):
            return False
        for row in owned:
            row["isDefault"] = row.get("id") == payment_method_id
    return True


async def add_payment_method(repo: Repository, data: PaymentMethodCreate) -> PaymentMethod:
    if not repo.available:
        logger.warning("add_payment_method refused: no storage")
        raise StorageUnavailableError("Cannot add payment method without storage")
    await repo.pause("add_payment_method")

    method = PaymentMethod(**data.model_dump(), id=timestamp_id("pm-"))
    if method.type in CARD_TYPES:
        method.card_number = mask_card_number(method.card_number)
    await repo.run(_add, repo, method)

    logger.info("Added %s payment method %s for user %s", method.type, method.id, method.user_id)
    return method


async def get_user_payment_methods(repo: Repository, user_id: str) -> List[PaymentMethod]:
    if not repo.available:
        return []
    await repo.pause("get_user_payment_methods")
    rows = await repo.run(repo.read, PAYMENT_METHODS)
    return [PaymentMethod(**row) for row in rows if row.get("userId") == user_id]


async def get_payment_method(repo: Repository, payment_method_id: str) -> Optional[PaymentMethod]:
    if not repo.available:
        return None
    await repo.pause("get_payment_method")
    return await repo.run(_find, repo, payment_method_id)


async def update_payment_method(
    repo: Repository, payment_method_id: str, updates: PaymentMethodUpdate
) -> Optional[PaymentMethod]:
    if not repo.available:
        return None
    await repo.pause("update_payment_method")

    method = await repo.run(_update, repo, payment_method_id, updates)
    if method is not None:
        logger.info("Updated payment method %s", payment_method_id)
    return method


async def remove_payment_method(repo: Repository, payment_method_id: str) -> bool:
    if not repo.available:
        return False
    await repo.pause("remove_payment_method")

    removed = await repo.run(_remove, repo, payment_method_id)
    if removed:
        logger.info("Removed payment method %s", payment_method_id)
    return removed


async def set_default_payment_method(repo: Repository, user_id: str, payment_method_id: str) -> bool:
    if not repo.available:
        return False
    await repo.pause("set_default_payment_method")

    changed = await repo.run(_set_default, repo, user_id, payment_method_id)
    if changed:
        logger.info("Payment method %s is now the default for user %s", payment_method_id, user_id)
    return changed
