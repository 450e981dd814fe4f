"""
Record store: named JSON collections on top of the key-value table.

Keys:
  - os_users            list of users
  - os_products         list of products
  - os_current_user     email of the logged-in user (plain string)
  - os_cart_<email>     cart lines of one user, email URL-encoded

Every save overwrites the whole value. Nothing here locks; two processes
sharing the same database file race and the last write wins.
"""

from __future__ import annotations

import json
from typing import Callable, Dict, Generic, List, Optional, Sequence, TypeVar
from urllib.parse import quote

from db import database
from db.models import CartLine, Product, User
from utils.logger import get_logger

_logger = get_logger(__name__)

USERS_KEY = "os_users"
PRODUCTS_KEY = "os_products"
CURRENT_USER_KEY = "os_current_user"
CART_PREFIX = "os_cart_"

# same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "!~*'()"

T = TypeVar("T", User, Product, CartLine)


class Collection(Generic[T]):
    """One key holding a JSON array of records of a single model type."""

    def __init__(self, key: str, from_record: Callable[[Dict], T]):
        self.key = key
        self._from_record = from_record

    async def load(self) -> List[T]:
        raw = await database.get_item(self.key)
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning(f"Unreadable value under '{self.key}', treating as empty.")
            return []
        if not isinstance(data, list):
            _logger.warning(f"Value under '{self.key}' is not a list, treating as empty.")
            return []

        records: List[T] = []
        for entry in data:
            if not isinstance(entry, dict):
                _logger.warning(f"Skipping malformed entry in '{self.key}': {entry!r}")
                continue
            try:
                records.append(self._from_record(entry))
            except (KeyError, TypeError, ValueError):
                _logger.warning(f"Skipping malformed entry in '{self.key}': {entry!r}")
        return records

    async def save(self, records: Sequence[T]) -> None:
        payload = json.dumps([r.to_record() for r in records], ensure_ascii=False)
        await database.set_item(self.key, payload)


users: Collection[User] = Collection(USERS_KEY, User.from_record)
products: Collection[Product] = Collection(PRODUCTS_KEY, Product.from_record)


def cart_key(email: str) -> str:
    return CART_PREFIX + quote(email, safe=_URI_COMPONENT_SAFE)


def cart(email: str) -> Collection[CartLine]:
    """Cart collection owned by the given email."""
    return Collection(cart_key(email), CartLine.from_record)


# ---------------------------
# Session slot
# ---------------------------


async def get_current_email() -> Optional[str]:
    return await database.get_item(CURRENT_USER_KEY) or None


async def set_current_email(email: str) -> None:
    if not email:
        await clear_current_email()
        return
    await database.set_item(CURRENT_USER_KEY, email)


async def clear_current_email() -> None:
    await database.remove_item(CURRENT_USER_KEY)
