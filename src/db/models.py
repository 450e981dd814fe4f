# provide dataclass models, plus their stored (JSON) record form

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Union

Number = Union[int, float]


def _compact(value: Number) -> Number:
    """Store integral floats as ints so records round-trip exactly."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _stored_number(value: Any) -> Number:
    """Price or stock read back from storage; ValueError unless a finite number >= 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"not a number: {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"out of range: {value!r}")
    return value


def _stored_qty(value: Any) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"bad quantity: {value!r}")
    return value


@dataclass(frozen=True)
class User:
    email: str
    password: str
    first_name: str
    last_name: str
    is_admin: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_record(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "password": self.password,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "isAdmin": self.is_admin,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> User:
        return cls(
            email=str(record.get("email", "")),
            password=str(record.get("password", "")),
            first_name=str(record.get("firstName", "")),
            last_name=str(record.get("lastName", "")),
            is_admin=bool(record.get("isAdmin", False)),
        )


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    desc: str
    price: Number
    stock: Number
    image: str  # normalized, see utils.pure.clean_image_path

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "desc": self.desc,
            "price": _compact(self.price),
            "stock": _compact(self.stock),
            "image": self.image,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Product:
        return cls(
            id=int(record["id"]),
            name=str(record.get("name", "")),
            desc=str(record.get("desc", "") or ""),
            price=_stored_number(record.get("price", 0)),
            stock=_stored_number(record.get("stock", 0)),
            image=str(record.get("image", "") or ""),
        )


@dataclass(frozen=True)
class ProductDraft:
    """Unvalidated product form input; price and stock may still be strings."""

    name: str
    desc: str = ""
    price: Any = None
    stock: Any = None
    image: str = ""


@dataclass(frozen=True)
class CartLine:
    id: int  # product id, not enforced: the product may since have been deleted
    name: str  # snapshot at add-time
    price: Number  # snapshot at add-time
    qty: int

    @property
    def subtotal(self) -> Number:
        return self.price * self.qty

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": _compact(self.price),
            "qty": self.qty,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> CartLine:
        return cls(
            id=int(record["id"]),
            name=str(record.get("name", "")),
            price=_stored_number(record.get("price", 0)),
            qty=_stored_qty(record.get("qty", 1)),
        )
