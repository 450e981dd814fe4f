# src/db/crud.py
from __future__ import annotations

import dataclasses
import math
import time
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Tuple

from db import store
from db.errors import (
    AdminRequired,
    DuplicateEmail,
    InvalidCredentials,
    NoSession,
    ProductNotFound,
    ValidationError,
)
from db.models import CartLine, Number, Product, ProductDraft, User
from utils.logger import get_logger
from utils.pure import clean_image_path

if TYPE_CHECKING:
    from utils.state import SessionContext

_logger = get_logger(__name__)

ADMIN_EMAIL = "admin@shop.com"
ADMIN_PASSWORD = "admin123"
MIN_PASSWORD_LENGTH = 6

DEFAULT_PRODUCTS = [
    ProductDraft(
        "Wireless Headphones",
        "Comfortable over-ear Bluetooth headphones",
        1499,
        10,
        "images/headphones.png",
    ),
    ProductDraft("Smart Watch", "Track fitness & notifications", 2499, 5, "images/watch.png"),
    ProductDraft("Classic Backpack", "Durable daily backpack", 999, 12, "images/backpack.png"),
]

# highest product id handed out by this process
_last_product_id = 0


def _to_int(val) -> Optional[int]:
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def parse_quantity(val: Any) -> Optional[int]:
    """Quantity parsing: 3, 3.0 and "3" are fine; 0, -1, 2.5, "x" and True are not."""
    if isinstance(val, bool):
        return None
    if isinstance(val, float):
        if not val.is_integer():
            return None
        val = int(val)
    elif isinstance(val, str):
        val = _to_int(val.strip())
    elif not isinstance(val, int):
        return None
    if val is None or val < 1:
        return None
    return val


def _to_number(val: Any) -> Optional[Number]:
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
    try:
        num = float(val)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return int(num) if num.is_integer() else num


def _next_product_id(existing: Iterable[int]) -> int:
    """Millisecond timestamp, bumped so it never repeats and stays above existing ids."""
    global _last_product_id
    candidate = max(
        int(time.time() * 1000),
        _last_product_id + 1,
        max(existing, default=0) + 1,
    )
    _last_product_id = candidate
    return candidate


def _require_session(session: SessionContext) -> str:
    if not session.is_logged_in:
        raise NoSession()
    return session.email


# ---------------------------
# Bootstrap
# ---------------------------


async def ensure_admin() -> bool:
    """Create the built-in admin account unless it exists. True if created."""
    users = await store.users.load()
    if any(u.email == ADMIN_EMAIL for u in users):
        return False
    users.append(
        User(
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            first_name="Admin",
            last_name="User",
            is_admin=True,
        )
    )
    await store.users.save(users)
    _logger.info(f"Created built-in admin account {ADMIN_EMAIL}.")
    return True


async def migrate_product_images() -> int:
    """
    Normalize every stored product image path, once at startup.
    Only writes when something changed. Returns the number of products updated.
    """
    products = await store.products.load()
    migrated = [
        dataclasses.replace(p, image=clean_image_path(p.image)) for p in products
    ]
    changed = sum(1 for old, new in zip(products, migrated) if old.image != new.image)
    if changed:
        await store.products.save(migrated)
        _logger.info(f"Normalized image paths of {changed} product(s).")
    return changed


async def seed_products() -> List[Product]:
    """Fill an empty catalog with the example products. Returns what was added."""
    if await store.products.load():
        return []
    seeded: List[Product] = []
    for draft in DEFAULT_PRODUCTS:
        name, desc, price, stock, image = _validate_draft(draft)
        pid = _next_product_id(p.id for p in seeded)
        seeded.append(Product(pid, name, desc, price, stock, image))
    await store.products.save(seeded)
    _logger.info(f"Seeded catalog with {len(seeded)} example products.")
    return seeded


async def bootstrap() -> None:
    """First-run setup; safe to call on every startup."""
    await ensure_admin()
    await migrate_product_images()
    await seed_products()


# ---------------------------
# Accounts
# ---------------------------


async def get_user(email: str) -> Optional[User]:
    """Return the User registered under email (any case), or None."""
    email = (email or "").strip().lower()
    for user in await store.users.load():
        if user.email.lower() == email:
            return user
    return None


async def email_available(email: str) -> bool:
    """True if no user already registered with the given email."""
    return await get_user(email) is None


async def register(
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    is_admin: bool = False,
) -> User:
    """
    Create a new account and return it.
    Raises ValidationError on missing fields or a short password,
    DuplicateEmail if the email is taken.
    """
    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    email = (email or "").strip().lower()
    password = password or ""

    if not first_name or not last_name or not email or not password:
        raise ValidationError("Please fill in all fields.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )

    users = await store.users.load()
    if any(u.email.lower() == email for u in users):
        raise DuplicateEmail(f"Email {email} is already registered.")

    user = User(email, password, first_name, last_name, bool(is_admin))
    users.append(user)
    await store.users.save(users)
    _logger.info(f"Registered {'admin' if user.is_admin else 'customer'} {email}.")
    return user


async def login(session: SessionContext, email: str, password: str) -> User:
    """
    Start a session for the matching user.
    Email is compared case-insensitively, password exactly.
    """
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationError("Enter email & password.")

    user = await get_user(email)
    if user is None or user.password != password:
        _logger.info(f"Failed login attempt for {email}.")
        raise InvalidCredentials("Invalid credentials.")

    await session.start(user.email)
    _logger.info(f"{user.email} logged in.")
    return user


async def logout(session: SessionContext) -> None:
    if session.email:
        _logger.info(f"{session.email} logged out.")
    await session.end()


async def current_user(session: SessionContext) -> Optional[User]:
    if not session.is_logged_in:
        return None
    return await get_user(session.email)


async def is_current_admin(session: SessionContext) -> bool:
    user = await current_user(session)
    return bool(user and user.is_admin)


async def require_admin(session: SessionContext) -> User:
    user = await current_user(session)
    if not user or not user.is_admin:
        raise AdminRequired()
    return user


# ---------------------------
# Products
# ---------------------------


def _validate_draft(draft: ProductDraft) -> Tuple[str, str, Number, Number, str]:
    name = (draft.name or "").strip()
    if not name:
        raise ValidationError("Product name is required.")

    price = _to_number(draft.price)
    if price is None or price < 0:
        raise ValidationError("Price must be a number, 0 or more.")

    stock = _to_number(draft.stock)
    if stock is None or stock < 0:
        raise ValidationError("Stock must be a number, 0 or more.")

    return name, (draft.desc or "").strip(), price, stock, clean_image_path(draft.image)


async def list_products() -> List[Product]:
    return await store.products.load()


async def get_product(product_id: int) -> Optional[Product]:
    """Return the product with the given id, or None if it does not exist (anymore)."""
    for product in await store.products.load():
        if product.id == product_id:
            return product
    return None


async def create_product(draft: ProductDraft) -> Product:
    name, desc, price, stock, image = _validate_draft(draft)

    products = await store.products.load()
    product = Product(
        id=_next_product_id(p.id for p in products),
        name=name,
        desc=desc,
        price=price,
        stock=stock,
        image=image,
    )
    products.append(product)
    await store.products.save(products)
    _logger.info(f"Created product {product.id} ({product.name}).")
    return product


async def update_product(product_id: int, draft: ProductDraft) -> Product:
    """Replace the product's fields in place; the id and list position are kept."""
    products = await store.products.load()
    idx = next((i for i, p in enumerate(products) if p.id == product_id), None)
    if idx is None:
        raise ProductNotFound(product_id)

    name, desc, price, stock, image = _validate_draft(draft)
    products[idx] = Product(product_id, name, desc, price, stock, image)
    await store.products.save(products)
    _logger.info(f"Updated product {product_id} ({name}).")
    return products[idx]


async def delete_product(product_id: int) -> bool:
    """
    Remove the product if present. Deleting an unknown id is a no-op.
    Cart lines pointing at it are left as they are.
    """
    products = await store.products.load()
    remaining = [p for p in products if p.id != product_id]
    if len(remaining) == len(products):
        return False
    await store.products.save(remaining)
    _logger.info(f"Deleted product {product_id}.")
    return True


# ---------------------------
# Cart
# ---------------------------


async def list_cart(session: SessionContext) -> List[CartLine]:
    if not session.is_logged_in:
        return []
    return await store.cart(session.email).load()


async def list_cart_with_products(
    session: SessionContext,
) -> List[Tuple[CartLine, Optional[Product]]]:
    """Pair each cart line with its current product, None if it was deleted."""
    lines = await list_cart(session)
    if not lines:
        return []
    products = {p.id: p for p in await store.products.load()}
    return [(line, products.get(line.id)) for line in lines]


async def add_to_cart(session: SessionContext, product_id: int, qty: Any = 1) -> CartLine:
    """
    Add qty of a product to the current user's cart.
    An existing line is bumped; a new line snapshots the product's name and price.
    """
    email = _require_session(session)
    amount = parse_quantity(qty)
    if amount is None:
        raise ValidationError("Quantity must be a positive whole number.")

    product = await get_product(product_id)
    if product is None:
        raise ProductNotFound(product_id)

    cart = store.cart(email)
    lines = await cart.load()
    for i, line in enumerate(lines):
        if line.id == product_id:
            lines[i] = dataclasses.replace(line, qty=line.qty + amount)
            break
    else:
        i = len(lines)
        lines.append(CartLine(product.id, product.name, product.price, amount))
    await cart.save(lines)
    return lines[i]


async def update_cart_qty(session: SessionContext, product_id: int, qty: Any) -> bool:
    """Set a line's quantity. Invalid quantities and missing lines are ignored."""
    amount = parse_quantity(qty)
    if amount is None or not session.is_logged_in:
        return False

    cart = store.cart(session.email)
    lines = await cart.load()
    if not any(line.id == product_id for line in lines):
        return False
    await cart.save(
        [
            dataclasses.replace(line, qty=amount) if line.id == product_id else line
            for line in lines
        ]
    )
    return True


async def remove_from_cart(session: SessionContext, product_id: int) -> bool:
    if not session.is_logged_in:
        return False

    cart = store.cart(session.email)
    lines = await cart.load()
    remaining = [line for line in lines if line.id != product_id]
    if len(remaining) == len(lines):
        return False
    await cart.save(remaining)
    return True


async def clear_cart(session: SessionContext) -> None:
    if session.is_logged_in:
        await store.cart(session.email).save([])


async def checkout(session: SessionContext) -> List[CartLine]:
    """
    Demo checkout: empties the cart and returns the lines that were in it.
    No payment, stock change or order record.
    """
    email = _require_session(session)
    cart = store.cart(email)
    lines = await cart.load()
    await cart.save([])
    _logger.info(
        f"{email} checked out {len(lines)} line(s), total {sum(line.subtotal for line in lines)}."
    )
    return lines


async def cart_total(session: SessionContext) -> Number:
    return sum(line.subtotal for line in await list_cart(session))


async def cart_count(session: SessionContext) -> int:
    """Number of items in the cart, counting quantities."""
    return sum(line.qty for line in await list_cart(session))
