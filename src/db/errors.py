# user-facing failures raised by db.crud; none of them is fatal to the app


class ShopError(Exception):
    """Base class, screens catch this and show the message."""


class ValidationError(ShopError, ValueError):
    """Missing or malformed required fields."""


class DuplicateEmail(ShopError):
    pass


class InvalidCredentials(ShopError):
    pass


class NotFound(ShopError, LookupError):
    pass


class ProductNotFound(NotFound):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found.")
        self.product_id = product_id


class NoSession(ShopError):
    """Action requires a logged-in user."""

    def __init__(self, message: str = "Please login first."):
        super().__init__(message)


class AdminRequired(ShopError):
    def __init__(self, message: str = "Admin access only."):
        super().__init__(message)
