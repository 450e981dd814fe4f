from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when a user logged in, so the screens can refresh
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a line is added, changed or removed, or the cart is checked out.
    Post it at App level when sending from outside CartScreen.
    """

    bubble = True


class CatalogChangedMessage(Message):
    """
    Fired after an admin created, edited or deleted a product
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
