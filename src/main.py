from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db import crud
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import SessionContext
from views.scr_cart import CartScreen
from views.scr_login import LoginScreen
from views.scr_products import ProductsScreen

_logger = get_logger(__name__)


class ShopApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "products": ProductsScreen,
        "cart": CartScreen,
    }

    MENU = {"products": "Products", "cart": "Cart"}

    CSS_PATH = "styles/shop.tcss"

    state: SessionContext

    def __init__(self, state: SessionContext | None = None):
        super().__init__()
        self.state = state or SessionContext()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        await crud.bootstrap()
        await self.state.restore()
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await crud.logout(self.state)
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        # the session is kept so the next start resumes it
        self.exit()

    @work
    async def main_flow(self):
        if self.state.is_logged_in and await crud.current_user(self.state) is None:
            _logger.warning(f"Saved session for unknown user {self.state.email}, dropped.")
            await self.state.end()

        if not self.state.is_logged_in:
            await self.push_screen_wait(LoginScreen())

        self.post_message(ModeSwitchedMessage(self.current_mode, "products"))
        await self.switch_mode("products")


def run() -> None:
    ShopApp().run()


if __name__ == "__main__":
    run()
