from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView

from db import crud
from utils.messages import ModeSwitchedMessage, UserLoginMessage, UserLogoutMessage
from views.modal_dialog import DialogModal, QuitDialogModal

CART_COUNT_REFRESH_SECONDS = 1.0


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Label("", id="label-userinfo")
        yield Label("Cart: 0 item(s)", id="label-cart-count")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in self.app.MENU.items()]
        )
        self.highlight_item(self.init_mode)

        # read-only tick, overlapping runs are harmless
        self.set_interval(CART_COUNT_REFRESH_SECONDS, self.refresh_info)
        self.refresh_info()

    @work(exclusive=True, group="refresh")
    async def refresh_info(self) -> None:
        """Re-read session user and cart count."""
        user = await crud.current_user(self.app.state)
        if user:
            role = "Admin" if user.is_admin else "Customer"
            info = f"{user.full_name}\n{user.email}\n{role}"
        else:
            info = "Not logged in"
        self.query_one("#label-userinfo", Label).update(info)

        count = await crud.cart_count(self.app.state)
        self.query_one("#label-cart-count", Label).update(f"Cart: {count} item(s)")

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure title and sidebar of the screen
        """
        self.app.title = "Online Shop"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.MENU.get(k, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(UserLoginMessage)
    def handle_user_login(self):
        self.refresh()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
