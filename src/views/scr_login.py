from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, Switch, TabbedContent, TabPane

from db import crud
from db.errors import ShopError
from utils.messages import UserLoginMessage
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Login and sign up. Dismisses once the session has been started.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("First name")
                    yield Input(placeholder="Jane", id="input-reg-first")
                    yield Label("Last name")
                    yield Input(placeholder="Doe", id="input-reg-last")
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-reg-email")
                    yield Label("Password (min 6 chars)")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-pwd"
                    )
                    with Horizontal(id="div-reg-admin"):
                        yield Switch(value=False, id="switch-reg-admin")
                        yield Label("Admin account")
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key != "enter":
            return
        if self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        elif self.focused == self.query_one("#input-reg-pwd"):
            self.handle_registration_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value
        pwd = self.query_one("#input-login-pwd", Input).value

        try:
            user = await crud.login(self.app.state, email, pwd)
        except ShopError as e:
            self.notify(str(e), severity="error")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return

        self.notify(f"Hello {user.first_name}!")
        self.app.post_message(UserLoginMessage())
        self.dismiss()

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        email = self.query_one("#input-reg-email", Input).value
        pwd = self.query_one("#input-reg-pwd", Input).value

        try:
            user = await crud.register(
                self.query_one("#input-reg-first", Input).value,
                self.query_one("#input-reg-last", Input).value,
                email,
                pwd,
                self.query_one("#switch-reg-admin", Switch).value,
            )
        except ShopError as e:
            self.notify(str(e), severity="error")
            return

        await self.app.push_screen_wait(
            DialogModal(f"Registered successfully as {user.email}. Please login.")
        )

        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = user.email
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        input_login_pwd.value = pwd
        input_login_pwd.focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
