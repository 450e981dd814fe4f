from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, Rule
from textual.widgets.data_table import RowDoesNotExist

from db import crud
from db.errors import ShopError
from utils.messages import CartChangedMessage, ModeSwitchedMessage
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal

CART_COLUMNS = ["ID", "Product", "Unit Price", "Qty", "Subtotal", "Note"]


class CartScreen(BaseScreen):
    """
    Cart lines of the logged-in user, with quantity edits and checkout.
    Prices are the ones captured when the item was added.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-cart")
        yield Label("Total: 0", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-qty"):
            yield Input(
                placeholder="Qty",
                id="input-qty",
                type="integer",
                validators=[Number(minimum=1)],
            )
            yield Button("Set Qty", id="btn-set-qty")
            yield Button("Remove", id="btn-remove", variant="warning")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Refresh", id="btn-refresh")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*CART_COLUMNS)

    # posting CartChangedMessage from another screen does not reach this one,
    # ScreenResume covers coming back from the products screen
    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="reload")
    async def handle_cart_change(self):
        lines = await crud.list_cart_with_products(self.app.state)

        table = self.query_one(DataTable)
        table.clear()
        for line, product in lines:
            note = "no longer available" if product is None else ""
            table.add_row(line.id, line.name, line.price, line.qty, line.subtotal, note)

        total = await crud.cart_total(self.app.state)
        self.query_one("#label-cart-total", Label).update(f"Total: {total}")

    def selected_product_id(self) -> Optional[int]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        return table.get_row_at(table.cursor_row)[0]

    @on(DataTable.RowHighlighted)
    def handle_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        try:
            row = event.data_table.get_row(event.row_key)
        except RowDoesNotExist:  # table was reloaded meanwhile
            return
        self.query_one("#input-qty", Input).value = str(row[3])

    @on(Button.Pressed, "#btn-set-qty")
    async def handle_set_qty(self) -> None:
        pid = self.selected_product_id()
        qty_input = self.query_one("#input-qty", Input)
        if pid is None:
            self.notify("Cart is empty.", severity="warning")
            return

        qty = crud.parse_quantity(qty_input.value)
        if qty is None:
            qty_input.add_class("-invalid")
            qty_input.focus()
            self.notify("Quantity must be a whole number, 1 or more.", severity="error")
            return

        if not await crud.update_cart_qty(self.app.state, pid, qty):
            # line removed or session ended elsewhere
            self.notify("Item is no longer in the cart.", severity="warning")
            self.post_message(CartChangedMessage())
            return

        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-remove")
    @work
    async def handle_remove_item(self):
        pid = self.selected_product_id()
        if pid is None:
            return

        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            await crud.remove_from_cart(self.app.state, pid)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")

    @on(Button.Pressed, "#btn-clear-cart")
    @work
    async def handle_clear_cart(self) -> None:
        if not await crud.list_cart(self.app.state):
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            await crud.clear_cart(self.app.state)
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work
    async def handle_checkout(self) -> None:
        if not await crud.list_cart(self.app.state):
            self.app.notify("Cart is empty.", severity="warning")
            return

        total = await crud.cart_total(self.app.state)
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Checkout {total}? (demo, nothing is charged)",
                primary_text="Checkout",
                secondary_text="Go Back",
                tone="positive",
            )
        ):
            return

        try:
            await crud.checkout(self.app.state)
        except ShopError as e:
            self.notify(str(e), severity="error")
            return

        self.notify("Checkout successful (demo). Thank you!")
        self.post_message(CartChangedMessage())
