from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable

from db import crud
from db.errors import ShopError
from utils.messages import CartChangedMessage, CatalogChangedMessage
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.modal_product_form import ProductFormModal

PRODUCT_COLUMNS = ["ID", "Name", "Description", "Price", "Stock", "Image"]


class ProductsScreen(BaseScreen):
    """
    Product listing. Customers add to cart; admins also create, edit and delete.
    """

    # only shown in the footer, the table handles enter itself
    BINDINGS = [
        Binding("enter", "noop", "Add to Cart", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-products")
        with Horizontal(id="div-admin-controls"):
            yield Button("New Product", id="btn-new", variant="success")
            yield Button("Edit", id="btn-edit")
            yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*PRODUCT_COLUMNS)

        self.query_one("#div-admin-controls").add_class("hidden")
        self.query_one(DataTable).focus()

    def action_noop(self) -> None:
        pass

    @on(ScreenResume)
    @on(CatalogChangedMessage)
    @work(exclusive=True, group="reload")
    async def reload_products(self) -> None:
        products = await crud.list_products()

        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [[p.id, p.name, p.desc, p.price, p.stock, p.image] for p in products]
        )

        # admin-only controls
        admin_controls = self.query_one("#div-admin-controls")
        if await crud.is_current_admin(self.app.state):
            admin_controls.remove_class("hidden")
        else:
            admin_controls.add_class("hidden")

    def selected_product_id(self) -> Optional[int]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        return table.get_row_at(table.cursor_row)[0]

    @on(DataTable.RowSelected)
    @work
    async def handle_add_to_cart(self) -> None:
        pid = self.selected_product_id()
        if pid is None:
            return
        try:
            line = await crud.add_to_cart(self.app.state, pid)
        except ShopError as e:
            self.notify(str(e), severity="error")
            return

        self.notify(f"Added to cart ({line.name} x{line.qty}).")
        self.app.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-new")
    @work
    async def handle_new(self) -> None:
        if await self.app.push_screen_wait(ProductFormModal()):
            self.post_message(CatalogChangedMessage())

    @on(Button.Pressed, "#btn-edit")
    @work
    async def handle_edit(self) -> None:
        pid = self.selected_product_id()
        product = await crud.get_product(pid) if pid is not None else None
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return

        if await self.app.push_screen_wait(ProductFormModal(product)):
            self.post_message(CatalogChangedMessage())

    @on(Button.Pressed, "#btn-delete")
    @work
    async def handle_delete(self) -> None:
        pid = self.selected_product_id()
        if pid is None:
            self.notify("Select a product first.", severity="warning")
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Delete product? Carts holding it keep their lines.",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return

        try:
            await crud.require_admin(self.app.state)
        except ShopError as e:
            self.notify(str(e), severity="error")
            return

        await crud.delete_product(pid)
        self.notify("Deleted.")
        self.post_message(CatalogChangedMessage())
