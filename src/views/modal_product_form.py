from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label

from db import crud
from db.errors import ShopError
from db.models import Product, ProductDraft


class ProductFormModal(ModalScreen[Optional[Product]]):
    """
    Create a product, or edit the one passed in.
    Returns the saved product, None if cancelled.
    """

    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        self._product = product

    def compose(self) -> ComposeResult:
        title = f"Edit Product {self._product.id}" if self._product else "New Product"
        with Vertical(id="div-product-form"):
            yield Label(title, id="label-form-title")
            yield Label("Name")
            yield Input(id="input-prod-name")
            yield Label("Description")
            yield Input(id="input-prod-desc")
            with Horizontal():
                with Vertical():
                    yield Label("Price")
                    yield Input(
                        id="input-prod-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Stock")
                    yield Input(
                        id="input-prod-stock",
                        type="number",
                        validators=[Number(minimum=0)],
                    )
            yield Label("Image path or URL")
            yield Input(placeholder="images/headphones.png", id="input-prod-image")
            with Horizontal(id="div-form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        if self._product:
            self.query_one("#input-prod-name", Input).value = self._product.name
            self.query_one("#input-prod-desc", Input).value = self._product.desc
            self.query_one("#input-prod-price", Input).value = str(self._product.price)
            self.query_one("#input-prod-stock", Input).value = str(self._product.stock)
            self.query_one("#input-prod-image", Input).value = self._product.image
        self.query_one("#input-prod-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        draft = ProductDraft(
            name=self.query_one("#input-prod-name", Input).value,
            desc=self.query_one("#input-prod-desc", Input).value,
            price=self.query_one("#input-prod-price", Input).value,
            stock=self.query_one("#input-prod-stock", Input).value,
            image=self.query_one("#input-prod-image", Input).value,
        )
        try:
            await crud.require_admin(self.app.state)
            if self._product:
                product = await crud.update_product(self._product.id, draft)
            else:
                product = await crud.create_product(draft)
        except ShopError as e:
            self.notify(str(e), severity="error")
            return

        self.notify(f"Saved {product.name}.")
        self.dismiss(product)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self):
        self.dismiss(None)
