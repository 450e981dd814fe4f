import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from db import store  # noqa: E402
from db.models import CartLine, Product, User  # noqa: E402
from utils.state import SessionContext  # noqa: E402


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "nested", "test.sqlite")
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- raw key-value ----------

    async def test_key_value_primitives(self):
        self.assertIsNone(await db_database.get_item("missing"))
        await db_database.set_item("k", "v1")
        await db_database.set_item("k", "v2")
        self.assertEqual(await db_database.get_item("k"), "v2")
        await db_database.remove_item("k")
        self.assertIsNone(await db_database.get_item("k"))
        # removing twice is fine
        await db_database.remove_item("k")
        self.assertTrue(os.path.exists(self.db_path))

    # ---------- collections ----------

    async def test_missing_collection_loads_empty(self):
        self.assertEqual(await store.users.load(), [])
        self.assertEqual(await store.products.load(), [])
        self.assertEqual(await store.cart("nobody@example.com").load(), [])

    async def test_save_overwrites(self):
        alice = User("alice@example.com", "secret1", "Alice", "A")
        bob = User("bob@example.com", "secret2", "Bob", "B", is_admin=True)
        await store.users.save([alice, bob])
        self.assertEqual(await store.users.load(), [alice, bob])

        await store.users.save([bob])
        self.assertEqual(await store.users.load(), [bob])

        await store.users.save([])
        self.assertEqual(await store.users.load(), [])

    async def test_records_keep_original_field_names(self):
        await store.users.save([User("a@x.com", "secret1", "A", "B", True)])
        raw = await db_database.get_item(store.USERS_KEY)
        self.assertIn('"firstName": "A"', raw)
        self.assertIn('"isAdmin": true', raw)

        await store.products.save([Product(7, "Pen", "Blue", 12.5, 3.0, "images/pen.png")])
        (product,) = await store.products.load()
        self.assertEqual(product.price, 12.5)
        self.assertEqual(product.stock, 3)
        self.assertIsInstance(product.stock, int)

    async def test_unreadable_values_load_empty(self):
        await db_database.set_item(store.USERS_KEY, "{not json")
        self.assertEqual(await store.users.load(), [])

        await db_database.set_item(store.PRODUCTS_KEY, '{"id": 1}')
        self.assertEqual(await store.products.load(), [])

    async def test_malformed_entries_skipped(self):
        await db_database.set_item(
            store.PRODUCTS_KEY,
            '[1, {"name": "no id"}, {"id": 5, "name": "Cup", "price": 3, "stock": 1}]',
        )
        products = await store.products.load()
        self.assertEqual([p.id for p in products], [5])
        self.assertEqual(products[0].image, "")

    async def test_entries_with_bad_numbers_skipped(self):
        await db_database.set_item(
            store.PRODUCTS_KEY,
            '[{"id": 1, "name": "A", "price": "12", "stock": 1},'
            ' {"id": 2, "name": "B", "price": -1, "stock": 1},'
            ' {"id": 3, "name": "C", "price": 2, "stock": null},'
            ' {"id": 4, "name": "D", "price": true, "stock": 1},'
            ' {"id": 5, "name": "Cup", "price": 3.5, "stock": 0}]',
        )
        products = await store.products.load()
        self.assertEqual([p.id for p in products], [5])

        cart = store.cart("a@x.com")
        await db_database.set_item(
            cart.key,
            '[{"id": 1, "name": "A", "price": "12", "qty": 1},'
            ' {"id": 2, "name": "B", "price": 2, "qty": 0},'
            ' {"id": 3, "name": "C", "price": 2, "qty": "2"},'
            ' {"id": 5, "name": "Cup", "price": 3, "qty": 2.0}]',
        )
        lines = await cart.load()
        self.assertEqual([(line.id, line.qty) for line in lines], [(5, 2)])
        self.assertIsInstance(lines[0].qty, int)

    # ---------- carts ----------

    def test_cart_key_is_uri_encoded(self):
        self.assertEqual(store.cart_key("a@x.com"), "os_cart_a%40x.com")
        self.assertEqual(store.cart_key("a+b@x.com"), "os_cart_a%2Bb%40x.com")
        self.assertNotEqual(store.cart_key("a/b@x.com"), store.cart_key("a%2Fb@x.com"))
        self.assertEqual(store.cart_key("o'neil@x.com"), "os_cart_o'neil%40x.com")

    async def test_carts_are_per_email(self):
        await store.cart("a@x.com").save([CartLine(1, "Pen", 10, 2)])
        await store.cart("b@x.com").save([CartLine(2, "Cup", 5, 1)])

        self.assertEqual(await store.cart("a@x.com").load(), [CartLine(1, "Pen", 10, 2)])
        self.assertEqual(await store.cart("b@x.com").load(), [CartLine(2, "Cup", 5, 1)])

    # ---------- session slot ----------

    async def test_session_slot(self):
        self.assertIsNone(await store.get_current_email())
        await store.set_current_email("a@x.com")
        self.assertEqual(await store.get_current_email(), "a@x.com")
        await store.clear_current_email()
        self.assertIsNone(await store.get_current_email())

        await store.set_current_email("a@x.com")
        await store.set_current_email("")
        self.assertIsNone(await store.get_current_email())

    async def test_session_context_write_through(self):
        first = SessionContext()
        await first.start("a@x.com")

        restored = SessionContext()
        self.assertEqual(await restored.restore(), "a@x.com")
        self.assertTrue(restored.is_logged_in)

        await restored.end()
        self.assertFalse(restored.is_logged_in)
        self.assertIsNone(await store.get_current_email())

    async def test_non_persistent_session_leaves_slot_alone(self):
        await store.set_current_email("saved@x.com")

        session = SessionContext(persistent=False)
        self.assertIsNone(await session.restore())
        await session.start("other@x.com")
        self.assertEqual(await store.get_current_email(), "saved@x.com")
        await session.end()
        self.assertEqual(await store.get_current_email(), "saved@x.com")


if __name__ == "__main__":
    unittest.main()
