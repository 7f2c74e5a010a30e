import json
import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.database import SqliteKeyValueStore  # noqa: E402
from db.errors import PersistenceError  # noqa: E402
from db.models import ActivityType  # noqa: E402
from utils.pure import format_price, generate_markdown_table  # noqa: E402
from utils.state import AppContext, SignupForm  # noqa: E402


class SessionFailStore(SqliteKeyValueStore):
    """SQLite store that can refuse writes to the session key only."""

    fail_session_writes = False

    def _check(self, key):
        if self.fail_session_writes and key == "valencire_session":
            raise PersistenceError()

    async def set(self, key, value):
        self._check(key)
        await super().set(key, value)

    async def delete(self, key):
        self._check(key)
        await super().delete(key)


def signup_form(**overrides) -> SignupForm:
    fields = dict(
        first_name="A",
        last_name="B",
        email="a@b.com",
        password="password1",
        confirm_password="password1",
    )
    fields.update(overrides)
    return SignupForm(**fields)


class AppContextTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self.kv = SessionFailStore(self.db_path)
        self.ctx = AppContext.from_store(self.kv)

    async def asyncSetUp(self):
        await self.ctx.start()

    def tearDown(self):
        self.temp_dir.cleanup()

    async def restarted(self) -> AppContext:
        ctx = AppContext.from_store(SqliteKeyValueStore(self.db_path))
        await ctx.start()
        return ctx

    # ---------- signup ----------

    async def test_signup_scenario(self):
        self.assertEqual(self.ctx.view, "landing")
        self.assertTrue(await self.ctx.submit_signup(signup_form()))

        self.assertEqual(self.ctx.error_message, "")
        self.assertEqual(self.ctx.view, "dashboard")
        self.assertEqual(self.ctx.sessions.email, "a@b.com")

        view = self.ctx.current_user_projection()
        self.assertEqual(view.order_count, 0)
        self.assertEqual(view.address_count, 0)
        self.assertEqual(view.activity_count, 1)
        self.assertEqual(view.full_name, "A B")
        self.assertEqual(view.initials, "AB")

    async def test_signup_password_mismatch(self):
        ok = await self.ctx.submit_signup(signup_form(confirm_password="password2"))
        self.assertFalse(ok)
        self.assertEqual(self.ctx.error_message, "Passwords do not match!")
        self.assertNotIn("a@b.com", self.ctx.accounts)
        self.assertIsNone(self.ctx.sessions.current)

    async def test_signup_short_password(self):
        ok = await self.ctx.submit_signup(
            signup_form(password="short", confirm_password="short")
        )
        self.assertFalse(ok)
        self.assertIn("at least 6", self.ctx.error_message)
        self.assertEqual(len(self.ctx.accounts), 0)
        self.assertIsNone(await self.kv.get("valencire_session"))

    async def test_signup_duplicate_email(self):
        await self.ctx.submit_signup(signup_form())
        await self.ctx.logout()
        ok = await self.ctx.submit_signup(signup_form(first_name="Z"))
        self.assertFalse(ok)
        self.assertEqual(self.ctx.error_message, "Email already registered!")
        self.assertEqual(self.ctx.accounts.get("a@b.com").first_name, "A")
        self.assertIsNone(self.ctx.current_user())

    # ---------- signin ----------

    async def test_signin_unregistered_email(self):
        self.assertFalse(await self.ctx.submit_signin("nobody@b.com", "password1"))
        self.assertEqual(
            self.ctx.error_message, "Account not found. Please create an account."
        )
        self.assertIsNone(self.ctx.sessions.current)
        self.assertIsNone(await self.kv.get("valencire_session"))

    async def test_signin_wrong_password_then_right(self):
        await self.ctx.submit_signup(signup_form())
        await self.ctx.logout()

        self.assertFalse(await self.ctx.submit_signin("a@b.com", "password2"))
        self.assertEqual(self.ctx.error_message, "Incorrect password!")
        self.assertIsNone(self.ctx.current_user())

        self.assertTrue(await self.ctx.submit_signin("a@b.com", "password1"))
        self.assertEqual(self.ctx.error_message, "")
        types = [a.type for a in self.ctx.current_user().activities]
        self.assertEqual(
            types,
            [ActivityType.LOGIN, ActivityType.LOGOUT, ActivityType.ACCOUNT_CREATED],
        )

    # ---------- logout & orders ----------

    async def test_logout(self):
        await self.ctx.submit_signup(signup_form())
        self.assertTrue(await self.ctx.logout())

        self.assertEqual(self.ctx.view, "landing")
        self.assertIsNone(self.ctx.current_user())
        self.assertIsNone(self.ctx.current_user_projection())
        self.assertIsNone(await self.kv.get("valencire_session"))
        user = self.ctx.accounts.get("a@b.com")
        self.assertEqual(user.activities[0].type, ActivityType.LOGOUT)

        # signed out already
        self.assertTrue(await self.ctx.logout())
        self.assertEqual(len(self.ctx.accounts.get("a@b.com").activities), 2)

    async def test_signup_when_session_write_fails(self):
        self.kv.fail_session_writes = True
        self.assertFalse(await self.ctx.submit_signup(signup_form()))

        self.assertIn("Please sign in", self.ctx.error_message)
        self.assertEqual(self.ctx.view, "signin")
        self.assertIn("a@b.com", self.ctx.accounts)
        self.assertIsNone(self.ctx.current_user())

        # the suggested recovery works once storage is back
        self.kv.fail_session_writes = False
        self.assertTrue(await self.ctx.submit_signin("a@b.com", "password1"))
        self.assertEqual(self.ctx.current_user().email, "a@b.com")

    async def test_logout_retry_records_one_event(self):
        await self.ctx.submit_signup(signup_form())

        self.kv.fail_session_writes = True
        self.assertFalse(await self.ctx.logout())
        self.assertFalse(await self.ctx.logout())
        self.assertEqual(self.ctx.current_user().email, "a@b.com")

        self.kv.fail_session_writes = False
        self.assertTrue(await self.ctx.logout())
        self.assertIsNone(await self.kv.get("valencire_session"))
        types = [a.type for a in self.ctx.accounts.get("a@b.com").activities]
        self.assertEqual(types, [ActivityType.LOGOUT, ActivityType.ACCOUNT_CREATED])

    async def test_add_order_scenario(self):
        await self.ctx.submit_signup(signup_form())
        order = await self.ctx.add_order()

        self.assertIsNotNone(order)
        self.assertTrue(order.id.startswith("ORD-"))
        view = self.ctx.current_user_projection()
        self.assertEqual(view.order_count, 1)
        self.assertEqual(view.orders[0].total, 1800)
        self.assertEqual(format_price(view.orders[0].total), "₹1,800")
        self.assertEqual(view.recent_activities[0].type, ActivityType.ORDER_PLACED)
        self.assertEqual(view.activity_count, 2)

    async def test_add_order_requires_session(self):
        self.assertIsNone(await self.ctx.add_order())

    async def test_projection_truncates_activity(self):
        await self.ctx.submit_signup(signup_form())
        for _ in range(25):
            await self.ctx.accounts.authenticate("a@b.com", "password1")

        view = self.ctx.current_user_projection()
        self.assertEqual(view.activity_count, 26)
        self.assertEqual(len(view.recent_activities), 20)
        self.assertEqual(view.recent_activities[0].id, 26)

    # ---------- view state & startup ----------

    async def test_dashboard_requires_user(self):
        with self.assertRaises(ValueError):
            self.ctx.show("dashboard")
        self.ctx.show("signup")
        self.assertEqual(self.ctx.view, "signup")

        await self.ctx.submit_signup(signup_form())
        self.ctx.show("dashboard")
        self.assertEqual(self.ctx.view, "dashboard")

    async def test_start_resumes_session(self):
        await self.ctx.submit_signup(signup_form())
        await self.ctx.add_order()

        ctx = await self.restarted()
        self.assertEqual(ctx.view, "dashboard")
        self.assertEqual(ctx.current_user_projection().order_count, 1)

    async def test_start_ignores_stale_session(self):
        await self.kv.set(
            "valencire_session",
            json.dumps({"email": "gone@b.com", "loginTime": "2025-11-01T12:00:00.000Z"}),
        )
        ctx = await self.restarted()
        self.assertEqual(ctx.view, "landing")
        self.assertIsNone(ctx.current_user())

    async def test_current_user_is_never_stale(self):
        await self.ctx.submit_signup(signup_form())
        before = self.ctx.current_user_projection()
        await self.ctx.accounts.authenticate("a@b.com", "password1")
        self.assertEqual(
            self.ctx.current_user_projection().activity_count,
            before.activity_count + 1,
        )


class PureHelpersTestCase(unittest.TestCase):
    def test_markdown_table(self):
        self.assertEqual(generate_markdown_table(["A"], []), "")
        table = generate_markdown_table(["A", "B"], [["x|y", 2]], ["l", "r"])
        self.assertEqual(
            table.splitlines(),
            ["| A | B |", "| :--- | ---: |", "| x\\|y | 2 |"],
        )
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [[1, 2]], ["l"])

    def test_format_price(self):
        self.assertEqual(format_price(1800), "₹1,800")
        self.assertEqual(format_price(12.5), "₹12.50")


if __name__ == "__main__":
    unittest.main()
