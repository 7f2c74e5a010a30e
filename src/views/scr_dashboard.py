from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label, Markdown

from utils.messages import NewOrderMessage, UserLogoutMessage
from utils.pure import format_date, format_price, generate_markdown_table
from utils.state import UserProjection
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class DashboardScreen(BaseScreen):
    """
    Profile, counts, order history, addresses and recent activity of the
    signed in user. Everything is re-read from the app state on refresh.

    Layout:
    - Profile card and the three counters at the top.
    - Order history table (newest first) with Add Sample / Log out buttons.
    - Addresses and recent activity below.
    """

    SUB_TITLE = "My Account"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with VerticalScroll(id="div-dashboard"):
            yield Markdown("", id="md-profile")
            with Horizontal(id="div-stats"):
                yield Label("", id="label-stat-orders", classes="stat")
                yield Label("", id="label-stat-activities", classes="stat")
                yield Label("", id="label-stat-addresses", classes="stat")
            with Horizontal(id="div-dashboard-btns"):
                yield Button("+ Add Sample", id="btn-add-order")
                yield Button("Log out", id="btn-logout", variant="error")
            yield Label("ORDER HISTORY", classes="section-title")
            yield DataTable(id="table-orders")
            yield Label("", id="label-no-orders")
            yield Label("ADDRESSES", classes="section-title")
            yield Markdown("", id="md-addresses")
            yield Label("RECENT ACTIVITY", classes="section-title")
            yield Markdown("", id="md-activity")

    def _orders_table(self) -> DataTable:
        table = self.query_one("#table-orders", DataTable)
        if not table.columns:
            table.cursor_type = "row"
            table.zebra_stripes = True
            table.add_columns("Order", "Date", "Items", "Status", "Total")
        return table

    @on(ScreenResume)
    @on(NewOrderMessage)
    async def handle_refresh(self) -> None:
        projection = self.state.current_user_projection()
        if projection is None:
            # account vanished under the session
            self.notify("Your account could not be found.", severity="error")
            self.post_message(UserLogoutMessage())
            return
        await self._show_projection(projection)

    async def _show_projection(self, user: UserProjection) -> None:
        profile_md = (
            f"### {user.initials} · {user.full_name}\n\n"
            f"{user.email}  \n"
            f"Member since {format_date(user.member_since)}"
        )
        await self.query_one("#md-profile", Markdown).update(profile_md)

        self.query_one("#label-stat-orders", Label).update(
            f"Total Orders\n{user.order_count}"
        )
        self.query_one("#label-stat-activities", Label).update(
            f"Activities\n{user.activity_count}"
        )
        self.query_one("#label-stat-addresses", Label).update(
            f"Addresses\n{user.address_count}"
        )

        table = self._orders_table()
        table.clear()
        for order in user.orders:
            items = ", ".join(f"{i.name} × {i.quantity}" for i in order.items)
            table.add_row(
                order.id,
                format_date(order.date),
                items,
                order.status,
                format_price(order.total),
            )
        self.query_one("#label-no-orders", Label).update(
            ""
            if user.orders
            else "No orders yet. Your order history will appear here."
        )

        addresses_md = generate_markdown_table(
            ["Label", "Address", "City", "State", "Pincode"],
            [[a.label, a.address, a.city, a.state, a.pincode] for a in user.addresses],
        )
        await self.query_one("#md-addresses", Markdown).update(
            addresses_md or "No saved addresses."
        )

        activity_md = generate_markdown_table(
            ["Activity", "When"],
            [[a.description, format_date(a.timestamp)] for a in user.recent_activities],
        )
        await self.query_one("#md-activity", Markdown).update(
            activity_md or "No activity yet."
        )

    @on(Button.Pressed, "#btn-add-order")
    async def handle_add_order(self) -> None:
        order = await self.state.add_order()
        if order is None:
            self.notify(self.state.error_message or "Not signed in.", severity="error")
            return
        self.notify(f"Order {order.id} placed.")
        self.post_message(NewOrderMessage(order.id))

    @on(Button.Pressed, "#btn-logout")
    @work(exclusive=True)
    async def handle_logout(self) -> None:
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
