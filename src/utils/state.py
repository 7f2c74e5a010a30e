from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

from db.accounts import AccountStore
from db.database import SqliteKeyValueStore
from db.errors import AccountError, PersistenceError, ValidationError
from db.models import (
    ActivityEvent,
    ActivityType,
    Address,
    Order,
    OrderItem,
    UserRecord,
    utc_now,
)
from db.repository import KeyValueStore, SessionRepository, UserRepository
from db.sessions import SessionManager
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

View = Literal["landing", "signin", "signup", "dashboard"]


@dataclass
class SignupForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


@dataclass(frozen=True)
class UserProjection:
    """Read-only view of the signed-in user, shaped for the dashboard."""

    full_name: str
    initials: str
    email: str
    member_since: datetime
    orders: Tuple[Order, ...]
    addresses: Tuple[Address, ...]
    recent_activities: Tuple[ActivityEvent, ...]
    order_count: int
    address_count: int
    activity_count: int


def sample_order(order_id: str, when: Optional[datetime] = None) -> Order:
    """The demo order placed by the dashboard's Add Sample button."""
    return Order(
        id=order_id,
        date=when or utc_now(),
        items=(OrderItem(name="AMETHYST NOIR™", size="M", quantity=1, price=1800),),
        total=1800,
        status="Processing",
        shipping_address="123 Fashion Street, Mumbai, MH 400001",
    )


@dataclass
class AppContext:
    """
    Application state shared by screens.

    Fields:
      - accounts: every user record, keyed by email
      - sessions: who is signed in, if anyone
      - view: "landing" | "signin" | "signup" | "dashboard"
      - error_message: message from the last failed intent, "" otherwise
    """

    accounts: AccountStore
    sessions: SessionManager
    view: View = "landing"
    error_message: str = ""
    activity_limit: int = config.ACTIVITY_DISPLAY_LIMIT

    @classmethod
    def from_store(
        cls, store: Optional[KeyValueStore] = None, **kwargs
    ) -> AppContext:
        store = store or SqliteKeyValueStore()
        accounts = AccountStore(UserRepository(store))
        return cls(
            accounts=accounts,
            sessions=SessionManager(SessionRepository(store), accounts),
            **kwargs,
        )

    async def start(self) -> bool:
        """
        Load stored accounts and resume a stored session.
        Returns True if a user is signed in afterwards.
        """
        await self.accounts.load()
        await self.sessions.resume()
        signed_in = self.current_user() is not None
        self.view = "dashboard" if signed_in else "landing"
        return signed_in

    def show(self, view: View) -> None:
        if view == "dashboard" and self.current_user() is None:
            raise ValueError("Dashboard requires a signed in user.")
        self.error_message = ""
        self.view = view

    # ---------------------------
    # User intents
    # ---------------------------

    def _fail(self, error: AccountError) -> None:
        _logger.debug(f"{type(error).__name__}: {error.message}")
        self.error_message = error.message

    async def submit_signup(self, form: SignupForm) -> bool:
        self.error_message = ""
        try:
            if form.password != form.confirm_password:
                raise ValidationError("Passwords do not match!")
            user = await self.accounts.create(
                form.email, form.first_name, form.last_name, form.password
            )
        except AccountError as e:
            self._fail(e)
            return False
        try:
            await self.sessions.begin(user.email)
        except AccountError:
            # the account is stored, so retrying the form would hit the duplicate check
            self._fail(
                PersistenceError("Account created, but signing in failed. Please sign in.")
            )
            self.view = "signin"
            return False
        self.view = "dashboard"
        return True

    async def submit_signin(self, email: str, password: str) -> bool:
        self.error_message = ""
        try:
            user = await self.accounts.authenticate(email, password)
            await self.sessions.begin(user.email)
        except AccountError as e:
            self._fail(e)
            return False
        self.view = "dashboard"
        return True

    async def logout(self) -> bool:
        self.error_message = ""
        email = self.sessions.email
        try:
            user = self.accounts.get(email) if email is not None else None
            # a retry after a failed session delete must not log twice
            if user is not None and not (
                user.activities and user.activities[0].type == ActivityType.LOGOUT
            ):
                await self.accounts.record_logout(email)
            await self.sessions.end()
        except AccountError as e:
            self._fail(e)
            return False
        self.view = "landing"
        return True

    async def add_order(self) -> Optional[Order]:
        self.error_message = ""
        user = self.current_user()
        if user is None:
            return None
        order = sample_order(self.accounts.new_order_id())
        try:
            await self.accounts.append_order(user.email, order)
        except AccountError as e:
            self._fail(e)
            return None
        return order

    # ---------------------------
    # Projections
    # ---------------------------

    def current_user(self) -> Optional[UserRecord]:
        email = self.sessions.email
        if email is None:
            return None
        return self.accounts.get(email)

    def current_user_projection(self) -> Optional[UserProjection]:
        user = self.current_user()
        if user is None:
            return None
        initials = (user.first_name[:1] + user.last_name[:1]).upper()
        return UserProjection(
            full_name=user.full_name,
            initials=initials,
            email=user.email,
            member_since=user.created_at,
            orders=user.orders,
            addresses=user.addresses,
            recent_activities=user.activities[: self.activity_limit],
            order_count=len(user.orders),
            address_count=len(user.addresses),
            activity_count=len(user.activities),
        )
