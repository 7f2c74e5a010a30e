# src/db/accounts.py
from __future__ import annotations

import asyncio
import random
import re
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterator, Optional

from db.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from db.models import ActivityEvent, ActivityType, Order, UserRecord, utc_now
from db.repository import UserRepository
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _next_activity_id(user: UserRecord) -> int:
    return max((a.id for a in user.activities), default=0) + 1


def _with_activity(
    user: UserRecord, kind: ActivityType, description: str, when: datetime
) -> UserRecord:
    """Return a copy of user with a new event at the front of its activity log."""
    event = ActivityEvent(
        id=_next_activity_id(user),
        type=kind,
        description=description,
        timestamp=when,
    )
    return replace(user, activities=(event, *user.activities))


class AccountStore:
    """
    Owns every UserRecord, keyed by email exactly as typed at signup.

    Each mutation computes the updated mapping, writes the full mapping through
    the repository and only then swaps it in. A failed write raises
    PersistenceError and leaves memory untouched.
    """

    def __init__(
        self,
        repo: UserRepository,
        min_password_length: Optional[int] = None,
    ):
        self.repo = repo
        self.min_password_length = (
            min_password_length
            if min_password_length is not None
            else config.MIN_PASSWORD_LENGTH
        )
        self._users: Dict[str, UserRecord] = {}
        self._lock = asyncio.Lock()

    # ---------------------------
    # Read access
    # ---------------------------

    def get(self, email: str) -> Optional[UserRecord]:
        return self._users.get(email)

    def __contains__(self, email: object) -> bool:
        return email in self._users

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[str]:
        return iter(self._users)

    def snapshot(self) -> Dict[str, UserRecord]:
        """A shallow copy of the mapping; records are immutable."""
        return dict(self._users)

    # ---------------------------
    # Persistence
    # ---------------------------

    async def load(self) -> None:
        async with self._lock:
            self._users = await self.repo.load_all()
        _logger.debug(f"Loaded {len(self._users)} account(s).")

    async def persist(self) -> None:
        async with self._lock:
            await self.repo.save_all(self._users)

    async def _commit(self, email: str, user: UserRecord) -> None:
        # caller holds the lock
        updated = {**self._users, email: user}
        await self.repo.save_all(updated)
        self._users = updated

    def _require(self, email: str) -> UserRecord:
        user = self._users.get(email)
        if user is None:
            raise NotFoundError()
        return user

    # ---------------------------
    # Auth & Registration
    # ---------------------------

    def validate_signup(
        self, email: str, first_name: str, last_name: str, password: str
    ) -> None:
        """Raise ValidationError if the signup fields are unusable."""
        if not all([email, first_name, last_name, password]):
            raise ValidationError("Make sure all fields are filled.")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Please enter a valid email address.")
        if len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters!"
            )

    async def create(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        when: Optional[datetime] = None,
    ) -> UserRecord:
        """
        Register a new account with an empty order history and a single
        account_created event.
        """
        self.validate_signup(email, first_name, last_name, password)
        when = when or utc_now()
        async with self._lock:
            if email in self._users:
                raise DuplicateEmailError()
            user = UserRecord(
                email=email,
                first_name=first_name,
                last_name=last_name,
                password=password,
                created_at=when,
            )
            user = _with_activity(
                user, ActivityType.ACCOUNT_CREATED, "Account created", when
            )
            await self._commit(email, user)
        _logger.info(f"Account created for {email}.")
        return user

    async def authenticate(
        self, email: str, password: str, when: Optional[datetime] = None
    ) -> UserRecord:
        """Return the user with a fresh login event if email/password match."""
        when = when or utc_now()
        async with self._lock:
            user = self._require(email)
            if user.password != password:
                _logger.info(f"Rejected sign in for {email}.")
                raise InvalidCredentialsError()
            user = _with_activity(
                user, ActivityType.LOGIN, "Signed in to account", when
            )
            await self._commit(email, user)
        _logger.info(f"{email} signed in.")
        return user

    async def record_logout(
        self, email: str, when: Optional[datetime] = None
    ) -> UserRecord:
        when = when or utc_now()
        async with self._lock:
            user = _with_activity(
                self._require(email),
                ActivityType.LOGOUT,
                "Signed out of account",
                when,
            )
            await self._commit(email, user)
        _logger.info(f"{email} signed out.")
        return user

    # ---------------------------
    # Orders
    # ---------------------------

    def new_order_id(self) -> str:
        """Generate an order id that isn't already used by any account."""
        taken = {o.id for user in self._users.values() for o in user.orders}
        while True:
            order_id = f"ORD-{random.randint(100000000, 999999999)}"
            if order_id not in taken:
                return order_id

    async def append_order(
        self, email: str, order: Order, when: Optional[datetime] = None
    ) -> UserRecord:
        """Put order at the front of the history and log it, in one write."""
        when = when or utc_now()
        async with self._lock:
            user = self._require(email)
            user = replace(user, orders=(order, *user.orders))
            user = _with_activity(
                user,
                ActivityType.ORDER_PLACED,
                f"Order placed - {order.id}",
                when,
            )
            await self._commit(email, user)
        _logger.info(f"Order {order.id} placed for {email}.")
        return user
