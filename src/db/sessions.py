# src/db/sessions.py
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from db.accounts import AccountStore
from db.models import Session, utc_now
from db.repository import SessionRepository
from utils.logger import get_logger

_logger = get_logger(__name__)


class SessionManager:
    """
    Tracks the single signed-in account, if any.

    Only the email is held; the user record is always looked up through the
    AccountStore.
    """

    def __init__(self, repo: SessionRepository, accounts: AccountStore):
        self.repo = repo
        self.accounts = accounts
        self.current: Optional[Session] = None
        self._lock = asyncio.Lock()

    @property
    def email(self) -> Optional[str]:
        return self.current.email if self.current else None

    async def begin(self, email: str, when: Optional[datetime] = None) -> Session:
        """Write the session token, replacing any previous one."""
        session = Session(email=email, login_time=when or utc_now())
        async with self._lock:
            await self.repo.set(session)
            self.current = session
        return session

    async def end(self) -> None:
        async with self._lock:
            await self.repo.delete()
            self.current = None

    async def resume(self) -> Optional[Session]:
        """
        Restore the stored session on startup.
        A session pointing at an account that no longer exists is dropped.
        """
        async with self._lock:
            session = await self.repo.get()
            if session is None:
                self.current = None
                return None
            if self.accounts.get(session.email) is None:
                _logger.warning(
                    f"Dropping stale session for unknown account {session.email}."
                )
                await self.repo.delete()
                self.current = None
                return None
            self.current = session
        _logger.info(f"Resumed session for {session.email}.")
        return session
