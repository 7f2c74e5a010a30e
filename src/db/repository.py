# typed access to the stored blobs; callers never see the JSON
from __future__ import annotations

import json
from typing import Dict, Mapping, Optional, Protocol

from db.errors import PersistenceError
from db.models import Session, UserRecord
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


def _decode(key: str, raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        _logger.error(f"Stored value under '{key}' is not valid JSON: {e}")
        raise PersistenceError("Stored data is corrupted.") from e


class UserRepository:
    """The whole email -> UserRecord mapping, stored as one blob."""

    def __init__(self, store: KeyValueStore, key: str = config.USERS_KEY):
        self.store = store
        self.key = key

    async def load_all(self) -> Dict[str, UserRecord]:
        raw = await self.store.get(self.key)
        if raw is None:
            return {}
        data = _decode(self.key, raw)
        try:
            return {email: UserRecord.from_dict(rec) for email, rec in data.items()}
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            _logger.error(f"Stored users under '{self.key}' have a bad shape: {e}")
            raise PersistenceError("Stored data is corrupted.") from e

    async def save_all(self, users: Mapping[str, UserRecord]) -> None:
        blob = json.dumps(
            {email: rec.to_dict() for email, rec in users.items()},
            ensure_ascii=False,
        )
        await self.store.set(self.key, blob)


class SessionRepository:
    def __init__(self, store: KeyValueStore, key: str = config.SESSION_KEY):
        self.store = store
        self.key = key

    async def get(self) -> Optional[Session]:
        raw = await self.store.get(self.key)
        if raw is None:
            return None
        data = _decode(self.key, raw)
        try:
            return Session.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            _logger.error(f"Stored session under '{self.key}' has a bad shape: {e}")
            raise PersistenceError("Stored data is corrupted.") from e

    async def set(self, session: Session) -> None:
        await self.store.set(self.key, json.dumps(session.to_dict()))

    async def delete(self) -> None:
        await self.store.delete(self.key)
