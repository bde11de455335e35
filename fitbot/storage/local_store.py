"""
Local Store - the app's data access layer over a key-value medium.

Four independent namespaces (auth, profile, progress, sessions) each keep
their whole record under one key as JSON. Every operation is async so that
swapping the medium for a remote database is a change inside this package.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from pydantic.alias_generators import to_camel

from ..models import ChatSession, ProgressEntry, UserProfile, upsert_entry
from .interface import StorageInterface
from .local_storage import LocalStorage

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "profile": "fitbot_profile",
    "progress": "fitbot_progress",
    "sessions": "fitbot_sessions",
    "auth": "fitbot_auth",
}

_progress_list = TypeAdapter(List[ProgressEntry])
_session_list = TypeAdapter(List[ChatSession])


def _dump(value: Any) -> Any:
    """Convert models (or lists of models) into JSON-ready data using stored field names."""
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(by_alias=True)
    return value


class AuthStore:
    """Holds the signed-in e-mail as the session token."""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.key = STORAGE_KEYS["auth"]

    async def get_session(self) -> Optional[str]:
        """Current session token, or None when signed out."""
        return await self.storage.get(self.key)

    async def sign_in(self, email: str) -> Dict[str, Any]:
        """Store ``email`` as the session token."""
        await self.storage.set(self.key, email)
        return {"user": {"email": email}}

    async def sign_out(self) -> None:
        await self.storage.remove(self.key)


class ProfileStore:
    """Single-row profile storage."""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.key = STORAGE_KEYS["profile"]

    async def get(self) -> Optional[UserProfile]:
        data = await self.storage.get(self.key)
        if data is None:
            return None
        return UserProfile.model_validate_json(data)

    async def upsert(self, profile: UserProfile) -> UserProfile:
        await self.storage.set(self.key, profile.model_dump_json())
        return profile


class ProgressStore:
    """Ordered progress history, at most one entry per date."""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.key = STORAGE_KEYS["progress"]
        # Serializes read-modify-write cycles on the history key
        self._lock = asyncio.Lock()

    async def get_all(self) -> List[ProgressEntry]:
        data = await self.storage.get(self.key)
        if data is None:
            return []
        return _progress_list.validate_json(data)

    async def upsert(self, entry: ProgressEntry) -> List[ProgressEntry]:
        """
        Insert or replace the entry for ``entry.date``.

        Returns:
            List[ProgressEntry]: The full updated history
        """
        async with self._lock:
            updated = upsert_entry(await self.get_all(), entry)
            await self._save(updated)
        return updated

    async def set_initial_history(self, entries: List[ProgressEntry]) -> None:
        """Replace the whole history (used once, when onboarding seeds data)."""
        async with self._lock:
            await self._save(entries)

    async def _save(self, entries: List[ProgressEntry]) -> None:
        await self.storage.set(self.key, json.dumps(_dump(entries), ensure_ascii=False))


class SessionStore:
    """Chat sessions stored as one collection, addressed by session id."""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.key = STORAGE_KEYS["sessions"]
        # Serializes read-modify-write cycles on the collection key
        self._lock = asyncio.Lock()

    async def get_all(self) -> List[ChatSession]:
        data = await self.storage.get(self.key)
        if data is None:
            return []
        return _session_list.validate_json(data)

    async def create(self, session: ChatSession) -> ChatSession:
        snapshot = _dump(session)
        async with self._lock:
            current = await self._load_raw()
            current.append(snapshot)
            await self._save_raw(current)
        return session

    async def update(self, session_id: str, **updates: Any) -> Optional[ChatSession]:
        """
        Merge ``updates`` into the stored session with ``session_id``.

        Field values are serialized before the first await, so callers may keep
        mutating their in-memory objects while the write is in flight.

        Args:
            session_id: Session to update
            **updates: Fields to replace (e.g. messages=[...], title="...")

        Returns:
            Optional[ChatSession]: The stored session after the merge, or None if absent
        """
        unknown = set(updates) - set(ChatSession.model_fields)
        if unknown:
            raise ValueError(f"Unknown session fields: {sorted(unknown)}")
        patch = {to_camel(name): _dump(value) for name, value in updates.items()}
        async with self._lock:
            current = await self._load_raw()
            found = None
            for index, raw in enumerate(current):
                if raw.get("id") == session_id:
                    current[index] = {**raw, **patch}
                    found = current[index]
            await self._save_raw(current)
        return ChatSession.model_validate(found) if found is not None else None

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            current = await self._load_raw()
            await self._save_raw([raw for raw in current if raw.get("id") != session_id])

    async def _load_raw(self) -> List[Dict[str, Any]]:
        # Validate before merging so a corrupt collection is never rewritten
        return _dump(await self.get_all())

    async def _save_raw(self, sessions: List[Dict[str, Any]]) -> None:
        await self.storage.set(self.key, json.dumps(sessions, ensure_ascii=False))


class LocalStore:
    """Facade grouping the four namespaces over one medium."""

    def __init__(self, storage: StorageInterface):
        """
        Initialize the store.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.auth = AuthStore(storage)
        self.profile = ProfileStore(storage)
        self.progress = ProgressStore(storage)
        self.sessions = SessionStore(storage)


# Global store instance
_local_store: Optional[LocalStore] = None


def init_local_store(storage: Optional[StorageInterface] = None) -> LocalStore:
    """
    Initialize the global local store.

    Args:
        storage: Optional medium. If None, creates LocalStorage in ./data.
    """
    global _local_store
    if storage is None:
        storage = LocalStorage()
    _local_store = LocalStore(storage)
    logger.debug(f"Local store initialized on {type(storage).__name__}")
    return _local_store


def get_local_store() -> LocalStore:
    """
    Get the global local store.

    Raises:
        RuntimeError: If the store has not been initialized
    """
    if _local_store is None:
        raise RuntimeError("Local store not initialized. Call init_local_store() first.")
    return _local_store
