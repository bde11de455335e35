"""
Storage Interface - Abstract base class for the key-value medium.
The local store only ever talks to this interface, so the file-backed medium
can be replaced by a remote database without touching callers.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class StorageError(Exception):
    """Raised when the medium is full, unavailable or refuses a read/write."""


class StorageInterface(ABC):
    """
    Contract for a string key-value medium.

    Every method is async even when the medium is synchronous. A write that
    returns has been made durable; failures raise ``StorageError``.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under ``key``.

        Args:
            key: Storage key (e.g. "fitbot_sessions")

        Returns:
            Optional[str]: Stored text, or None if the key is absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Durably store ``value`` under ``key``, replacing any previous value.

        Args:
            key: Storage key
            value: Text to store (JSON for every record the app writes)
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Delete ``key``. Removing an absent key is not an error.

        Args:
            key: Storage key
        """
        pass

    @abstractmethod
    async def keys(self) -> List[str]:
        """
        List stored keys.

        Returns:
            List[str]: Sorted key names
        """
        pass
