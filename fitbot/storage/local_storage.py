"""
Local Filesystem Storage Implementation.
Each key is stored as its own file inside a base directory.
"""

import asyncio
import logging
import os
import re
import uuid
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from .interface import StorageError, StorageInterface

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX = ".json"


class LocalStorage(StorageInterface):
    """
    Local filesystem key-value storage.
    Writes go to a temporary file that is fsync'd and then renamed over the
    target, so a completed ``set`` survives a crash.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Directory holding one file per key
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Map a key to its file, rejecting anything that could leave base_dir."""
        if not _KEY_PATTERN.match(key) or key.startswith('.'):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}{_SUFFIX}"

    async def get(self, key: str) -> Optional[str]:
        """Read a key from disk."""
        full_path = self._get_full_path(key)
        try:
            async with aiofiles.open(full_path, 'r', encoding='utf-8') as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Error reading key {key}: {e}", exc_info=True)
            raise StorageError(f"Failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        """Durably write a key to disk."""
        full_path = self._get_full_path(key)
        tmp_path = full_path.with_name(f".{full_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(value)
                await f.flush()
                await asyncio.get_running_loop().run_in_executor(None, os.fsync, f.fileno())
            await aiofiles.os.replace(tmp_path, full_path)
        except OSError as e:
            logger.error(f"Error writing key {key}: {e}", exc_info=True)
            try:
                await aiofiles.os.remove(tmp_path)
            except OSError:
                logger.debug(f"Could not clean up {tmp_path}")
            raise StorageError(f"Failed to write {key}: {e}") from e

        logger.debug(f"Stored {key} ({len(value)} chars)")

    async def remove(self, key: str) -> None:
        """Delete a key from disk."""
        full_path = self._get_full_path(key)
        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error(f"Error removing key {key}: {e}", exc_info=True)
            raise StorageError(f"Failed to remove {key}: {e}") from e

    async def keys(self) -> List[str]:
        """List stored keys."""
        try:
            return sorted(
                p.name[:-len(_SUFFIX)]
                for p in self.base_dir.glob(f"*{_SUFFIX}")
                if p.is_file() and not p.name.startswith('.')
            )
        except OSError as e:
            raise StorageError(f"Failed to list keys: {e}") from e
