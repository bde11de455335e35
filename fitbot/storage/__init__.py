"""Storage module - key-value medium and the app's local store."""

from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .local_store import (
    LocalStore, AuthStore, ProfileStore, ProgressStore, SessionStore,
    STORAGE_KEYS, init_local_store, get_local_store
)

__all__ = [
    'StorageInterface', 'StorageError', 'LocalStorage',
    'LocalStore', 'AuthStore', 'ProfileStore', 'ProgressStore', 'SessionStore',
    'STORAGE_KEYS', 'init_local_store', 'get_local_store'
]
