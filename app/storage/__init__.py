# Storage backends
from app.core.config import Settings
from app.core.database import build_engine
from app.storage.base import MessageStore, RootFilter
from app.storage.d1 import D1MessageStore
from app.storage.sql import SQLMessageStore


def build_store(settings: Settings) -> MessageStore:
    """Backend selected by ``STORE_BACKEND``."""
    if settings.STORE_BACKEND == "d1":
        return D1MessageStore.from_settings(settings)
    return SQLMessageStore(build_engine(settings))


__all__ = ["MessageStore", "RootFilter", "SQLMessageStore", "D1MessageStore", "build_store"]
