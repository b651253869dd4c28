"""
Persistence adapter contract.

Each call is a single statement (or a short, non-transactional sequence for
the cascade delete). Backends raise ``StoreError`` for every driver failure.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from app.schemas.message import MessageRecord, NewMessage


@dataclass(frozen=True)
class RootFilter:
    """``None`` on a field means no restriction."""
    status: Optional[str] = None
    language: Optional[str] = None


def utcnow() -> datetime:
    """Service clock, naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MessageStore(ABC):

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create the messages table and its indexes if absent."""

    @abstractmethod
    def insert(self, new: NewMessage) -> MessageRecord:
        ...

    @abstractmethod
    def get(self, message_id: int) -> Optional[MessageRecord]:
        ...

    @abstractmethod
    def list_roots(self, flt: RootFilter, offset: int = 0, limit: Optional[int] = None) -> List[MessageRecord]:
        """Root messages newest first."""

    @abstractmethod
    def count_roots(self, flt: RootFilter) -> int:
        ...

    @abstractmethod
    def list_replies(self, parent_ids: Sequence[int], status: Optional[str] = None) -> List[MessageRecord]:
        """Replies to ``parent_ids`` oldest first."""

    @abstractmethod
    def update_status(self, message_id: int, status: str) -> Optional[MessageRecord]:
        """Returns ``None`` when the message does not exist."""

    @abstractmethod
    def delete_cascade(self, message_id: int) -> List[int]:
        """Delete the replies of ``message_id``, then the message itself.

        Not atomic: a failure between the two steps leaves the parent behind.
        """

    def ping(self) -> None:
        self.count_roots(RootFilter())

    def close(self) -> None:
        pass
