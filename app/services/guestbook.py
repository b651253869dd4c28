"""
留言板业务逻辑: 发布留言, 公开列表, 管理员审核
"""
import logging
import math
from typing import List, Optional, Tuple

from app.core.config import Settings
from app.core.errors import NotFound, ValidationError
from app.schemas.common import Pagination
from app.schemas.message import MESSAGE_STATUSES, MessageCreate, MessageRecord, NewMessage, ReplyCreate
from app.services import language
from app.services.moderation import ModerationGate
from app.services.threads import Thread, build_threads
from app.storage.base import MessageStore, RootFilter

logger = logging.getLogger(__name__)

MAX_LANGUAGE_LENGTH = 32


def _required_text(value: Optional[str], field: str, max_length: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} must not be empty", code=f"missing_{field}")
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", code=f"{field}_too_long")
    return text


class GuestbookService:

    def __init__(self, store: MessageStore, gate: ModerationGate, settings: Settings):
        self.store = store
        self.gate = gate
        self.settings = settings

    # ============ 分页 ============

    def _page_window(self, page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
        page = page or 1
        limit = limit or self.settings.DEFAULT_PAGE_SIZE
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive", code="invalid_pagination")
        return page, min(limit, self.settings.MAX_PAGE_SIZE)

    def _paged_threads(
        self,
        flt: RootFilter,
        reply_status: Optional[str],
        page: Optional[int],
        limit: Optional[int],
    ) -> Tuple[List[Thread], Pagination]:
        page, limit = self._page_window(page, limit)
        total = self.store.count_roots(flt)
        roots = self.store.list_roots(flt, offset=(page - 1) * limit, limit=limit)
        replies = self.store.list_replies([root.id for root in roots], status=reply_status)
        pagination = Pagination(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
        return build_threads(roots, replies), pagination

    # ============ 公开接口 ============

    def list_feed(
        self,
        lang: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Thread], Pagination]:
        """已审核留言列表, 可按语言过滤"""
        flt = RootFilter(status="approved", language=language.language_filter(lang))
        return self._paged_threads(flt, "approved", page, limit)

    def submit(self, payload: MessageCreate, ip: Optional[str] = None) -> MessageRecord:
        name = _required_text(payload.name, "name", self.settings.MAX_NAME_LENGTH)
        body = _required_text(payload.message, "message", self.settings.MAX_BODY_LENGTH)

        email = (payload.email or "").strip() or None
        if email and len(email) > self.settings.MAX_EMAIL_LENGTH:
            raise ValidationError(
                f"email must be at most {self.settings.MAX_EMAIL_LENGTH} characters", code="email_too_long"
            )

        lang = language.storage_language(payload.language)
        if len(lang) > MAX_LANGUAGE_LENGTH:
            raise ValidationError("language tag is too long", code="language_too_long")

        record = self.store.insert(NewMessage(
            name=name,
            email=email,
            message=body,
            language=lang,
            status=self.gate.initial_status(),
            ip=ip,
        ))
        logger.info("Message %s submitted with status %s", record.id, record.status)
        return record

    # ============ 管理员接口 ============

    def admin_list(
        self,
        status: Optional[str] = None,
        lang: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Thread], Pagination]:
        """全部留言列表, ``status`` 只过滤主留言"""
        if status is not None and status not in MESSAGE_STATUSES:
            raise ValidationError(f"status must be one of {', '.join(MESSAGE_STATUSES)}", code="invalid_status")
        flt = RootFilter(status=status, language=language.language_filter(lang))
        return self._paged_threads(flt, None, page, limit)

    def review(self, message_id: Optional[int], action: Optional[str]) -> MessageRecord:
        if message_id is None:
            raise ValidationError("id is required", code="invalid_id")
        status = self.gate.resolve_action(action)
        record = self.store.update_status(message_id, status)
        if record is None:
            raise NotFound(f"Message {message_id} not found", code="message_not_found")
        logger.info("Message %s reviewed: %s", message_id, status)
        return record

    def delete(self, raw_id: str) -> List[int]:
        try:
            message_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid message id", code="invalid_id")
        if message_id < 1:
            raise ValidationError("Invalid message id", code="invalid_id")

        deleted_ids = self.store.delete_cascade(message_id)
        logger.info("Message %s deleted, removed ids: %s", message_id, deleted_ids)
        return deleted_ids

    def reply(self, payload: ReplyCreate, ip: Optional[str] = None) -> MessageRecord:
        if payload.parent_id is None:
            raise ValidationError("parent_id is required", code="missing_parent_id")
        body = _required_text(payload.message, "message", self.settings.MAX_BODY_LENGTH)

        parent = self.store.get(payload.parent_id)
        if parent is None:
            raise NotFound(f"Message {payload.parent_id} not found", code="parent_not_found")
        if parent.parent_id is not None:
            raise ValidationError("Replies can only be attached to root messages", code="parent_not_root")

        record = self.store.insert(NewMessage(
            name=self.settings.ADMIN_REPLY_NAME,
            message=body,
            language=parent.language,
            parent_id=parent.id,
            is_admin_reply=True,
            status=self.gate.initial_status(is_admin_reply=True),
            ip=ip,
        ))
        logger.info("Admin replied to message %s with %s", parent.id, record.id)
        return record
