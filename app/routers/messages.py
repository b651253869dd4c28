from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from app.core.deps import get_client_ip, get_service
from app.schemas.common import PagedResponse
from app.schemas.message import MessageCreate, MessageCreated, PublicThread
from app.services.guestbook import GuestbookService


router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=PagedResponse[PublicThread])
def get_messages(
    lang: Optional[str] = Query(None, description="language tag, or 'all'"),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    service: GuestbookService = Depends(get_service),
):
    """获取已审核留言列表 (最新在前)"""
    threads, pagination = service.list_feed(lang=lang, page=page, limit=limit)
    return PagedResponse[PublicThread](
        data=[PublicThread.model_validate(thread.to_dict()) for thread in threads],
        pagination=pagination,
    )


@router.post("", response_model=MessageCreated, status_code=status.HTTP_201_CREATED)
def create_message(
    message_data: MessageCreate,
    request: Request,
    service: GuestbookService = Depends(get_service),
):
    """发布留言"""
    record = service.submit(message_data, ip=get_client_ip(request))
    return MessageCreated(data=record.model_dump())
