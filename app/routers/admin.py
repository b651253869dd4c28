"""
管理员接口 (所有路由都需要管理员令牌)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.deps import get_client_ip, get_service, require_admin
from app.schemas.common import PagedResponse
from app.schemas.message import AdminThread, DeleteResult, ReplyCreate, ReplyCreated, ReviewRequest, ReviewResult
from app.services.guestbook import GuestbookService


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/messages", response_model=PagedResponse[AdminThread])
def get_admin_messages(
    status: Optional[str] = Query(None, description="pending / approved / rejected"),
    lang: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    service: GuestbookService = Depends(get_service),
):
    """获取全部留言 (管理员, 含所有状态)"""
    threads, pagination = service.admin_list(status=status, lang=lang, page=page, limit=limit)
    return PagedResponse[AdminThread](
        data=[AdminThread.model_validate(thread.to_dict()) for thread in threads],
        pagination=pagination,
    )


@router.post("/review", response_model=ReviewResult)
def review_message(
    review: ReviewRequest,
    service: GuestbookService = Depends(get_service),
):
    """审核留言 (通过 / 拒绝)"""
    record = service.review(review.id, review.action)
    return ReviewResult(id=record.id, status=record.status)


@router.delete("/messages/{message_id}", response_model=DeleteResult)
def delete_message(
    message_id: str,
    service: GuestbookService = Depends(get_service),
):
    """删除留言及其回复"""
    return DeleteResult(deleted_ids=service.delete(message_id))


@router.post("/reply", response_model=ReplyCreated, status_code=201)
def reply_message(
    reply: ReplyCreate,
    request: Request,
    service: GuestbookService = Depends(get_service),
):
    """管理员回复留言 (直接发布)"""
    record = service.reply(reply, ip=get_client_ip(request))
    return ReplyCreated(data=record.model_dump())
