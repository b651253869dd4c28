from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


MessageStatus = Literal["pending", "approved", "rejected"]
MESSAGE_STATUSES = ("pending", "approved", "rejected")


class NewMessage(BaseModel):
    """待写入存储的留言 (已校验、已归一化)"""
    name: str
    message: str
    email: Optional[str] = None
    language: str = "global"
    parent_id: Optional[int] = None
    is_admin_reply: bool = False
    status: MessageStatus = "pending"
    ip: Optional[str] = None


class MessageRecord(NewMessage):
    """存储中的完整留言行"""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============ 请求体 ============
# 字段均为可选，缺失或为空由服务层统一报 400 和错误码

class MessageCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    language: Optional[str] = None


class ReviewRequest(BaseModel):
    id: Optional[int] = None
    action: Optional[str] = None


class ReplyCreate(BaseModel):
    parent_id: Optional[int] = None
    message: Optional[str] = None


# ============ 响应体 ============

class PublicMessage(BaseModel):
    """公开留言: 不包含 email / ip"""
    id: int
    name: str
    message: str
    language: str
    parent_id: Optional[int] = None
    is_admin_reply: bool = False
    status: MessageStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminMessage(PublicMessage):
    email: Optional[str] = None
    ip: Optional[str] = None


class PublicThread(PublicMessage):
    replies: List[PublicMessage] = []
    reply_count: int = 0


class AdminThread(AdminMessage):
    replies: List[AdminMessage] = []
    reply_count: int = 0


class MessageCreated(BaseModel):
    success: bool = True
    data: PublicMessage


class ReplyCreated(BaseModel):
    success: bool = True
    data: AdminMessage


class ReviewResult(BaseModel):
    success: bool = True
    id: int
    status: MessageStatus


class DeleteResult(BaseModel):
    success: bool = True
    deleted_ids: List[int]
