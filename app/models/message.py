from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Index

from app.core.database import Base


class Message(Base):
    """留言 - parent_id 为空表示根留言，否则为对根留言的回复"""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, comment="昵称")
    email = Column(String(100), nullable=True, comment="联系邮箱")
    message = Column(Text, nullable=False, comment="留言内容")
    language = Column(String(32), nullable=False, default="global", comment="语言标签")

    # 回复: 只引用根留言，不依赖数据库外键级联
    parent_id = Column(Integer, nullable=True, index=True, comment="父留言ID")
    is_admin_reply = Column(Boolean, nullable=False, default=False, comment="是否管理员回复")

    # pending / approved / rejected
    status = Column(String(16), nullable=False, default="pending", comment="审核状态")
    ip = Column(String(64), nullable=True, comment="提交者IP")

    created_at = Column(DateTime, nullable=False, comment="创建时间")
    updated_at = Column(DateTime, nullable=False, comment="更新时间")

    __table_args__ = (
        Index("idx_status", "status"),
        Index("idx_created_at", "created_at"),
    )
