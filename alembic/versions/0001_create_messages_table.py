"""create messages table

Revision ID: 0001_create_messages
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_create_messages'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=50), nullable=False, comment='昵称'),
        sa.Column('email', sa.String(length=100), nullable=True, comment='联系邮箱'),
        sa.Column('message', sa.Text(), nullable=False, comment='留言内容'),
        sa.Column('language', sa.String(length=32), nullable=False, server_default='global', comment='语言标签'),
        sa.Column('parent_id', sa.Integer(), nullable=True, comment='父留言ID'),
        sa.Column('is_admin_reply', sa.Boolean(), nullable=False, server_default=sa.false(), comment='是否管理员回复'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending', comment='审核状态'),
        sa.Column('ip', sa.String(length=64), nullable=True, comment='提交者IP'),
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, comment='更新时间'),
    )
    op.create_index('idx_status', 'messages', ['status'])
    op.create_index('idx_created_at', 'messages', ['created_at'])
    op.create_index('ix_messages_parent_id', 'messages', ['parent_id'])


def downgrade() -> None:
    op.drop_index('ix_messages_parent_id', table_name='messages')
    op.drop_index('idx_created_at', table_name='messages')
    op.drop_index('idx_status', table_name='messages')
    op.drop_table('messages')
