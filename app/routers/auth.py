from fastapi import APIRouter, Depends

from app.core.deps import get_gate
from app.schemas.admin import AdminLogin, Token
from app.services.moderation import ModerationGate


router = APIRouter(prefix="/admin", tags=["auth"])


@router.post("/login", response_model=Token)
def login(credentials: AdminLogin, gate: ModerationGate = Depends(get_gate)):
    """管理员登录, 返回 /admin 接口使用的令牌"""
    token = gate.login(credentials.username, credentials.password)
    return Token(token=token, username=credentials.username)
