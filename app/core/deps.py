from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.services.guestbook import GuestbookService
from app.services.moderation import ModerationGate


bearer_scheme = HTTPBearer(auto_error=False)


def get_service(request: Request) -> GuestbookService:
    """Dependency to get the guestbook service built at startup"""
    return request.app.state.service


def get_gate(request: Request) -> ModerationGate:
    return request.app.state.service.gate


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("cf-connecting-ip") or request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    gate: ModerationGate = Depends(get_gate),
) -> None:
    """Raises ``Unauthorized`` unless the bearer token is the admin secret."""
    gate.verify_token(credentials.credentials if credentials else None)
