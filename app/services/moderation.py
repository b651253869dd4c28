"""
审核策略: 新留言初始状态, 审核动作, 管理员凭证校验
"""
import hmac
import logging
from typing import Optional

from app.core.config import Settings
from app.core.errors import ConfigurationError, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

AUTO_APPROVE = "auto_approve"
PENDING = "pending"

# 审核动作 -> 结果状态
REVIEW_ACTIONS = {
    "approve": "approved",
    "reject": "rejected",
}


def _secure_equals(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class ModerationGate:
    def __init__(
        self,
        policy: str = PENDING,
        admin_api_key: Optional[str] = None,
        admin_username: Optional[str] = None,
        admin_password: Optional[str] = None,
    ):
        if policy not in (AUTO_APPROVE, PENDING):
            raise ValueError(f"Unknown moderation policy: {policy}")
        self.policy = policy
        self._admin_api_key = admin_api_key
        self._admin_username = admin_username
        self._admin_password = admin_password

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModerationGate":
        return cls(
            policy=settings.MODERATION_POLICY,
            admin_api_key=settings.ADMIN_API_KEY,
            admin_username=settings.ADMIN_USERNAME,
            admin_password=settings.ADMIN_PASSWORD,
        )

    def initial_status(self, is_admin_reply: bool = False) -> str:
        """新留言的初始状态, 管理员回复始终直接发布"""
        if is_admin_reply or self.policy == AUTO_APPROVE:
            return "approved"
        return "pending"

    def resolve_action(self, action: Optional[str]) -> str:
        """将审核动作映射为目标状态

        已审核的留言可以再次审核, 以最后一次为准
        """
        status = REVIEW_ACTIONS.get((action or "").strip().lower())
        if status is None:
            raise ValidationError("action must be 'approve' or 'reject'", code="invalid_status")
        return status

    def verify_token(self, token: Optional[str]) -> None:
        """校验管理员令牌"""
        if not self._admin_api_key or not token:
            raise Unauthorized()
        if not _secure_equals(token, self._admin_api_key):
            raise Unauthorized()

    def login(self, username: Optional[str], password: Optional[str]) -> str:
        """管理员用户名/密码登录, 返回令牌"""
        if not username or not password:
            raise ValidationError("username and password are required", code="missing_credentials")
        if not (self._admin_username and self._admin_password and self._admin_api_key):
            logger.error("Admin login attempted but admin credentials are not configured")
            raise ConfigurationError("Admin credentials are not configured", code="admin_not_configured")

        # 两次比较都会执行
        user_ok = _secure_equals(username, self._admin_username)
        password_ok = _secure_equals(password, self._admin_password)
        if not (user_ok and password_ok):
            logger.warning("Admin login failed for user: %s", username)
            raise Unauthorized("Invalid username or password", code="invalid_credentials")

        logger.info("Admin logged in: %s", username)
        return self._admin_api_key
