from typing import List, Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # 应用基础配置
    APP_NAME: str = Field(default='Guestbook API', description='应用名称')
    APP_VERSION: str = Field(default='1.0.0', description='应用版本')
    ENVIRONMENT: Literal['development', 'staging', 'production'] = Field(default='development', description='运行环境')
    DEBUG: bool = Field(default=False, description='调试模式')

    # 服务器配置
    HOST: str = Field(default='0.0.0.0', description='服务器主机')
    PORT: int = Field(default=8090, description='服务器端口')
    API_PREFIX: str = Field(default='/api', description='API 路径前缀')

    # 存储后端: sql = SQLAlchemy 直连, d1 = Cloudflare D1 HTTP API
    STORE_BACKEND: Literal['sql', 'd1'] = Field(default='sql', description='存储后端')
    DATABASE_URL: str = Field(default='sqlite:///./guestbook.db', description='数据库连接URL')
    D1_ACCOUNT_ID: Optional[str] = Field(default=None, description='D1 账户ID')
    D1_DATABASE_ID: Optional[str] = Field(default=None, description='D1 数据库ID')
    D1_API_TOKEN: Optional[str] = Field(default=None, description='D1 API Token')
    D1_BASE_URL: str = Field(default='https://api.cloudflare.com/client/v4', description='D1 API 地址')
    STORE_TIMEOUT_SECONDS: float = Field(default=10.0, description='存储请求超时(秒)')

    # 审核策略: auto_approve = 直接公开, pending = 等待管理员审核
    MODERATION_POLICY: Literal['auto_approve', 'pending'] = Field(default='pending', description='留言审核策略')

    # 管理员
    ADMIN_API_KEY: Optional[str] = Field(default=None, description='管理员 Bearer 密钥')
    ADMIN_USERNAME: Optional[str] = Field(default=None, description='管理员用户名')
    ADMIN_PASSWORD: Optional[str] = Field(default=None, description='管理员密码')
    ADMIN_REPLY_NAME: str = Field(default='Admin', description='管理员回复显示名称')

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = Field(default=['*'], description='允许的跨域来源')

    # 留言限制与分页
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1, description='默认分页大小')
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, description='最大分页大小')
    MAX_BODY_LENGTH: int = Field(default=2000, ge=1, description='留言最大长度')
    MAX_NAME_LENGTH: int = Field(default=50, ge=1, description='昵称最大长度')
    MAX_EMAIL_LENGTH: int = Field(default=100, ge=1, description='邮箱最大长度')

    # 日志
    LOG_LEVEL: str = Field(default='INFO', description='日志级别')
    LOG_JSON_FORMAT: bool = Field(default=False, description='是否输出 JSON 日志')
    LOG_DIR: str = Field(default='', description='日志目录，为空则只输出到控制台')
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024, description='单个日志文件大小')
    LOG_BACKUP_COUNT: int = Field(default=5, description='日志文件保留数量')

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=True, extra='ignore')

    @model_validator(mode='after')
    def check_d1_settings(self) -> 'Settings':
        if self.STORE_BACKEND == 'd1':
            missing = [
                name for name in ('D1_ACCOUNT_ID', 'D1_DATABASE_ID', 'D1_API_TOKEN')
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"STORE_BACKEND=d1 requires {', '.join(missing)}")
        return self

    @property
    def is_development(self) -> bool:
        """是否为开发环境"""
        return self.ENVIRONMENT == 'development'

    @property
    def is_production(self) -> bool:
        """是否为生产环境"""
        return self.ENVIRONMENT == 'production'


# 根据环境加载不同配置文件
def get_settings() -> Settings:
    import os
    import pathlib

    # 项目根目录（settings 在 app/core/）
    BASE_DIR = pathlib.Path(__file__).resolve().parent.parent.parent

    env = os.getenv('ENVIRONMENT', 'development')

    env_file_map = {
        'development': BASE_DIR / '.env.dev',
        'staging': BASE_DIR / '.env.staging',
        'production': BASE_DIR / '.env.prod',
    }
    env_file = env_file_map.get(env, BASE_DIR / '.env')
    if not env_file.exists():
        env_file = BASE_DIR / '.env'

    return Settings(_env_file=env_file)
