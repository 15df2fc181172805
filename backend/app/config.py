"""应用配置"""
from pydantic_settings import BaseSettings
from pydantic import model_validator
from typing import List


class Settings(BaseSettings):
    """应用配置类"""

    # 应用信息
    APP_NAME: str = "Heritage Tools Platform"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # 数据库配置
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/heritage_tools.db"

    # CORS配置
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # 使用记录保留策略（天），超过窗口的记录由后台任务清理
    USAGE_RETENTION_DAYS: int = 730
    USAGE_PURGE_INTERVAL_SEC: int = 3600

    # 列表默认条数
    FEATURED_TOOLS_LIMIT: int = 6
    CATEGORY_TOOLS_LIMIT: int = 10
    RECENT_REVIEWS_LIMIT: int = 10
    TOP_USERS_LIMIT: int = 10

    # 具备管理权限的角色，逗号分隔
    ADMIN_ROLES: str = "admin,super_admin"

    @model_validator(mode="before")
    @classmethod
    def treat_empty_env_as_unset(cls, data):
        """
        将空字符串环境变量按“未配置”处理。
        这样 .env 中留空不会覆盖默认值，也避免复杂类型解析报错。
        """
        if not isinstance(data, dict):
            return data

        cleaned = dict(data)
        for field_name, field in cls.model_fields.items():
            default = field.default

            # 仅当字段本身有可用默认值时，空字符串才回退到默认值
            if default in (None, ""):
                continue

            if cleaned.get(field_name) == "":
                cleaned.pop(field_name, None)

        return cleaned

    @property
    def cors_origins_list(self) -> List[str]:
        """获取CORS允许的源列表"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def admin_roles_list(self) -> List[str]:
        """获取管理角色列表"""
        return [role.strip() for role in self.ADMIN_ROLES.split(",") if role.strip()]

    class Config:
        env_file = (".env", "backend/.env")
        case_sensitive = True
        extra = "ignore"


# 全局配置实例
settings = Settings()
