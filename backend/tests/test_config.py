"""配置加载测试"""
from app.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("USAGE_RETENTION_DAYS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.USAGE_RETENTION_DAYS == 730
        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite")
        assert settings.admin_roles_list == ["admin", "super_admin"]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("USAGE_RETENTION_DAYS", "30")
        monkeypatch.setenv("ADMIN_ROLES", "owner, admin")
        settings = Settings(_env_file=None)
        assert settings.USAGE_RETENTION_DAYS == 30
        assert settings.admin_roles_list == ["owner", "admin"]

    def test_empty_env_falls_back_to_default(self, monkeypatch):
        monkeypatch.setenv("FEATURED_TOOLS_LIMIT", "")
        settings = Settings(_env_file=None)
        assert settings.FEATURED_TOOLS_LIMIT == 6

    def test_cors_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, ,http://b.test")
        settings = Settings(_env_file=None)
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
