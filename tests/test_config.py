from dataclasses import fields

from quizmaster.config import Settings


class TestSettingsFromEnv:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
        monkeypatch.setenv("COURSE_API_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("GLOBAL_LEADERBOARD_LIMIT", "10")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite:///./other.db"
        assert settings.course_api_max_attempts == 5
        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert settings.global_leaderboard_limit == 10
        assert settings.log_level == "DEBUG"

    def test_carries_only_settings_the_service_reads(self):
        """Tokens are issued elsewhere, so there is no token lifetime here."""
        names = {f.name for f in fields(Settings)}
        assert "access_token_ttl_minutes" not in names
        assert {"jwt_secret", "jwt_algorithm", "external_course_api"} <= names
