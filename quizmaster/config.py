import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read once from the environment (and an optional
    .env file) and handed to whatever needs it.
    """

    database_url: str = "sqlite:///./quizmaster.db"
    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    external_course_api: str = "http://localhost:9000/api/v1"
    course_api_timeout: float = 5.0
    course_api_max_attempts: int = 3
    course_api_backoff: float = 0.5
    log_dir: str = "var/logs"
    log_level: str = "INFO"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    global_leaderboard_limit: int = 50

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            external_course_api=os.getenv("EXTERNAL_COURSE_API", cls.external_course_api),
            course_api_timeout=float(os.getenv("COURSE_API_TIMEOUT", cls.course_api_timeout)),
            course_api_max_attempts=int(
                os.getenv("COURSE_API_MAX_ATTEMPTS", cls.course_api_max_attempts)
            ),
            course_api_backoff=float(os.getenv("COURSE_API_BACKOFF", cls.course_api_backoff)),
            log_dir=os.getenv("LOG_DIR", cls.log_dir),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            cors_allow_origins=_split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*")),
            global_leaderboard_limit=int(
                os.getenv("GLOBAL_LEADERBOARD_LIMIT", cls.global_leaderboard_limit)
            ),
        )
