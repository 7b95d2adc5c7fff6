# Fichier: frailearn/core/config.py
import sys
from typing import Optional

from pydantic import AnyHttpUrl, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    ENVIRONMENT: str = "development"

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300
    DATABASE_CONNECTION_MAX_RETRIES: int = 3
    DATABASE_CONNECTION_RETRY_BACKOFF_SECONDS: float = 1.0

    # --- Gating policy ---
    # Thresholds are copied onto each TestAttempt when it is created; grading
    # always reads the value stored on the attempt.
    PROGRESS_TEST_PASSING_SCORE: int = 80
    BRIDGE_FINAL_PASSING_SCORE: int = 80
    CHAPTERS_PER_SECTION: int = 5

    # --- Curriculum / test content generation ---
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    AI_JSON_MAX_RETRIES: int = 2

    # --- HTTP API used by the reproduction scripts ---
    API_BASE_URL: AnyHttpUrl = "http://localhost:8000/api"
    API_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure Postgres URLs always use the psycopg (v3) driver.

        Managed Postgres providers still hand out ``postgres://`` URLs, which
        SQLAlchemy no longer accepts, and plain ``postgresql://`` would select
        psycopg2. Both are upgraded to ``postgresql+psycopg://``; SQLite and
        explicit driver choices other than psycopg2 are left untouched.
        """

        if not isinstance(value, str):
            return value

        if "+psycopg://" in value:
            return value

        replacements = {
            "postgres://": "postgresql+psycopg://",
            "postgresql://": "postgresql+psycopg://",
            "postgresql+psycopg2://": "postgresql+psycopg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value

    @field_validator("PROGRESS_TEST_PASSING_SCORE", "BRIDGE_FINAL_PASSING_SCORE")
    @classmethod
    def _check_passing_score(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("passing score must be between 0 and 100")
        return value


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The exception is raised while the module is imported, usually from a
    script entry point, so the offending variable is listed on stderr before
    the traceback.
    """

    print("Configuration error while loading environment variables:", file=sys.stderr)

    details = exc.errors()
    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint = f"{message} (type={type_name})" if type_name else message
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
