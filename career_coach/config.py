import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    insight_model: str = Field("gpt-5-mini", alias="CAREER_COACH_INSIGHT_MODEL")
    insight_reasoning: Literal["minimal", "low", "medium", "high"] = Field("low", alias="CAREER_COACH_INSIGHT_REASONING")
    insight_refresh_days: int = Field(7, ge=1, alias="CAREER_COACH_INSIGHT_REFRESH_DAYS")
    database_url: Optional[str] = Field(None, alias="CAREER_COACH_DATABASE_URL")
    database_pool_size: int = Field(10, alias="CAREER_COACH_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(10, alias="CAREER_COACH_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="CAREER_COACH_DATABASE_ECHO")
    transaction_timeout_seconds: float = Field(10.0, gt=0, alias="CAREER_COACH_TRANSACTION_TIMEOUT")
    transaction_isolation_level: Literal["READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"] = Field(
        "READ COMMITTED",
        alias="CAREER_COACH_TRANSACTION_ISOLATION",
    )
    identity_header: str = Field("X-User-Id", alias="CAREER_COACH_IDENTITY_HEADER")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()  # type: ignore[arg-type]
        if settings.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
        return settings
    except ValidationError as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc
