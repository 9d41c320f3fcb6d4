from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    use_real_llm: bool = False
    llm_api_key: Optional[str] = None
    llm_base_url: str = "https://ai.gateway.lovable.dev/v1"
    llm_model: str = "google/gemini-2.5-flash"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4000
    llm_final_max_tokens: int = 2000
    llm_timeout_seconds: float = 60.0
    # 1 = no retry; upstream failures abort the turn
    llm_max_attempts: int = 1

    # Tool-selection rounds per user turn before the final tools-disabled call
    max_tool_rounds: int = 1

    database_path: str = "./data/agent_hub.db"
    query_default_limit: int = 20
    query_max_limit: int = 100

    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"
    log_level: str = "INFO"

    @property
    def resolved_database_path(self) -> Path:
        path = Path(self.database_path)
        if path.is_absolute():
            return path
        return Path(__file__).resolve().parents[2] / path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
