from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database (connection string carries the database name)
    database_url: str = "sqlite:///./chat.db"

    # LLM provider (OpenAI-compatible chat completions)
    llm_api_key: str = ""
    llm_api_url: str = "https://api.openai.com/v1/chat/completions"
    llm_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 60.0

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:5173"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
