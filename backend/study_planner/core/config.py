from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class Settings(BaseSettings):
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )
    log_level: str = Field(default="INFO")
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7)

    groq_api_key: str | None = Field(default=None)
    groq_model: str = Field(default="llama-3.3-70b-versatile")
    groq_base_url: str = Field(default=GROQ_BASE_URL)
    llm_timeout_seconds: float = Field(default=30.0)
    max_response_chars: int = Field(default=10_000)

    client_url: str = Field(default="http://localhost:5173")
    server_url: str = Field(default="http://localhost:8000")
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    storage_backend: Literal["cloudinary", "local"] = Field(default="cloudinary")
    local_storage_dir: str = Field(default="uploads")
    cloudinary_cloud_name: str | None = Field(default=None)
    cloudinary_api_key: str | None = Field(default=None)
    cloudinary_api_secret: str | None = Field(default=None)
    download_timeout_seconds: float = Field(default=30.0)
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
