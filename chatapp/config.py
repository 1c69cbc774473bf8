"""Global configuration using pydantic settings management.

Values are loaded from environment variables (or an .env file) and
exposed via the cached `get_settings()` accessor.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

_DEFAULT_INSTRUCTION = (
    "You are a helpful assistant that acts as humanly as possible. "
    "You always listen to the user and never ignore their request. "
    "Respond in a friendly, conversational way, as if you're a caring and attentive human. "
    "You can provide detailed explanations, examples and practical advice."
)


class Settings(BaseSettings):
    """Application configuration loaded from env or defaults."""

    # Gemini
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_backup_api_key: str = Field(default="", alias="GEMINI_BACKUP_API_KEY")
    default_model: str = Field(default="gemini-1.5-flash", alias="DEFAULT_MODEL")
    max_output_tokens: int = Field(default=4096, alias="MAX_OUTPUT_TOKENS")
    system_instruction: str = Field(default=_DEFAULT_INSTRUCTION, alias="SYSTEM_INSTRUCTION")

    # --- Chat Settings ---
    max_chat_title_length: int = Field(default=50, alias="MAX_CHAT_TITLE_LENGTH")

    # Session store; unset means bundles live for the process lifetime
    max_sessions: Optional[int] = Field(default=None, alias="MAX_SESSIONS")

    # Uploads
    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # HTTP
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    # CORS - accept comma-separated string
    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS origins to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
