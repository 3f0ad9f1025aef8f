"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Aurora configuration. All values come from environment variables."""

    # Telegram
    telegram_bot_token: str = Field(default="")
    allowed_user_ids: str = Field(default="")

    # Anthropic
    anthropic_api_key: str = Field(default="")
    chat_model: str = Field(default="claude-sonnet-4-5-20250929")
    llm_max_tokens: int = Field(default=1024)

    # Database
    database_path: Path = Field(default=Path("data/aurora.db"))

    # Conversation
    conversation_window_size: int = Field(default=50)
    timezone: str = Field(default="Africa/Johannesburg")

    # Persona and creator gate
    persona_name: str = Field(default="Aurora")
    creator_name: str = Field(default="Calvin")
    creator_phrase: str = Field(default="i am calvin")
    creator_password: str = Field(default="1945")

    # Search and fact engines (each optional; absent means mock or skip)
    google_search_api_key: str = Field(default="")
    google_search_cx: str = Field(default="")
    duckduckgo_enabled: bool = Field(default=False)
    wolfram_app_id: str = Field(default="")
    http_timeout_seconds: float = Field(default=15.0)

    # Connectivity
    connectivity_probe_url: str = Field(default="https://www.gstatic.com/generate_204")
    connectivity_ttl_seconds: float = Field(default=30.0)
    force_offline: bool = Field(default=False)

    # Speech
    speech_enabled: bool = Field(default=False)
    speech_rate: int = Field(default=200)
    low_confidence_threshold: float = Field(default=0.70)
    deepgram_api_key: str = Field(default="")
    deepgram_model: str = Field(default="nova-2")
    deepgram_language: str = Field(default="en-US")

    # Notifications
    default_notification_channel: str = Field(default="telegram")

    # Logging
    log_level: str = Field(default="INFO")
    log_buffer_size: int = Field(default=50)

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_allowed_user_ids(self) -> set[int]:
        """Parse ALLOWED_USER_IDS into a set of ints."""
        if not self.allowed_user_ids.strip():
            return set()
        return {int(uid.strip()) for uid in self.allowed_user_ids.split(",") if uid.strip()}

    @property
    def voice_input_enabled(self) -> bool:
        return bool(self.deepgram_api_key)

    @property
    def google_search_enabled(self) -> bool:
        return bool(self.google_search_api_key and self.google_search_cx)


settings = Settings()
