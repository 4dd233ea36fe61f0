"""Runtime configuration for chat-tts."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="CHAT_TTS_", env_file=".env", extra="ignore")

    app_name: str = "chat-tts"
    log_level: str = "INFO"
    settings_file: str = Field(
        default="~/.config/chat-tts/settings.json",
        description="JSON file backing the editable relay options (channels, tags, mute, ...).",
    )
    player_executable: str = Field(
        default="mpg123",
        description="Audio player resolved on PATH and invoked with the artifact path.",
    )
    player_args: list[str] = Field(
        default_factory=list,
        description="Extra player arguments placed before the artifact path.",
    )
    language_code: str = "en-US"
    audio_format: str = "MP3"
    recent_jobs: int = 100


settings = Settings()
