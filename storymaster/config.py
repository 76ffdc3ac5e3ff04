"""StoryMaster configuration — loaded from environment / .env file."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="STORYMASTER_", extra="ignore")

    env: str = "development"
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///./storymaster.db"

    # Agent library: agents/*.md plus data/, tasks/, templates/, utils/ resources
    agent_library_dir: Path = Path("agent-library")

    # Provider gateway
    provider_fallback_order: list[str] = ["Gemini", "OpenAI", "Anthropic"]
    provider_timeout_seconds: float = 30.0

    # Usage monitor
    session_history_capacity: int = 1000

    # Auth stub
    token_ttl_hours: int = 24

    cors_origins: list[str] = ["http://localhost:3000"]

    @property
    def agents_dir(self) -> Path:
        return self.agent_library_dir / "agents"


settings = Settings()
