"""Application configuration contract."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentgate.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="WARNING")
    log_json: int = Field(alias="LOG_JSON", default=0)

    # Shared workspace layout
    workspace_root: str = Field(alias="WORKSPACE_ROOT", default="/home/user")
    sessions_root: str = Field(alias="SESSIONS_ROOT", default="")
    platform_dir: str = Field(alias="PLATFORM_DIR", default="portfolio-platform")
    metrics_dir: str = Field(alias="METRICS_DIR", default="")

    # Team mode
    registry_file: str = Field(alias="REGISTRY_FILE", default=".formation-registry.json")
    agent_id: str = Field(alias="AGENT_ID", default="")

    @property
    def workspace_dir(self) -> str:
        return self.workspace_root.rstrip("/") or "/"

    @property
    def sessions_dir(self) -> str:
        if self.sessions_root.strip():
            return self.sessions_root.strip().rstrip("/") or "/"
        return f"{self.workspace_dir.rstrip('/')}/sessions"

    @property
    def platform_apps_dir(self) -> str:
        return f"{self.workspace_dir.rstrip('/')}/{self.platform_dir.strip('/')}/apps"

    @property
    def metrics_path(self) -> Path:
        if self.metrics_dir.strip():
            return Path(self.metrics_dir).expanduser()
        return Path(self.workspace_dir) / ".agent-metrics"

    @property
    def audit_log_path(self) -> Path:
        return self.metrics_path / "autonomy-changes.log"

    @property
    def task_state_dir(self) -> Path:
        return self.metrics_path / "task-state"


def validate_settings_for_env(settings: Settings) -> None:
    if settings.app_env != "prod":
        return

    invalid: list[str] = []
    if not settings.workspace_root.startswith("/"):
        invalid.append("WORKSPACE_ROOT(absolute path required)")
    if settings.sessions_root.strip() and not settings.sessions_root.startswith("/"):
        invalid.append("SESSIONS_ROOT(absolute path required)")
    if settings.metrics_dir.strip() and not settings.metrics_dir.startswith("/"):
        invalid.append("METRICS_DIR(absolute path required)")
    if not settings.registry_file.strip():
        invalid.append("REGISTRY_FILE")

    if invalid:
        keys = ", ".join(sorted(set(invalid)))
        raise ConfigError(f"invalid production configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
