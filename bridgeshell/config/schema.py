"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from bridgeshell.config.defaults import DEFAULT_BRIDGE, DEFAULT_BUS, DEFAULT_LOGGING


class BridgeConfig(BaseModel):
    """How the bridge process is located, launched and terminated."""

    model_config = ConfigDict(extra="ignore")

    project_root: str = str(DEFAULT_BRIDGE["project_root"])
    override_env: str = str(DEFAULT_BRIDGE["override_env"])
    bridge_dir: str = str(DEFAULT_BRIDGE["bridge_dir"])
    entry_point: str = str(DEFAULT_BRIDGE["entry_point"])
    interpreter: str = str(DEFAULT_BRIDGE["interpreter"])
    package_manager: str = str(DEFAULT_BRIDGE["package_manager"])
    dev_task: str = str(DEFAULT_BRIDGE["dev_task"])
    terminate_grace_s: float = Field(default=float(DEFAULT_BRIDGE["terminate_grace_s"]), ge=0)
    kill_wait_warn_s: float = Field(default=float(DEFAULT_BRIDGE["kill_wait_warn_s"]), gt=0)

    @property
    def project_path(self) -> Path:
        return Path(self.project_root).expanduser()


class BusConfig(BaseModel):
    """Event bus configuration (0 means unbounded)."""

    model_config = ConfigDict(extra="ignore")

    maxsize: int = Field(default=int(DEFAULT_BUS["maxsize"]), ge=0)


class LoggingConfig(BaseModel):
    """Loguru sink configuration."""

    model_config = ConfigDict(extra="ignore")

    level: str = str(DEFAULT_LOGGING["level"])
    file: str = str(DEFAULT_LOGGING["file"])
    rotation: str = str(DEFAULT_LOGGING["rotation"])

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = (value or "").strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level


class Config(BaseSettings):
    """Root configuration for bridgeshell."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, env_prefix="BRIDGESHELL_", env_nested_delimiter="__")

    config_version: int = 1
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    bus: BusConfig = Field(default_factory=BusConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
