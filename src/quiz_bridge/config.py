"""Configuration loading and validation."""

import os
from pathlib import Path
from typing import Annotated

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewayConfig(BaseModel):
    """Control-channel server configuration."""

    # Localhost only unless explicitly overridden
    host: str = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535)] = 3001
    token: SecretStr | None = None
    auth_timeout_seconds: Annotated[float, Field(gt=0.0)] = 5.0


class QuizConfig(BaseModel):
    """Quiz message and reaction configuration."""

    question_template: str = "📝 Quiz: {question}\n\nReply with your answer!"
    correct_message: str = "✅ Correct!"
    correct_reaction: str = "✅"
    partial_reaction: str = "✨"
    close_reaction: str = "🔍"


class TransportConfig(BaseModel):
    """Messaging transport configuration."""

    factory: str | None = None  # "package.module:callable"
    auth_dir: Path = Path("./data/auth")


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZ_BRIDGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    quiz: QuizConfig = Field(default_factory=QuizConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
    1. YAML config file
    2. Environment variables (QUIZ_BRIDGE_* prefix)
    3. Default values

    Args:
        config_path: Path to YAML config file. If None, tries ./config.yaml

    Returns:
        Validated configuration object
    """
    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    yaml_config: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}

    # "gateway:" with no values parses as None
    yaml_config = {k: v for k, v in yaml_config.items() if v is not None}

    return Config(**yaml_config)


def load_legacy_env(config: Config) -> Config:
    """Fill unset values from the bare BRIDGE_TOKEN/BRIDGE_PORT/AUTH_DIR variables.

    A value set in the YAML file or through a QUIZ_BRIDGE_* variable is kept.
    """
    if not config.gateway.token:
        token = os.getenv("BRIDGE_TOKEN")
        if token:
            config.gateway.token = SecretStr(token)

    port = os.getenv("BRIDGE_PORT")
    if port and "port" not in config.gateway.model_fields_set:
        config.gateway = config.gateway.model_copy(update={"port": int(port)})

    auth_dir = os.getenv("AUTH_DIR")
    if auth_dir and "auth_dir" not in config.transport.model_fields_set:
        config.transport.auth_dir = Path(auth_dir)

    return config
