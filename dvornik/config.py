"""Dvornik configuration management.

Configuration sources (in priority order):
1. Environment variables (DVORNIK_ prefix)
2. Config file (dvornik.yaml)
3. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

import structlog
import yaml
from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from dvornik.errors import ConfigurationError
from dvornik.models import PolicyKind, SelectionPolicy

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Dvornik run settings."""

    model_config = SettingsConfigDict(
        env_prefix="DVORNIK_",
        case_sensitive=False,
        # DVORNIK_EXCEPTIONS="" means "no exemptions", not malformed JSON
        env_ignore_empty=True,
    )

    namespace: str = Field(min_length=1)

    # Minimum pod age in minutes
    pod_age: int = Field(gt=0)

    # Label key -> value; pods carrying a matching label are never deleted.
    # Read from the environment as a JSON object.
    exceptions: dict[str, str] = Field(default_factory=dict)

    # Passed through verbatim to the list call (remote_filter policy only)
    label_selector: str | None = None

    policy: PolicyKind = PolicyKind.EXEMPTION

    kubeconfig: str | None = None  # None = in-cluster config

    # Keep deleting after a failed delete; the run still exits non-zero
    continue_on_error: bool = False

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment overrides values loaded from the config file
        return env_settings, init_settings


@dataclass(frozen=True)
class RunParameters:
    """Everything a single pass needs, resolved once at startup."""

    namespace: str
    pod_age_minutes: int
    policy: SelectionPolicy
    kubeconfig: str | None = None
    continue_on_error: bool = False


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. DVORNIK_CONFIG_FILE environment variable
    2. ./dvornik.yaml
    3. /etc/dvornik/config.yaml
    """
    config_paths = [
        os.environ.get("DVORNIK_CONFIG_FILE"),
        Path("dvornik.yaml"),
        Path("/etc/dvornik/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            try:
                with open(path) as f:
                    return yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(
                    f"Cannot read config file {path}: {e}",
                    details={"path": str(path)},
                ) from e

    return {}


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "settings"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: if any value is missing, malformed or out of range
    """
    file_config = _load_config_file()
    try:
        return Settings(**file_config)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {_format_validation_error(e)}",
        ) from e
    except SettingsError as e:
        # Raised by pydantic-settings when a JSON value (DVORNIK_EXCEPTIONS) can't be parsed
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def build_policy(settings: Settings) -> SelectionPolicy:
    """Build the selection policy described by settings."""
    if settings.policy is PolicyKind.REMOTE_FILTER:
        if settings.exceptions:
            logger.warning(
                "config.exceptions_ignored",
                policy=settings.policy.value,
                reason="remote_filter policy does not apply label exemptions",
            )
        return SelectionPolicy.remote_filter(settings.label_selector)

    if settings.label_selector:
        logger.warning(
            "config.label_selector_ignored",
            policy=settings.policy.value,
            reason="exemption policy lists every pod in the namespace",
        )
    return SelectionPolicy.exemption(settings.exceptions)


def load_run_parameters(settings: Settings | None = None) -> RunParameters:
    """Resolve settings into the immutable parameters of one run."""
    if settings is None:
        settings = get_settings()

    return RunParameters(
        namespace=settings.namespace,
        pod_age_minutes=settings.pod_age,
        policy=build_policy(settings),
        kubeconfig=settings.kubeconfig,
        continue_on_error=settings.continue_on_error,
    )
