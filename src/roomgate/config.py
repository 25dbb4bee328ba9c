"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env()`` fills it from
``ROOMGATE_*`` environment variables through ``EnvSettings``.
"""

from dataclasses import dataclass
from typing import Self

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from roomgate.errors import ConfigurationError

ENV_PREFIX = "ROOMGATE_"


class EnvSettings(BaseSettings):
    """``ROOMGATE_*`` variables, parsed and type-checked.

    Unset variables stay unset so ``AppConfig`` keeps its own defaults.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    host: str | None = None
    port: int | None = None
    debug: bool | None = None
    auth_timeout: float | None = None
    metrics_path: str | None = None
    log_level: str | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, auth_timeout=2.0)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    # Authentication gate: seconds to wait on the session store
    auth_timeout: float = 5.0

    # Metrics exposition
    metrics_path: str = "/metrics"

    # Logging
    log_level: str = "info"

    def __post_init__(self) -> None:
        if self.auth_timeout <= 0:
            msg = "AppConfig.auth_timeout must be positive."
            raise ConfigurationError(msg)

    @classmethod
    def from_env(cls) -> Self:
        """Build a config from ``ROOMGATE_*`` variables.

        ``ROOMGATE_PORT=9000`` sets ``port``; unset variables keep defaults.
        """
        try:
            settings = EnvSettings()
        except ValidationError as exc:
            names = ", ".join(ENV_PREFIX + str(err["loc"][0]).upper() for err in exc.errors())
            msg = f"Invalid environment configuration: {names}"
            raise ConfigurationError(msg) from exc
        return cls(**settings.model_dump(exclude_unset=True))
