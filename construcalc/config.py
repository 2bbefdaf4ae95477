"""Global configuration: constants, environment profiles, typed settings, logging setup."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

# Comparison accepts between two and four results
MIN_COMPARISON_RESULTS = 2
MAX_COMPARISON_RESULTS = 4

# Successful runs kept in the engine history
HISTORY_SIZE = 5

# Executed but unsaved results kept by the in-memory store
MAX_PENDING_RESULTS = 50

# Default access-layer settings
DEFAULT_API_URL = "http://localhost:4000/api"
DEFAULT_API_TIMEOUT = 30.0

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Typed view of the merged configuration.

    Each field is fed by one ``CONSTRUCALC_*`` key.  Blank values mean
    "unset" and keep the field default.
    """

    model_config = ConfigDict(frozen=True)

    env: str = "development"
    api_url: str = DEFAULT_API_URL
    api_timeout: float = Field(default=DEFAULT_API_TIMEOUT, gt=0)
    api_token: str | None = None
    log_level: str = "INFO"
    templates_path: Path | None = None

    @field_validator("api_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"API URL must be http(s): {value!r}")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level


# All known configuration keys: settings field, default, description
_CONFIG_KEYS: dict[str, dict[str, str]] = {
    "CONSTRUCALC_ENV": {
        "field": "env", "default": "development", "description": "Environment profile",
    },
    "CONSTRUCALC_API_URL": {
        "field": "api_url", "default": DEFAULT_API_URL, "description": "Calculations API base URL",
    },
    "CONSTRUCALC_API_TIMEOUT": {
        "field": "api_timeout", "default": str(DEFAULT_API_TIMEOUT),
        "description": "API timeout in seconds (> 0)",
    },
    "CONSTRUCALC_API_TOKEN": {
        "field": "api_token", "default": "", "description": "API bearer token (secret)",
    },
    "CONSTRUCALC_LOG_LEVEL": {
        "field": "log_level", "default": "INFO", "description": f"Logging level: {', '.join(_LOG_LEVELS)}",
    },
    "CONSTRUCALC_TEMPLATES_PATH": {
        "field": "templates_path", "default": "", "description": "JSON template catalogue to preload",
    },
}

_PROFILES: dict[str, dict[str, str]] = {
    "development": {
        "CONSTRUCALC_ENV": "development",
        "CONSTRUCALC_LOG_LEVEL": "DEBUG",
    },
    "production": {
        "CONSTRUCALC_ENV": "production",
        "CONSTRUCALC_LOG_LEVEL": "WARNING",
    },
    "testing": {
        "CONSTRUCALC_ENV": "testing",
        "CONSTRUCALC_LOG_LEVEL": "DEBUG",
        "CONSTRUCALC_API_URL": "http://127.0.0.1:0/api",
    },
}


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


class ConfigManager:
    """Resolve engine configuration across environments."""

    def generate_env_template(self, project_path: str | Path) -> Path:
        """Create .env.example with all config keys.

        Returns the path to the generated file.
        """
        env_path = Path(project_path) / ".env.example"

        lines = ["# construcalc configuration", "# Copy to .env and fill in values", ""]
        for key, info in _CONFIG_KEYS.items():
            lines.append(f"# {info['description']}")
            lines.append(f"{key}={info['default']}")
            lines.append("")

        env_path.write_text("\n".join(lines), encoding="utf-8")
        return env_path

    def load_config(self, project_path: str | Path = ".") -> dict[str, str]:
        """Load merged config: defaults -> profile -> config.json -> .env -> env vars."""
        root = Path(project_path)
        config: dict[str, str] = {key: info["default"] for key, info in _CONFIG_KEYS.items()}

        env_name = os.environ.get("CONSTRUCALC_ENV", config["CONSTRUCALC_ENV"])
        if env_name not in _PROFILES:
            logger.warning("Unknown CONSTRUCALC_ENV %r, no profile applied", env_name)
        config.update(_PROFILES.get(env_name, {}))

        config_json = root / ".construcalc" / "config.json"
        if config_json.is_file():
            try:
                data = json.loads(config_json.read_text(encoding="utf-8"))
                for k, v in data.items():
                    config[k] = "" if v is None else str(v)
            except (json.JSONDecodeError, OSError, AttributeError):
                logger.debug("Could not read %s", config_json, exc_info=True)

        env_file = root / ".env"
        if env_file.is_file():
            try:
                for line in env_file.read_text(encoding="utf-8").splitlines():
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    k, v = line.split("=", 1)
                    config[k.strip()] = _unquote(v.strip())
            except OSError:
                logger.debug("Could not read %s", env_file, exc_info=True)

        for key in _CONFIG_KEYS:
            env_val = os.environ.get(key)
            if env_val is not None:
                config[key] = env_val

        return config

    def load_settings(
        self,
        project_path: str | Path = ".",
        config: dict[str, str] | None = None,
    ) -> Settings:
        """Build :class:`Settings` from *config* (or :meth:`load_config`).

        An invalid value is logged and replaced by the field default, so
        one bad key never prevents the rest from loading.
        """
        if config is None:
            config = self.load_config(project_path)

        values: dict[str, str] = {}
        for key, info in _CONFIG_KEYS.items():
            raw = (config.get(key) or "").strip()
            if not raw:
                continue
            field = info["field"]
            try:
                Settings.model_validate({field: raw})
            except PydanticValidationError:
                logger.warning(
                    "Invalid %s %r, using %r", key, raw, Settings.model_fields[field].default
                )
                continue
            values[field] = raw

        return Settings.model_validate(values)


def configure_logging(level: str | int | Settings | None = None) -> None:
    """Configure root logging for embedding shells (CLI, services).

    *level* may be a level name or number, or :class:`Settings`; it
    defaults to ``CONSTRUCALC_LOG_LEVEL`` from the environment.
    """
    if isinstance(level, Settings):
        level = level.log_level
    if level is None:
        level = os.environ.get("CONSTRUCALC_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
