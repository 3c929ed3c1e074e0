"""
Configuration loader for Oddsy.

Loads configuration from a YAML file with support for environment
variable interpolation. When no file exists, every section falls back to
its environment variables and built-in defaults, so a bare `.env` with API
keys is enough to run.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import (
    OrchestratorConfig,
    UpstreamConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

_app_config: Optional[AppConfig] = None


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars resolved
    """

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _parse_orchestrator_config(data: dict) -> OrchestratorConfig:
    """Parse orchestrator configuration from dict."""
    return OrchestratorConfig(
        base_url=data.get(
            "base_url", os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
        ),
        model=data.get("model", os.getenv("ORCHESTRATOR_MODEL", "gpt-4-turbo-preview")),
        api_key=data.get("api_key", os.getenv("OPENAI_API_KEY", "")),
        temperature=float(
            data.get("temperature", os.getenv("ORCHESTRATOR_TEMPERATURE", "0.7"))
        ),
        max_steps=int(data.get("max_steps", os.getenv("MAX_ORCHESTRATION_STEPS", "5"))),
        timeout=float(data.get("timeout", os.getenv("ORCHESTRATOR_TIMEOUT", "60"))),
    )


def _parse_upstream_config(data: dict) -> UpstreamConfig:
    """Parse upstream API configuration from dict."""
    return UpstreamConfig(
        odds_api_key=data.get("odds_api_key", os.getenv("ODDS_API_KEY", "")),
        sports_api_key=data.get("sports_api_key", os.getenv("SPORTS_API_KEY", "")),
        tavily_api_key=data.get("tavily_api_key", os.getenv("TAVILY_API_KEY", "")),
        timeout=float(data.get("timeout", os.getenv("UPSTREAM_TIMEOUT", "15"))),
        max_retries=int(data.get("max_retries", os.getenv("UPSTREAM_MAX_RETRIES", "3"))),
        retry_base_delay=float(
            data.get("retry_base_delay", os.getenv("UPSTREAM_RETRY_BASE_DELAY", "1.0"))
        ),
        max_items=int(data.get("max_items", os.getenv("UPSTREAM_MAX_ITEMS", "5"))),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server configuration from dict."""
    return ServerConfig(
        host=data.get("host", os.getenv("SERVER_HOST", "0.0.0.0")),
        port=int(data.get("port", os.getenv("SERVER_PORT", "8000"))),
        workers=int(data.get("workers", os.getenv("SERVER_WORKERS", "1"))),
        reload=_as_bool(data.get("reload", os.getenv("SERVER_RELOAD", "false"))),
    )


def _parse_logging_config(data: dict) -> LoggingConfig:
    """Parse logging configuration from dict."""
    return LoggingConfig(level=data.get("level", os.getenv("LOG_LEVEL", "INFO")))


def _parse_langfuse_config(data: dict) -> LangfuseConfig:
    """Parse Langfuse configuration from dict."""
    return LangfuseConfig(
        public_key=data.get("public_key", os.getenv("LANGFUSE_PUBLIC_KEY", "")),
        secret_key=data.get("secret_key", os.getenv("LANGFUSE_SECRET_KEY", "")),
        host=data.get("host", os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")),
        debug=_as_bool(data.get("debug", os.getenv("LANGFUSE_DEBUG", "false"))),
    )


def build_app_config(raw_config: Optional[dict] = None) -> AppConfig:
    """
    Build an AppConfig from an already-loaded mapping.

    Missing sections and keys fall back to environment variables, then
    to defaults.
    """
    raw_config = _substitute_env_vars_recursive(raw_config or {})

    return AppConfig(
        version=str(raw_config.get("version", "1.0")),
        orchestrator=_parse_orchestrator_config(raw_config.get("orchestrator") or {}),
        upstream=_parse_upstream_config(raw_config.get("upstream") or {}),
        server=_parse_server_config(raw_config.get("server") or {}),
        logging=_parse_logging_config(raw_config.get("logging") or {}),
        langfuse=_parse_langfuse_config(raw_config.get("langfuse") or {}),
    )


def load_app_config(path: Optional[str] = None, reload: bool = False) -> AppConfig:
    """
    Load unified application configuration.

    Uses a singleton pattern - subsequent calls return the cached config
    unless reload=True is specified.

    Args:
        path: Path to the YAML configuration file. If None, uses
              CONFIG_PATH env var or the default path (config/config.yaml).
        reload: If True, force reload from disk instead of using cache.

    Returns:
        AppConfig with all configuration loaded

    Raises:
        ValueError: If the file exists but does not hold a mapping
    """
    global _app_config

    if _app_config is not None and not reload:
        return _app_config

    if path is None:
        path = os.environ.get("CONFIG_PATH", str(DEFAULT_CONFIG_PATH))

    config_path = Path(path)

    raw_config: dict = {}
    if config_path.exists():
        logger.info(f"Loading configuration from {config_path}")
        with open(config_path, "r") as f:
            loaded = yaml.safe_load(f)
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        raw_config = loaded or {}
    else:
        logger.debug(
            f"No configuration file at {config_path}, using environment and defaults"
        )

    app_config = build_app_config(raw_config)
    _app_config = app_config

    logger.debug(
        "Configuration loaded: version=%s, model=%s, max_steps=%d",
        app_config.version,
        app_config.orchestrator.model,
        app_config.orchestrator.max_steps,
    )
    return app_config


def reset_config_cache() -> None:
    """Reset the configuration cache, forcing a reload on next access."""
    global _app_config
    _app_config = None
    logger.debug("Configuration cache reset")
