"""
Data models for Oddsy.
"""

from .config import (
    OrchestratorConfig,
    UpstreamConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

__all__ = [
    "OrchestratorConfig",
    "UpstreamConfig",
    "ServerConfig",
    "LoggingConfig",
    "LangfuseConfig",
    "AppConfig",
]
