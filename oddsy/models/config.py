"""
Configuration models for Oddsy.

Defines dataclasses for the unified YAML configuration file.
"""

from dataclasses import dataclass, field


@dataclass
class OrchestratorConfig:
    """Configuration for the model that drives the tool loop."""
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4-turbo-preview"
    api_key: str = ""
    temperature: float = 0.7
    max_steps: int = 5
    timeout: float = 60.0


@dataclass
class UpstreamConfig:
    """Credentials and call policy for the upstream data APIs.

    A family whose key is empty is simply not offered to the model.
    """
    odds_api_key: str = ""
    sports_api_key: str = ""
    tavily_api_key: str = ""
    timeout: float = 15.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    max_items: int = 5


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = ""
    secret_key: str = ""
    host: str = "https://cloud.langfuse.com"
    debug: bool = False

    @property
    def is_configured(self) -> bool:
        """Check if Langfuse is configured (both keys present)."""
        return bool(self.public_key and self.secret_key)


@dataclass
class AppConfig:
    """
    Unified application configuration container.

    Holds all configuration sections loaded from config/config.yaml.
    """
    version: str = "1.0"
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)

    @property
    def log_level(self) -> str:
        return self.logging.level
