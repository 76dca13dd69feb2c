"""Configuration management with Pydantic settings."""

import os
from typing import Optional
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
import yaml

from uptime_report.errors import ConfigurationError


DEFAULT_CONFIG_PATH = "config/config.yaml"


class ProviderConfig(BaseModel):
    """Pingdom API connection settings."""
    api_url: str = "https://api.pingdom.com/api/3.1"
    api_key: str = ""
    timeout: int = 30

    @field_validator('api_url')
    @classmethod
    def api_url_must_be_http(cls, v):
        if v and not v.startswith(("http://", "https://")):
            raise ValueError('api_url must start with http:// or https://')
        return v.rstrip("/")

    @field_validator('timeout')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('timeout must be at least 1 second')
        return v


class PipelineConfig(BaseModel):
    """Fetch pipeline settings."""
    max_concurrency: int = 10
    request_interval: float = 0.2
    run_timeout: Optional[float] = None

    @field_validator('max_concurrency')
    @classmethod
    def max_concurrency_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('max_concurrency must be at least 1')
        return v

    @field_validator('request_interval')
    @classmethod
    def request_interval_must_be_non_negative(cls, v):
        if v < 0:
            raise ValueError('request_interval must be non-negative')
        return v

    @field_validator('run_timeout')
    @classmethod
    def run_timeout_must_be_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError('run_timeout must be positive when set')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "WARNING"
    format: str = "text"
    file: Optional[str] = None
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v

    @field_validator('format')
    @classmethod
    def log_format_must_be_valid(cls, v):
        if v not in ('json', 'text'):
            raise ValueError('log format must be "json" or "text"')
        return v


class MetricsConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = False
    textfile: Optional[str] = None

    @model_validator(mode='after')
    def textfile_required_if_enabled(self):
        if self.enabled and not self.textfile:
            raise ValueError('textfile must be set when metrics are enabled')
        return self


class Config(BaseModel):
    """Main configuration class."""
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)


def _load_env_file(path: str = ".env") -> None:
    """Export KEY=VALUE lines from a .env file without overriding the environment."""
    if not os.path.exists(path):
        return
    try:
        with open(path, "r") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")
                    os.environ.setdefault(key, value)
    except OSError as e:
        raise ConfigurationError(f"Could not read {path}: {e}") from e


def _section(config_data: dict, name: str) -> dict:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return dict(section)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    A config file given explicitly must exist; the default location
    (CONFIG_PATH or config/config.yaml) is optional.

    Args:
        config_path: Path to a YAML config file

    Returns:
        Config: Loaded configuration

    Raises:
        ConfigurationError: If the file is missing or invalid, a value fails
            validation, or no API key is available
    """
    _load_env_file()

    explicit = config_path is not None
    config_path = config_path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}") from e
    elif explicit:
        raise ConfigurationError(f"Config file not found: {config_path}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    provider_data = _section(config_data, "provider")
    pipeline_data = _section(config_data, "pipeline")
    logging_data = _section(config_data, "logging")

    # Environment variables win over the file
    api_key = os.getenv("PINGDOM_API_KEY")
    if api_key:
        provider_data["api_key"] = api_key

    api_url = os.getenv("PINGDOM_API_URL")
    if api_url:
        provider_data["api_url"] = api_url

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        logging_data["level"] = log_level

    max_concurrency = os.getenv("UPTIME_MAX_CONCURRENCY")
    if max_concurrency:
        pipeline_data["max_concurrency"] = max_concurrency

    request_interval = os.getenv("UPTIME_REQUEST_INTERVAL")
    if request_interval:
        pipeline_data["request_interval"] = request_interval

    config_data = {
        **config_data,
        "provider": provider_data,
        "pipeline": pipeline_data,
        "logging": logging_data,
    }

    try:
        config = Config(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e

    if not config.provider.api_key:
        raise ConfigurationError(
            "PINGDOM_API_KEY must be set in the environment, a .env file or the config file"
        )

    if not config.provider.api_url:
        raise ConfigurationError(
            "PINGDOM_API_URL must be set in the environment, a .env file or the config file"
        )

    return config
