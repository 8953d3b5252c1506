"""Configuration for the Jira MCP server using pydantic-settings."""
import logging
import re
import sys
from functools import lru_cache

from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Settings(BaseSettings):
    """Runtime settings read from the environment (or a local .env file).

    JIRA_BASE_URL, JIRA_EMAIL, JIRA_API_TOKEN and OPENAI_API_KEY are required;
    the server refuses to start without them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Jira Cloud credentials
    jira_base_url: AnyHttpUrl = Field(description="Jira Cloud site URL, e.g. https://acme.atlassian.net")
    jira_email: str = Field(description="Account email used for basic auth")
    jira_api_token: SecretStr = Field(description="Atlassian API token")
    jira_request_timeout: float = Field(default=30.0, gt=0, description="Backend request timeout in seconds")

    # AI provider key, unused by the adapter itself but required by deployments
    openai_api_key: SecretStr = Field(description="OpenAI API key")

    # HTTP listener
    mcp_http_host: str = Field(default="0.0.0.0", description="Host to bind the HTTP listener to")
    mcp_http_port: int = Field(default=3001, ge=1, le=65535, description="Port for the HTTP listener")
    mcp_json_response: bool = Field(
        default=False,
        description="Answer streamable HTTP requests with JSON bodies instead of event streams",
    )

    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("jira_email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not _EMAIL_PATTERN.match(value):
            raise ValueError("JIRA_EMAIL must be a valid email address")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def jira_base(self) -> str:
        """Base URL without a trailing slash, ready for httpx."""
        return str(self.jira_base_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure logging to stderr so stdout stays free for the stdio transport."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True
    )
