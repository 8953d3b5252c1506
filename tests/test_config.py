"""Tests for settings loading and the command-line entry point."""
import pytest
from pydantic import ValidationError

from jira_mcp import server
from jira_mcp.config import Settings

REQUIRED_ENV = ("JIRA_BASE_URL", "JIRA_EMAIL", "JIRA_API_TOKEN", "OPENAI_API_KEY")


def _settings(**overrides):
    values = {
        "jira_base_url": "https://example.atlassian.net/",
        "jira_email": "bot@example.com",
        "jira_api_token": "secret-token",
        "openai_api_key": "sk-test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:

    def test_defaults(self):
        settings = _settings()
        assert settings.mcp_http_host == "0.0.0.0"
        assert settings.mcp_http_port == 3001
        assert settings.mcp_json_response is False
        assert settings.jira_request_timeout == 30.0
        assert settings.log_level == "INFO"

    def test_base_url_trailing_slash_stripped(self):
        assert _settings().jira_base == "https://example.atlassian.net"

    def test_secrets_not_exposed_in_repr(self):
        """API tokens are masked when settings are printed or logged."""
        assert "secret-token" not in repr(_settings())

    def test_invalid_url_rejected(self):
        with pytest.raises(ValidationError):
            _settings(jira_base_url="not a url")

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError, match="JIRA_EMAIL must be a valid email address"):
            _settings(jira_email="bot-at-example")

    def test_log_level_normalized(self):
        assert _settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            _settings(log_level="chatty")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("JIRA_BASE_URL", "https://acme.atlassian.net")
        monkeypatch.setenv("JIRA_EMAIL", "ops@acme.io")
        monkeypatch.setenv("JIRA_API_TOKEN", "t0ken")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("MCP_HTTP_PORT", "8080")

        settings = Settings(_env_file=None)

        assert settings.jira_base == "https://acme.atlassian.net"
        assert settings.mcp_http_port == 8080
        assert settings.jira_api_token.get_secret_value() == "t0ken"

    def test_missing_required_variables(self, monkeypatch):
        for name in REQUIRED_ENV:
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestMain:

    def test_parse_args_defaults_to_stdio(self):
        args = server.parse_args([])
        assert args.transport == "stdio"
        assert args.host is None
        assert args.port is None

    def test_parse_args_http(self):
        args = server.parse_args(["--transport", "http", "--port", "9000"])
        assert args.transport == "http"
        assert args.port == 9000

    def test_exits_on_missing_configuration(self, monkeypatch):
        """The process exits with status 1 before serving when configuration is invalid."""
        for name in REQUIRED_ENV:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr(server, "get_settings", lambda: Settings(_env_file=None))

        with pytest.raises(SystemExit) as exc_info:
            server.main([])

        assert exc_info.value.code == 1
