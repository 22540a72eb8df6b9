"""
Tests for configuration loading.
"""

from unittest.mock import patch

import pytest

from issue_sync.src.config import DEFAULT_JIRA_QUERY, REQUIRED_ENV_VARS, load_config
from issue_sync.src.errors import ConfigurationError


@pytest.fixture
def env():
    return {
        "JIRA_SUBDOMAIN": "acme",
        "JIRA_EMAIL": "bot@acme.test",
        "JIRA_API_TOKEN": "jira-token",
        "DUST_API_KEY": "dust-key",
        "DUST_WORKSPACE_ID": "ws1",
        "DUST_VAULT_ID": "vault1",
        "DUST_DATASOURCE_ID": "ds1",
    }


class TestLoadConfig:
    """Test suite for load_config."""

    def test_complete_environment(self, env):
        config = load_config(env)

        assert config.jira.base_url == "https://acme.atlassian.net/rest/api/3"
        assert config.jira.email == "bot@acme.test"
        assert config.jira.query == DEFAULT_JIRA_QUERY
        assert config.jira.page_size == 50
        assert config.jira.max_retries == 3
        assert config.jira.default_retry_after == 60
        assert config.dust.datasource_path == "/w/ws1/vaults/vault1/data_sources/ds1"
        assert config.dust.rate_limit == 120
        assert config.dust.period == 60.0
        assert config.dust.max_concurrent == 120

    def test_optional_overrides(self, env):
        env.update({
            "JIRA_QUERY": "project = OPS",
            "JIRA_PAGE_SIZE": "25",
            "DUST_RATE_LIMIT": "60",
            "DUST_MAX_CONCURRENT": "8",
            "REQUEST_TIMEOUT": "30",
        })

        config = load_config(env)

        assert config.jira.query == "project = OPS"
        assert config.jira.page_size == 25
        assert config.jira.timeout == 30
        assert config.dust.rate_limit == 60
        assert config.dust.max_concurrent == 8

    def test_missing_values_are_listed(self, env):
        del env["JIRA_EMAIL"]
        env["DUST_VAULT_ID"] = ""

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(env)

        assert exc_info.value.missing == ["JIRA_EMAIL", "DUST_VAULT_ID"]
        assert str(exc_info.value) == (
            "Please provide values for the following environment variables: "
            "JIRA_EMAIL, DUST_VAULT_ID"
        )

    def test_everything_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config({})

        assert exc_info.value.missing == REQUIRED_ENV_VARS

    def test_invalid_integer(self, env):
        env["JIRA_PAGE_SIZE"] = "fifty"

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(env)

        assert str(exc_info.value) == (
            "Invalid value for JIRA_PAGE_SIZE: expected an integer, got 'fifty'"
        )
        assert exc_info.value.missing == []

    def test_reads_process_environment(self, env, monkeypatch):
        for name, value in env.items():
            monkeypatch.setenv(name, value)

        with patch("issue_sync.src.config.load_dotenv") as mock_load_dotenv:
            config = load_config()

        mock_load_dotenv.assert_called_once()
        assert config.dust.api_key == "dust-key"
