"""
Configuration Module
Loads connection settings for Jira and Dust from the environment (and an
optional .env file) and validates that every required value is present.
"""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_JIRA_QUERY = "updated >= -24h ORDER BY updated DESC"

REQUIRED_ENV_VARS = [
    "JIRA_SUBDOMAIN",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "DUST_API_KEY",
    "DUST_WORKSPACE_ID",
    "DUST_VAULT_ID",
    "DUST_DATASOURCE_ID",
]


@dataclass
class JiraConfig:
    """Configuration for the Jira search client"""
    subdomain: str
    email: str
    api_token: str
    query: str = DEFAULT_JIRA_QUERY
    page_size: int = 50
    timeout: int = 120  # seconds
    max_retries: int = 3
    default_retry_after: int = 60  # seconds, used when Retry-After is absent

    @property
    def base_url(self) -> str:
        return f"https://{self.subdomain}.atlassian.net/rest/api/3"


@dataclass
class DustConfig:
    """Configuration for the Dust data source client"""
    api_key: str
    workspace_id: str
    vault_id: str
    datasource_id: str
    base_url: str = "https://dust.tt/api/v1"
    rate_limit: int = 120  # requests per period
    period: float = 60.0  # seconds
    max_concurrent: int = 120
    timeout: int = 120

    @property
    def datasource_path(self) -> str:
        return (
            f"/w/{self.workspace_id}/vaults/{self.vault_id}"
            f"/data_sources/{self.datasource_id}"
        )


@dataclass
class SyncConfig:
    """Complete settings for one sync run."""
    jira: JiraConfig
    dust: DustConfig


def find_missing(env: Mapping[str, str]) -> List[str]:
    """Return the required variable names that are unset or empty, in order."""
    return [name for name in REQUIRED_ENV_VARS if not env.get(name)]


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            [], f"Invalid value for {name}: expected an integer, got {value!r}"
        )


def load_config(
    env: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True
) -> SyncConfig:
    """
    Build the sync configuration.

    Args:
        env: Mapping to read settings from. Defaults to os.environ.
        use_dotenv: Load a .env file into os.environ first.

    Returns:
        SyncConfig with Jira and Dust settings

    Raises:
        ConfigurationError: If any required variable is missing
    """
    if env is None:
        if use_dotenv:
            load_dotenv()
        env = os.environ

    missing = find_missing(env)
    if missing:
        raise ConfigurationError(missing)

    jira = JiraConfig(
        subdomain=env["JIRA_SUBDOMAIN"],
        email=env["JIRA_EMAIL"],
        api_token=env["JIRA_API_TOKEN"],
        query=env.get("JIRA_QUERY") or DEFAULT_JIRA_QUERY,
        page_size=_int_setting(env, "JIRA_PAGE_SIZE", 50),
        timeout=_int_setting(env, "REQUEST_TIMEOUT", 120),
    )
    dust = DustConfig(
        api_key=env["DUST_API_KEY"],
        workspace_id=env["DUST_WORKSPACE_ID"],
        vault_id=env["DUST_VAULT_ID"],
        datasource_id=env["DUST_DATASOURCE_ID"],
        rate_limit=_int_setting(env, "DUST_RATE_LIMIT", 120),
        max_concurrent=_int_setting(env, "DUST_MAX_CONCURRENT", 120),
        timeout=_int_setting(env, "REQUEST_TIMEOUT", 120),
    )
    return SyncConfig(jira=jira, dust=dust)
