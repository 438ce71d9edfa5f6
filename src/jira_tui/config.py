"""Configuration management: config.toml (tomlkit) and secrets.yaml (PyYAML)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import tomlkit
import yaml
from tomlkit.exceptions import ParseError

from jira_tui.models import AppConfig, JiraConfig, TabConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "JIRA_TUI_CONFIG_DIR"
CONFIG_FILE = "config.toml"
SECRETS_FILE = "secrets.yaml"

SAMPLE_SECRETS = """\
# jira-tui secrets - DO NOT COMMIT
# Generate an API token at:
#   https://id.atlassian.com/manage-profile/security/api-tokens

jira:
  email: you@yourcompany.com
  api_token: your-api-token-here
"""


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


def default_config_dir() -> Path:
    """Return the config directory, honouring ``JIRA_TUI_CONFIG_DIR``."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".jira-tui"


def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return a dict."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"reading {path.name}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"parsing {path.name}: {e}") from e
    return data if isinstance(data, dict) else {}


def load_config(config_dir: Path) -> AppConfig:
    """Load config.toml and secrets.yaml from *config_dir* and validate the result."""
    config_path = config_dir / CONFIG_FILE
    try:
        doc = tomlkit.parse(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"reading {CONFIG_FILE}: {e}") from e
    except ParseError as e:
        raise ConfigError(f"parsing {CONFIG_FILE}: {e}") from e

    config = AppConfig()
    jira_section = doc.get("jira", {})
    config.jira = JiraConfig(
        base_url=str(jira_section.get("base_url", "")).rstrip("/"),
        default_project=str(jira_section.get("default_project", "")),
    )

    tabs_data = doc.get("tabs", [])
    if isinstance(tabs_data, list):
        for tab_data in tabs_data:
            if isinstance(tab_data, dict):
                config.tabs.append(_parse_tab(tab_data))

    secrets = _load_yaml(config_dir / SECRETS_FILE)
    jira_secrets = secrets.get("jira") or {}
    config.jira.email = str(jira_secrets.get("email", "") or "")
    config.jira.api_token = str(jira_secrets.get("api_token", "") or "")

    validate_config(config)
    return config


def _parse_tab(data: dict) -> TabConfig:
    """Parse a single [[tabs]] entry."""
    cols = data.get("columns")
    columns = tuple(str(c) for c in cols) if isinstance(cols, list) else ()
    return TabConfig(
        label=str(data.get("label", "")),
        columns=columns,
        filter_id=str(data.get("filter_id", "")),
        filter_url=str(data.get("filter_url", "")),
        jql=str(data.get("jql", "")),
        sort=str(data.get("sort", "")),
    )


def validate_config(config: AppConfig) -> None:
    """Raise ConfigError if any required setting is missing."""
    if not config.jira.base_url:
        raise ConfigError("jira.base_url is required")
    if not config.jira.email:
        raise ConfigError("jira.email is required")
    if not config.jira.api_token:
        raise ConfigError("jira.api_token is required")
    if not config.tabs:
        raise ConfigError("at least one tab is required")
    for i, tab in enumerate(config.tabs):
        if not tab.label:
            raise ConfigError(f"tabs[{i}].label is required")
        sources = sum(1 for s in (tab.filter_id, tab.filter_url, tab.jql) if s)
        if sources == 0:
            raise ConfigError(f"tabs[{i}] must have filter_id, filter_url, or jql")
        if sources > 1:
            raise ConfigError(f"tabs[{i}] must have only one of filter_id, filter_url, or jql")
        if not tab.columns:
            raise ConfigError(f"tabs[{i}].columns must not be empty")


def save_config(config_dir: Path, config: AppConfig) -> None:
    """Write config.toml (connection settings and tabs, never credentials)."""
    config_path = config_dir / CONFIG_FILE
    config_path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()
    doc.add(tomlkit.comment("jira-tui configuration"))

    jira_table = tomlkit.table()
    jira_table.add("base_url", config.jira.base_url)
    if config.jira.default_project:
        jira_table.add("default_project", config.jira.default_project)
    doc.add("jira", jira_table)

    tabs_array = tomlkit.aot()
    for tab in config.tabs:
        tab_table = tomlkit.table()
        tab_table.add("label", tab.label)
        for key in ("filter_id", "filter_url", "jql"):
            value = getattr(tab, key)
            if value:
                tab_table.add(key, value)
        tab_table.add("columns", list(tab.columns))
        if tab.sort:
            tab_table.add("sort", tab.sort)
        tabs_array.append(tab_table)
    doc.add("tabs", tabs_array)

    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def sample_config() -> AppConfig:
    return AppConfig(
        jira=JiraConfig(
            base_url="https://yourcompany.atlassian.net",
            default_project="PROJ",
        ),
        tabs=[
            TabConfig(
                label="My Sprint",
                filter_id="10042",
                columns=("key", "summary", "status", "assignee", "priority"),
                sort="priority",
            ),
            TabConfig(
                label="Backlog",
                filter_id="10043",
                columns=("key", "summary", "status", "priority"),
            ),
            TabConfig(
                label="Bugs",
                jql="issuetype = Bug AND resolution = Unresolved",
                columns=("key", "summary", "status", "assignee", "reporter"),
                sort="created DESC",
            ),
        ],
    )


def init_config_dir(config_dir: Path) -> list[Path]:
    """Create sample config and secrets files. Existing files are left alone.

    Returns the paths that were written.
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    config_path = config_dir / CONFIG_FILE
    if not config_path.exists():
        save_config(config_dir, sample_config())
        written.append(config_path)
    secrets_path = config_dir / SECRETS_FILE
    if not secrets_path.exists():
        secrets_path.write_text(SAMPLE_SECRETS, encoding="utf-8")
        written.append(secrets_path)
    if written:
        logger.info("Initialised config in %s", config_dir)
    return written
