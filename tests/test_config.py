"""Tests for configuration files and the user cache."""

import json

import pytest

from jira_tui.config import (
    CONFIG_DIR_ENV,
    CONFIG_FILE,
    SECRETS_FILE,
    ConfigError,
    default_config_dir,
    init_config_dir,
    load_config,
    save_config,
    sample_config,
)
from jira_tui.models import CachedUser
from jira_tui.usercache import load_user_cache, save_user_cache, user_cache_path

SECRETS = """
jira:
  email: alice@example.com
  api_token: secret-token
"""


def _write(config_dir, config_toml: str, secrets: str = SECRETS) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / CONFIG_FILE).write_text(config_toml, encoding="utf-8")
    if secrets is not None:
        (config_dir / SECRETS_FILE).write_text(secrets, encoding="utf-8")


class TestLoadConfig:
    def test_load_existing(self, tmp_path):
        _write(tmp_path, """
[jira]
base_url = "https://example.atlassian.net/"
default_project = "PROJ"

[[tabs]]
label = "My Sprint"
filter_id = "10042"
columns = ["key", "summary", "status", "assignee"]
sort = "priority"

[[tabs]]
label = "Bugs"
jql = "issuetype = Bug"
columns = ["key", "summary"]
""")
        config = load_config(tmp_path)
        assert config.jira.base_url == "https://example.atlassian.net"
        assert config.jira.default_project == "PROJ"
        assert config.jira.email == "alice@example.com"
        assert config.jira.api_token == "secret-token"
        assert len(config.tabs) == 2
        assert config.tabs[0].label == "My Sprint"
        assert config.tabs[0].filter_id == "10042"
        assert config.tabs[0].columns == ("key", "summary", "status", "assignee")
        assert config.tabs[0].sort == "priority"
        assert config.tabs[1].jql == "issuetype = Bug"

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigError, match="config.toml"):
            load_config(tmp_path)

    def test_invalid_toml(self, tmp_path):
        _write(tmp_path, "[jira\nbase_url = ")
        with pytest.raises(ConfigError, match="parsing config.toml"):
            load_config(tmp_path)

    def test_missing_secrets(self, tmp_path):
        _write(tmp_path, """
[jira]
base_url = "https://example.atlassian.net"

[[tabs]]
label = "Bugs"
jql = "issuetype = Bug"
columns = ["key"]
""", secrets=None)
        with pytest.raises(ConfigError, match="secrets.yaml"):
            load_config(tmp_path)

    @pytest.mark.parametrize("tabs,message", [
        ("", "at least one tab is required"),
        ('[[tabs]]\njql = "x"\ncolumns = ["key"]\n', r"tabs\[0\].label is required"),
        ('[[tabs]]\nlabel = "A"\ncolumns = ["key"]\n', r"tabs\[0\] must have filter_id, filter_url, or jql"),
        ('[[tabs]]\nlabel = "A"\njql = "x"\nfilter_id = "1"\ncolumns = ["key"]\n', r"tabs\[0\] must have only one"),
        ('[[tabs]]\nlabel = "A"\njql = "x"\n', r"tabs\[0\].columns must not be empty"),
    ])
    def test_tab_validation(self, tmp_path, tabs, message):
        _write(tmp_path, '[jira]\nbase_url = "https://example.atlassian.net"\n\n' + tabs)
        with pytest.raises(ConfigError, match=message):
            load_config(tmp_path)

    def test_base_url_required(self, tmp_path):
        _write(tmp_path, '[[tabs]]\nlabel = "A"\njql = "x"\ncolumns = ["key"]\n')
        with pytest.raises(ConfigError, match="jira.base_url is required"):
            load_config(tmp_path)

    def test_token_required(self, tmp_path):
        _write(
            tmp_path,
            '[jira]\nbase_url = "https://example.atlassian.net"\n\n[[tabs]]\nlabel = "A"\njql = "x"\ncolumns = ["key"]\n',
            secrets="jira:\n  email: alice@example.com\n",
        )
        with pytest.raises(ConfigError, match="jira.api_token is required"):
            load_config(tmp_path)


class TestSaveConfig:
    def test_roundtrip(self, tmp_path):
        config = sample_config()
        save_config(tmp_path, config)
        (tmp_path / SECRETS_FILE).write_text(SECRETS, encoding="utf-8")
        loaded = load_config(tmp_path)
        assert loaded.jira.base_url == config.jira.base_url
        assert loaded.tabs == config.tabs

    def test_never_writes_credentials(self, tmp_path):
        config = sample_config()
        config.jira.api_token = "super-secret"
        save_config(tmp_path, config)
        assert "super-secret" not in (tmp_path / CONFIG_FILE).read_text(encoding="utf-8")


class TestInitConfigDir:
    def test_creates_files(self, tmp_path):
        config_dir = tmp_path / "jira"
        written = init_config_dir(config_dir)
        assert written == [config_dir / CONFIG_FILE, config_dir / SECRETS_FILE]
        assert "api_token" in (config_dir / SECRETS_FILE).read_text(encoding="utf-8")

    def test_does_not_overwrite(self, tmp_path):
        (tmp_path / CONFIG_FILE).write_text("# mine\n", encoding="utf-8")
        written = init_config_dir(tmp_path)
        assert written == [tmp_path / SECRETS_FILE]
        assert (tmp_path / CONFIG_FILE).read_text(encoding="utf-8") == "# mine\n"
        assert init_config_dir(tmp_path) == []

    def test_default_dir_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
        assert default_config_dir() == tmp_path
        monkeypatch.delenv(CONFIG_DIR_ENV)
        assert default_config_dir().name == ".jira-tui"


class TestUserCache:
    def test_roundtrip(self, tmp_path):
        path = user_cache_path(tmp_path / "cfg")
        users = [
            CachedUser("acc-1", "Alice Smith", "alice@example.com"),
            CachedUser("acc-2", "Bob Jones"),
        ]
        save_user_cache(path, users)
        assert load_user_cache(path) == users

    def test_file_format(self, tmp_path):
        path = user_cache_path(tmp_path)
        save_user_cache(path, [CachedUser("acc-1", "Alice Smith", "alice@example.com")])
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == [{"accountId": "acc-1", "displayName": "Alice Smith", "emailAddress": "alice@example.com"}]

    def test_missing(self, tmp_path):
        assert load_user_cache(tmp_path / "users.json") == []

    def test_corrupt(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_user_cache(path) == []

    def test_skips_entries_without_account(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text(json.dumps([{"displayName": "Ghost"}, {"accountId": "acc-1", "displayName": "Alice"}]), encoding="utf-8")
        assert load_user_cache(path) == [CachedUser("acc-1", "Alice")]
