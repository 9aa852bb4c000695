"""Tests for configuration module."""

import json
import os
import pytest

from deploy_notifier.infrastructure.config import (
    NotifierConfig,
    SlackConfig,
    RunConfig,
    WebConfig,
    BroadcastConfig,
    TelemetryConfig,
    load_config,
)

_PIPELINE_VARS = ("SLACK_TOKEN", "CHANNEL_ID", "SLACK_HEADER", "RUN_ID", "TENANT", "REPO_URL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _PIPELINE_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("NOTIFIER_"):
            monkeypatch.delenv(name, raising=False)


class TestDefaultConfig:
    def test_defaults(self):
        config = load_config(path="/nonexistent/deploy-notifier.json")
        assert config.log_level == "INFO"
        assert config.log_json is False
        assert config.web.port == 8085
        assert config.web.host == "0.0.0.0"
        assert config.broadcast.interval_seconds == 15
        assert config.slack.token == ""
        assert config.slack.api_url == "https://slack.com/api"
        assert config.telemetry.endpoint == ""

    def test_all_sections_present(self):
        config = load_config(path="/nonexistent/deploy-notifier.json")
        assert isinstance(config, NotifierConfig)
        assert isinstance(config.slack, SlackConfig)
        assert isinstance(config.run, RunConfig)
        assert isinstance(config.web, WebConfig)
        assert isinstance(config.broadcast, BroadcastConfig)
        assert isinstance(config.telemetry, TelemetryConfig)

    def test_config_is_frozen(self):
        config = load_config(path="/nonexistent/deploy-notifier.json")
        with pytest.raises(AttributeError):
            config.web.port = 1


class TestFileConfig:
    def test_load_from_file(self, tmp_path):
        config_file = tmp_path / "deploy-notifier.json"
        config_file.write_text(json.dumps({
            "log_level": "debug",
            "slack": {"token": "xoxb-file", "channel_id": "C1", "header": "Release"},
            "run": {"tenant": "prod"},
            "web": {"port": 9090},
            "broadcast": {"interval_seconds": 30},
        }))

        config = load_config(path=str(config_file))
        assert config.log_level == "DEBUG"
        assert config.slack.token == "xoxb-file"
        assert config.slack.channel_id == "C1"
        assert config.slack.header == "Release"
        assert config.run.tenant == "prod"
        assert config.web.port == 9090
        assert config.broadcast.interval_seconds == 30

    def test_partial_config(self, tmp_path):
        config_file = tmp_path / "deploy-notifier.json"
        config_file.write_text(json.dumps({"web": {"port": 3000}}))

        config = load_config(path=str(config_file))
        assert config.web.port == 3000
        assert config.web.host == "0.0.0.0"  # default preserved
        assert config.broadcast.interval_seconds == 15  # default preserved

    def test_invalid_json_returns_defaults(self, tmp_path):
        config_file = tmp_path / "deploy-notifier.json"
        config_file.write_text("not valid json{{{")

        config = load_config(path=str(config_file))
        assert config.web.port == 8085  # defaults

    def test_unknown_keys_ignored(self, tmp_path):
        config_file = tmp_path / "deploy-notifier.json"
        config_file.write_text(json.dumps({
            "web": {"port": 3000, "unknown_key": "ignored"},
        }))

        config = load_config(path=str(config_file))
        assert config.web.port == 3000


class TestEnvOverride:
    def test_pipeline_variables(self, monkeypatch):
        monkeypatch.setenv("SLACK_TOKEN", "xoxb-env")
        monkeypatch.setenv("CHANNEL_ID", "C42")
        monkeypatch.setenv("SLACK_HEADER", "Deploying main")
        monkeypatch.setenv("RUN_ID", "9001")
        monkeypatch.setenv("TENANT", "qa")
        monkeypatch.setenv("REPO_URL", "https://github.com/acme/app")

        config = load_config(path="/nonexistent/deploy-notifier.json")
        assert config.slack.token == "xoxb-env"
        assert config.slack.channel_id == "C42"
        assert config.slack.header == "Deploying main"
        assert config.run.run_id == "9001"
        assert config.run.tenant == "qa"
        assert config.run.repo_url == "https://github.com/acme/app"

    def test_pipeline_variables_override_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "deploy-notifier.json"
        config_file.write_text(json.dumps({"slack": {"channel_id": "C-file"}}))
        monkeypatch.setenv("CHANNEL_ID", "C-env")

        config = load_config(path=str(config_file))
        assert config.slack.channel_id == "C-env"

    def test_prefixed_variables_win(self, monkeypatch):
        monkeypatch.setenv("CHANNEL_ID", "C-pipeline")
        monkeypatch.setenv("NOTIFIER_SLACK_CHANNEL_ID", "C-prefixed")

        config = load_config(path="/nonexistent/deploy-notifier.json")
        assert config.slack.channel_id == "C-prefixed"

    def test_numbers_and_booleans_coerced(self, monkeypatch):
        monkeypatch.setenv("NOTIFIER_WEB_PORT", "9999")
        monkeypatch.setenv("NOTIFIER_BROADCAST_INTERVAL_SECONDS", "5")
        monkeypatch.setenv("NOTIFIER_TELEMETRY_INSECURE", "yes")
        monkeypatch.setenv("NOTIFIER_LOG_JSON", "true")
        monkeypatch.setenv("NOTIFIER_LOG_LEVEL", "warning")

        config = load_config(path="/nonexistent/deploy-notifier.json")
        assert config.web.port == 9999
        assert config.broadcast.interval_seconds == 5
        assert config.telemetry.insecure is True
        assert config.log_json is True
        assert config.log_level == "WARNING"

    def test_invalid_number_raises(self, monkeypatch):
        monkeypatch.setenv("NOTIFIER_WEB_PORT", "eighty")
        with pytest.raises(ValueError):
            load_config(path="/nonexistent/deploy-notifier.json")

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("DN_WEB_PORT", "7000")
        config = load_config(path="/nonexistent/deploy-notifier.json", env_prefix="DN")
        assert config.web.port == 7000
