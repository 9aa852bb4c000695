"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all notifier settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- The plain variables set by the deployment pipeline (SLACK_TOKEN,
  CHANNEL_ID, ...) are honoured so the notifier drops into existing workflows
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlackConfig:
    """Slack channel configuration."""
    token: str = ""
    channel_id: str = ""
    header: str = ""
    api_url: str = "https://slack.com/api"
    timeout_seconds: int = 10


@dataclass(frozen=True)
class RunConfig:
    """Informational run details shown in the message header."""
    run_id: str = ""
    tenant: str = ""
    repo_url: str = ""


@dataclass(frozen=True)
class WebConfig:
    """HTTP listener configuration."""
    host: str = "0.0.0.0"
    port: int = 8085
    request_timeout_seconds: int = 10


@dataclass(frozen=True)
class BroadcastConfig:
    """Periodic broadcast configuration."""
    interval_seconds: int = 15


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class NotifierConfig:
    """Root configuration for the deploy notifier."""
    slack: SlackConfig = field(default_factory=SlackConfig)
    run: RunConfig = field(default_factory=RunConfig)
    web: WebConfig = field(default_factory=WebConfig)
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "INFO"
    log_json: bool = False


# Variables exported by the CI workflow that drives the notifier
_PIPELINE_ENV = {
    "SLACK_TOKEN": ("slack", "token"),
    "CHANNEL_ID": ("slack", "channel_id"),
    "SLACK_HEADER": ("slack", "header"),
    "RUN_ID": ("run", "run_id"),
    "TENANT": ("run", "tenant"),
    "REPO_URL": ("run", "repo_url"),
}


def _pipeline_env_override(data: dict) -> dict:
    """Apply the plain pipeline variables (SLACK_TOKEN, CHANNEL_ID, ...)."""
    for key, (section, field_name) in _PIPELINE_ENV.items():
        value = os.environ.get(key)
        if value:
            data.setdefault(section, {})[field_name] = value
    return data


def _env_override(data: dict, prefix: str = "NOTIFIER") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern NOTIFIER_SECTION_KEY.
    For example: NOTIFIER_WEB_PORT=9090, NOTIFIER_SLACK_CHANNEL_ID=C0123
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        if name in ("log_level", "log_json"):
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
        else:
            data[parts[0]] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert string numbers to int/bool
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "int":
                filtered[f.name] = int(filtered[f.name])
            elif f.type == "bool":
                filtered[f.name] = _to_bool(filtered[f.name])

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "NOTIFIER",
) -> NotifierConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (NOTIFIER_SECTION_KEY)
    2. Pipeline variables (SLACK_TOKEN, CHANNEL_ID, SLACK_HEADER, RUN_ID,
       TENANT, REPO_URL)
    3. Config file values
    4. Defaults

    Args:
        path: Path to config file (JSON). Defaults to deploy-notifier.json in CWD.
        env_prefix: Environment variable prefix. Defaults to NOTIFIER.
    """
    config_path = Path(path) if path else Path("deploy-notifier.json")
    data = _parse_config_file(config_path)
    data = _pipeline_env_override(data)
    data = _env_override(data, env_prefix)

    return NotifierConfig(
        slack=_build_sub_config(SlackConfig, data.get("slack", {})),
        run=_build_sub_config(RunConfig, data.get("run", {})),
        web=_build_sub_config(WebConfig, data.get("web", {})),
        broadcast=_build_sub_config(BroadcastConfig, data.get("broadcast", {})),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {})),
        log_level=str(data.get("log_level", "INFO")).upper(),
        log_json=_to_bool(data.get("log_json", False)),
    )
