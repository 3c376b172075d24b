"""Unit tests for designer settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from workflow_designer.config import DEFAULT_API_PREFIX, DesignerSettings, RunPollPolicy

ENV_VARS = (
    "WORKFLOW_ENGINE_URL",
    "WORKFLOW_ENGINE_API_PREFIX",
    "WORKFLOW_ENGINE_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "WORKFLOW_RUN_POLL_UNTIL_TERMINAL",
    "WORKFLOW_RUN_POLL_INTERVAL_SECONDS",
    "WORKFLOW_RUN_POLL_TIMEOUT_SECONDS",
    "WORKFLOW_DEFAULT_AI_PROMPT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_point_at_local_engine() -> None:
    settings = DesignerSettings(_env_file=None)

    assert settings.engine_base_url == "http://127.0.0.1:3001"
    assert settings.engine_api_prefix == DEFAULT_API_PREFIX
    assert settings.request_timeout_seconds == 30.0
    assert settings.log_format == "json"
    assert settings.run_poll_policy() == RunPollPolicy()


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKFLOW_ENGINE_URL", "https://engine.example.com/")
    monkeypatch.setenv("WORKFLOW_RUN_POLL_UNTIL_TERMINAL", "true")
    monkeypatch.setenv("WORKFLOW_RUN_POLL_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("WORKFLOW_RUN_POLL_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("LOG_FORMAT", "text")

    settings = DesignerSettings(_env_file=None)

    assert settings.engine_base_url == "https://engine.example.com"
    assert settings.log_format == "text"
    assert settings.run_poll_policy() == RunPollPolicy(
        until_terminal=True, interval_seconds=2.5, timeout_seconds=0
    )


def test_settings_loads_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "\n".join(["WORKFLOW_ENGINE_URL=http://10.0.0.5:3001", "LOG_LEVEL=DEBUG", ""]),
        encoding="utf-8",
    )

    settings = DesignerSettings()

    assert settings.engine_base_url == "http://10.0.0.5:3001"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("WORKFLOW_ENGINE_URL", "   "),
        ("WORKFLOW_ENGINE_TIMEOUT_SECONDS", "0"),
        ("WORKFLOW_RUN_POLL_INTERVAL_SECONDS", "-1"),
        ("LOG_FORMAT", "xml"),
    ],
)
def test_invalid_settings_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        DesignerSettings(_env_file=None)


def test_run_poll_policy_validates_values() -> None:
    with pytest.raises(ValueError):
        RunPollPolicy(interval_seconds=0)
    with pytest.raises(ValueError):
        RunPollPolicy(timeout_seconds=-1)
