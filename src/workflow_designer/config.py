"""Configuration for the workflow designer.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required: the defaults point at a workflow engine running locally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_PREFIX = "/plugin-api/workflow-engine"


@dataclass(frozen=True, slots=True)
class RunPollPolicy:
    """How ``run()`` follows up on a started instance.

    The default is a single detail fetch. With ``until_terminal`` the
    controller keeps fetching every ``interval_seconds`` until the instance
    succeeds or fails, or ``timeout_seconds`` elapses (0 means no timeout).
    """

    until_terminal: bool = False
    interval_seconds: float = 1.0
    timeout_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        if self.timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")


class DesignerSettings(BaseSettings):
    """Settings for the designer and its engine client.

    Environment variables:
    - WORKFLOW_ENGINE_URL
    - WORKFLOW_ENGINE_API_PREFIX         (optional)
    - WORKFLOW_ENGINE_TIMEOUT_SECONDS    (optional)
    - LOG_LEVEL / LOG_FORMAT             (optional)
    - WORKFLOW_RUN_POLL_UNTIL_TERMINAL   (optional)
    - WORKFLOW_RUN_POLL_INTERVAL_SECONDS (optional)
    - WORKFLOW_RUN_POLL_TIMEOUT_SECONDS  (optional)

    Notes:
        Tests can bypass the env file with `DesignerSettings(_env_file=None)`.
    """

    engine_base_url: str = Field(
        default="http://127.0.0.1:3001",
        validation_alias="WORKFLOW_ENGINE_URL",
        description="Base URL of the workflow engine host",
    )
    engine_api_prefix: str = Field(
        default=DEFAULT_API_PREFIX,
        validation_alias="WORKFLOW_ENGINE_API_PREFIX",
        description="Path prefix under which the engine plugin is mounted",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="WORKFLOW_ENGINE_TIMEOUT_SECONDS",
        description="Per-request timeout for engine calls",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        validation_alias="LOG_FORMAT",
        description="Log output format",
    )

    run_poll_until_terminal: bool = Field(
        default=False,
        validation_alias="WORKFLOW_RUN_POLL_UNTIL_TERMINAL",
        description=(
            "If true, run() polls the instance until it succeeds or fails instead of "
            "fetching its detail once."
        ),
    )
    run_poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        validation_alias="WORKFLOW_RUN_POLL_INTERVAL_SECONDS",
    )
    run_poll_timeout_seconds: float = Field(
        default=60.0,
        ge=0,
        validation_alias="WORKFLOW_RUN_POLL_TIMEOUT_SECONDS",
        description="Give up polling after this many seconds (0 means no timeout)",
    )

    default_ai_prompt: str = Field(
        default="user login -> fetch profile -> send welcome notification",
        validation_alias="WORKFLOW_DEFAULT_AI_PROMPT",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    @field_validator("engine_base_url")
    @classmethod
    def _require_base_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("WORKFLOW_ENGINE_URL must not be empty")
        return value.rstrip("/")

    def run_poll_policy(self) -> RunPollPolicy:
        return RunPollPolicy(
            until_terminal=self.run_poll_until_terminal,
            interval_seconds=self.run_poll_interval_seconds,
            timeout_seconds=self.run_poll_timeout_seconds,
        )
