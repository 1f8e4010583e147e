"""Runtime configuration and logging setup.

Settings are read from the environment (prefix `SHIPCHECK_`), e.g.
`SHIPCHECK_LOG_LEVEL=DEBUG` or `SHIPCHECK_DISABLED_AGENTS='["ai_risk"]'`.
"""

import logging
import sys
from functools import lru_cache

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipcheck.models import Category


class AuditSettings(BaseSettings):
    """shipcheck settings."""

    model_config = SettingsConfigDict(env_prefix="SHIPCHECK_", case_sensitive=False)

    log_level: str = "INFO"
    log_json: bool = False
    isolate_agent_failures: bool = Field(
        default=True,
        description="Record a failing agent in the report instead of aborting the scan",
    )
    disabled_agents: list[Category] = Field(default_factory=list)
    extra_ignores: list[str] = Field(default_factory=list)


@lru_cache(maxsize=1)
def get_settings() -> AuditSettings:
    """Cached settings instance."""
    return AuditSettings()


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog; logs go to stderr so report output stays clean."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
        ),
        # sys.stderr is looked up per logger, not once at configure time
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
