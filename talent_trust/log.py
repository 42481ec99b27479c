"""
Talent Trust - Logging setup

structlog is configured once per process, by the API app on import and by
the worker/CLI entry points before they run.
"""
import structlog

from talent_trust.config import get_settings


def configure_logging(log_format: str = None) -> None:
    fmt = log_format or get_settings().LOG_FORMAT
    renderer = (
        structlog.dev.ConsoleRenderer()
        if fmt == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
    )
