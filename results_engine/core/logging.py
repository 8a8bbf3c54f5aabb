"""
Logging setup - Assessment Results Engine
results_engine/core/logging.py

Configures stdlib logging level and the structlog renderer from settings.
"""

import logging

import structlog

from results_engine.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(app_settings: Settings | None = None) -> None:
    """Configure root logging and structlog once at application start."""
    cfg = app_settings or get_settings()
    level = getattr(logging, cfg.LOG_LEVEL, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)

    renderer = (
        structlog.processors.JSONRenderer()
        if cfg.LOG_FORMAT == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
