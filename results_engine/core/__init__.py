"""
Core Package - Assessment Results Engine
results_engine/core/__init__.py

Core infrastructure: exceptions, logging setup. Dependency providers live in
results_engine.core.dependencies.
"""

from results_engine.core.exceptions import (
    DataSourceException,
    EntityNotFoundException,
    IncompleteDataError,
    ResultsEngineException,
    ScoreValidationError,
    TemplateReferenceError,
)
from results_engine.core.logging import setup_logging

__all__ = [
    # Exceptions
    "DataSourceException",
    "EntityNotFoundException",
    "IncompleteDataError",
    "ResultsEngineException",
    "ScoreValidationError",
    "TemplateReferenceError",
    # Logging
    "setup_logging",
]
