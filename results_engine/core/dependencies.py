"""
Dependencies - Assessment Results Engine
results_engine/core/dependencies.py

FastAPI dependency injection for the results service.
"""

from functools import lru_cache

from results_engine.services.http_data_source import HttpResultsDataSource
from results_engine.services.results_service import ResultsService


@lru_cache()
def get_data_source() -> HttpResultsDataSource:
    """Get cached HTTP data source bound to DATA_API_URL."""
    return HttpResultsDataSource()


@lru_cache()
def get_results_service() -> ResultsService:
    """Get cached ResultsService instance."""
    return ResultsService(get_data_source())
