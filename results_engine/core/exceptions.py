"""
Custom Exceptions - Assessment Results Engine
results_engine/core/exceptions.py

Custom exception classes for results computation and data access.
"""


class ResultsEngineException(Exception):
    """Base exception for the results engine."""

    pass


class ScoreValidationError(ResultsEngineException):
    """A rating or derived score falls outside the template's declared scale.

    The computation aborts entirely; no partial results are emitted.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class IncompleteDataError(ResultsEngineException):
    """The assessment has no completed invitations (or no ratings at all)."""

    def __init__(self, assessment_id: str, message: str = "No completed responses"):
        self.assessment_id = assessment_id
        self.message = message
        super().__init__(f"Assessment {assessment_id}: {message}")


class TemplateReferenceError(ResultsEngineException):
    """A response points at a competency or question the template does not define."""

    def __init__(self, message: str, competency_id: str | None = None, question_id: str | None = None):
        self.message = message
        self.competency_id = competency_id
        self.question_id = question_id
        super().__init__(message)


class DataSourceException(ResultsEngineException):
    """Failure in the external data-access collaborator."""

    def __init__(self, message: str = "Data source request failed"):
        self.message = message
        super().__init__(message)


class EntityNotFoundException(DataSourceException):
    """Entity not found in the data source."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")
