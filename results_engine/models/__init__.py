"""
Models Package - Assessment Results Engine
results_engine/models/__init__.py

Pydantic models for engine inputs (templates, invitations) and outputs (results).
"""

from results_engine.models.enumerations import (
    CCIBand,
    CCIRaterPopulation,
    GapClassification,
    InvitationStatus,
    RaterType,
    TrendDirection,
)
from results_engine.models.invitation import QuestionResponse, RaterInvitation
from results_engine.models.results import (
    CCIItem,
    CCIResult,
    CompetencyChange,
    CompetencyScore,
    ComputedAssessmentResults,
    CurrentCeiling,
    GapEntry,
    GapHighlight,
    ItemScore,
    JohariWindow,
    RankedItem,
    RaterComment,
    ResponseRate,
    TrendResult,
)
from results_engine.models.template import (
    AssessmentRecord,
    AssessmentTemplate,
    CCIBandPolicy,
    CCIItemDefinition,
    CompetencyDefinition,
    ScaleConfig,
    TemplateQuestion,
)

__all__ = [
    # Enumerations
    "CCIBand",
    "CCIRaterPopulation",
    "GapClassification",
    "InvitationStatus",
    "RaterType",
    "TrendDirection",
    # Inputs
    "AssessmentRecord",
    "AssessmentTemplate",
    "CCIBandPolicy",
    "CCIItemDefinition",
    "CompetencyDefinition",
    "QuestionResponse",
    "RaterInvitation",
    "ScaleConfig",
    "TemplateQuestion",
    # Outputs
    "CCIItem",
    "CCIResult",
    "CompetencyChange",
    "CompetencyScore",
    "ComputedAssessmentResults",
    "CurrentCeiling",
    "GapEntry",
    "GapHighlight",
    "ItemScore",
    "JohariWindow",
    "RankedItem",
    "RaterComment",
    "ResponseRate",
    "TrendResult",
]
