"""
Computed results models - Assessment Results Engine
results_engine/models/results.py

ComputedAssessmentResults is the engine's sole output and the wire contract
consumed by the report renderer and the results view. Every model here is
frozen; collections are tuples and mappings are read-only views. Scores
serialize as two-decimal strings.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from pydantic import Field, model_validator

from results_engine.models.base import FrozenModel, ReadOnlyDict, Score
from results_engine.models.enumerations import (
    CCIBand,
    CCIRaterPopulation,
    GapClassification,
    RaterType,
    TrendDirection,
)


def average_field(rater_type: RaterType) -> str:
    """Attribute holding the average for a rater type, e.g. 'direct_report_average'."""
    return f"{rater_type.value}_average"


class RaterAverages(FrozenModel):
    """Per-rater-type averages plus the derived overall figures."""

    self_average: Optional[Score] = None
    manager_average: Optional[Score] = None
    peer_average: Optional[Score] = None
    direct_report_average: Optional[Score] = None
    other_average: Optional[Score] = None

    overall_average: Score = Field(..., description="Equal-weight mean of the present type averages")
    others_average: Optional[Score] = Field(
        default=None, description="Equal-weight mean of the non-self type averages"
    )
    gap: Optional[Score] = Field(default=None, description="self_average - overall_average")
    response_count: int = Field(default=0, ge=0)

    def average_for(self, rater_type: RaterType) -> Optional[Decimal]:
        return getattr(self, average_field(rater_type))

    @property
    def averages(self) -> Dict[RaterType, Decimal]:
        """Only the rater types that actually responded."""
        return {
            rt: avg for rt in RaterType
            if (avg := self.average_for(rt)) is not None
        }


class CompetencyScore(RaterAverages):
    competency_id: str
    competency_name: str
    response_distribution: ReadOnlyDict[int, int] = Field(
        default_factory=dict, description="Scale point -> number of ratings"
    )
    rater_agreement: Score = Field(
        default=Decimal("0"), description="Sample std dev of non-self ratings"
    )


class ItemScore(RaterAverages):
    competency_id: str
    question_id: str
    question_text: str = ""


class ResponseRate(FrozenModel):
    completed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    rate: int = Field(default=0, ge=0, le=100, description="Completion percentage")

    @model_validator(mode="after")
    def validate_counts(self):
        if self.completed > self.total:
            raise ValueError(f"completed ({self.completed}) exceeds total ({self.total})")
        return self


class GapHighlight(FrozenModel):
    """A strength or development area, ranked by |gap|."""

    competency_id: str
    competency_name: str
    gap: Score


class CurrentCeiling(FrozenModel):
    competency_id: str
    competency_name: str
    subtitle: Optional[str] = None
    score: Score
    narrative: str


class RankedItem(FrozenModel):
    competency_id: str
    competency_name: str
    question_id: str
    question_text: str
    overall_average: Score
    self_average: Optional[Score] = None
    gap: Optional[Score] = None


class GapEntry(FrozenModel):
    competency_id: str
    competency_name: str
    self_average: Score
    others_average: Optional[Score] = None
    gap: Score
    classification: GapClassification
    interpretation: str


class JohariWindow(FrozenModel):
    open_area: Tuple[str, ...] = ()
    blind_spot: Tuple[str, ...] = ()
    hidden_area: Tuple[str, ...] = ()
    unknown_area: Tuple[str, ...] = ()


class RaterComment(FrozenModel):
    competency_id: str
    question_id: str
    rater_type: RaterType
    comment: str


class CCIItem(FrozenModel):
    competency_id: str
    question_id: str
    competency_name: str
    question_text: str
    raw_score: Score = Field(..., description="Question average across every rater")
    effective_score: Score = Field(..., description="Average of the item's rater population")
    rater_population: CCIRaterPopulation


class CCIResult(FrozenModel):
    score: Score
    band: CCIBand
    items: Tuple[CCIItem, ...]


class CompetencyChange(FrozenModel):
    competency_id: str
    competency_name: str
    previous_score: Score
    current_score: Score
    change: Score
    change_percent: int
    direction: TrendDirection


class TrendResult(FrozenModel):
    previous_assessment_id: str
    previous_completed_at: datetime
    overall_direction: TrendDirection
    overall_change: Score
    competency_changes: Tuple[CompetencyChange, ...]


class ComputedAssessmentResults(FrozenModel):
    """Immutable snapshot produced once per computation."""

    assessment_id: str
    subject_id: Optional[str] = None
    template_id: Optional[str] = None
    computed_at: datetime

    response_rate_by_type: ReadOnlyDict[RaterType, ResponseRate]
    competency_scores: Tuple[CompetencyScore, ...]
    item_scores: Tuple[ItemScore, ...] = ()
    overall_score: Score

    strengths: Tuple[GapHighlight, ...] = ()
    development_areas: Tuple[GapHighlight, ...] = ()
    current_ceiling: Optional[CurrentCeiling] = None
    cci_result: Optional[CCIResult] = None
    trend: Optional[TrendResult] = None

    gap_analysis: Tuple[GapEntry, ...] = ()
    top_items: Tuple[RankedItem, ...] = ()
    bottom_items: Tuple[RankedItem, ...] = ()
    johari_window: JohariWindow = Field(default_factory=JohariWindow)
    comments: Tuple[RaterComment, ...] = ()

    def competency_score(self, competency_id: str) -> Optional[CompetencyScore]:
        for cs in self.competency_scores:
            if cs.competency_id == competency_id:
                return cs
        return None

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys and two-decimal score strings."""
        return self.model_dump(mode="json", by_alias=True)
