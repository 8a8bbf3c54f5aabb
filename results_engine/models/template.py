from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import Field, model_validator

from results_engine.models.base import EngineModel
from results_engine.models.enumerations import CCIRaterPopulation


class ScaleConfig(EngineModel):
    """
    Rating scale declared by the template.

    Ratings must lie in [min, max]; labels, when given, name each point.
    """

    min: int = Field(default=1, description="Lowest valid rating")
    max: int = Field(default=5, description="Highest valid rating")
    labels: List[str] = Field(default_factory=list, description="One label per scale point")

    @model_validator(mode="after")
    def validate_range(self):
        if self.min >= self.max:
            raise ValueError(f"scale min ({self.min}) must be < max ({self.max})")
        expected = self.max - self.min + 1
        if self.labels and len(self.labels) != expected:
            raise ValueError(f"scale needs {expected} labels, got {len(self.labels)}")
        return self

    @property
    def min_decimal(self) -> Decimal:
        return Decimal(self.min)

    @property
    def max_decimal(self) -> Decimal:
        return Decimal(self.max)

    @property
    def span(self) -> Decimal:
        return Decimal(self.max - self.min)

    @property
    def midpoint(self) -> Decimal:
        return (self.min_decimal + self.max_decimal) / 2

    def contains(self, value: Decimal) -> bool:
        return self.min_decimal <= value <= self.max_decimal


class TemplateQuestion(EngineModel):
    id: str
    text: str = ""
    reverse_scored: bool = Field(default=False, description="Score is inverted during computation")
    is_cci: bool = Field(default=False, alias="isCCI", description="Coaching Capacity Index item")


class CompetencyDefinition(EngineModel):
    """Immutable reference data owned by the template."""

    id: str
    name: str
    description: Optional[str] = None
    subtitle: Optional[str] = None  # e.g. "Direction Must Hold Under Pressure"
    questions: List[TemplateQuestion] = Field(..., min_length=1)

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]

    def question(self, question_id: str) -> Optional[TemplateQuestion]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


class CCIItemDefinition(EngineModel):
    """One (competency, question) pair feeding the Coaching Capacity Index."""

    competency_id: str
    question_id: str
    rater_population: Optional[CCIRaterPopulation] = Field(
        default=None,
        description="Whose ratings feed the item; settings default when omitted",
    )


class CCIBandPolicy(EngineModel):
    """
    Upper-inclusive band cut points as fractions of the scale span.

    On a 1-5 scale the defaults give Low <= 2.0 < Moderate <= 3.0 < High <= 4.0 < Very High.
    """

    low_max: Decimal = Field(default=Decimal("0.25"), gt=0, lt=1)
    moderate_max: Decimal = Field(default=Decimal("0.50"), gt=0, lt=1)
    high_max: Decimal = Field(default=Decimal("0.75"), gt=0, lt=1)

    @model_validator(mode="after")
    def validate_ascending(self):
        if not (self.low_max < self.moderate_max < self.high_max):
            raise ValueError("CCI band cut points must be strictly ascending")
        return self

    def cut_points(self, scale: ScaleConfig) -> Tuple[Decimal, Decimal, Decimal]:
        """Absolute score cut points for the given scale."""
        return (
            scale.min_decimal + self.low_max * scale.span,
            scale.min_decimal + self.moderate_max * scale.span,
            scale.min_decimal + self.high_max * scale.span,
        )


class AssessmentTemplate(EngineModel):
    id: str
    template_family_id: Optional[str] = Field(
        default=None,
        description="Templates sharing a family are comparable for trend; defaults to id",
    )
    name: str = ""
    competencies: List[CompetencyDefinition] = Field(..., min_length=1)
    scale: ScaleConfig = Field(default_factory=ScaleConfig)
    cci_items: Optional[List[CCIItemDefinition]] = Field(
        default=None,
        description="Explicit CCI item subset; falls back to questions flagged isCCI",
    )
    cci_bands: Optional[CCIBandPolicy] = None

    @model_validator(mode="after")
    def validate_structure(self):
        seen_competencies = set()
        for comp in self.competencies:
            if comp.id in seen_competencies:
                raise ValueError(f"duplicate competency id '{comp.id}'")
            seen_competencies.add(comp.id)
            question_ids = comp.question_ids
            if len(question_ids) != len(set(question_ids)):
                raise ValueError(f"duplicate question id in competency '{comp.id}'")

        for item in self.cci_items or []:
            comp = self.competency(item.competency_id)
            if comp is None or comp.question(item.question_id) is None:
                raise ValueError(
                    f"CCI item {item.competency_id}:{item.question_id} is not in the template"
                )
        return self

    @property
    def family_id(self) -> str:
        return self.template_family_id or self.id

    @property
    def competency_order(self) -> Dict[str, int]:
        """competency_id -> position in the template (tie-break order)."""
        return {comp.id: idx for idx, comp in enumerate(self.competencies)}

    def competency(self, competency_id: str) -> Optional[CompetencyDefinition]:
        for comp in self.competencies:
            if comp.id == competency_id:
                return comp
        return None

    def resolved_cci_items(self) -> List[CCIItemDefinition]:
        """Explicit CCI items, or every question flagged isCCI in template order."""
        if self.cci_items is not None:
            return list(self.cci_items)
        return [
            CCIItemDefinition(competency_id=comp.id, question_id=q.id)
            for comp in self.competencies
            for q in comp.questions
            if q.is_cci
        ]


class AssessmentRecord(EngineModel):
    """The minimum the engine needs to know about the assessment being computed."""

    id: str
    subject_id: str
    template_id: str
    template_family_id: Optional[str] = None
