# results_engine/scoring/results_assembler.py
"""
Results Assembler
-------------------
Pure orchestration of one results computation:

    1. ResponseAggregator     completed invitations → rating buckets
    2. CompetencyScorer       buckets → competency and item scores
    3. SummarySelector        overall score, strengths, development areas, ceiling
    4. CCI calculator         coaching capacity index and band
    5. TrendAnalyzer          comparison with the previous snapshot
    6. consistency checks     template membership, scale range
    7. ComputedAssessmentResults (immutable, stamped with computed_at)

The assembler performs no I/O. Inputs are materialized by the caller; the
previous snapshot is looked up through a callable so the lookup can use the
computed_at stamped here.
"""
import structlog
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from results_engine.config import Settings, get_settings
from results_engine.core.exceptions import (
    IncompleteDataError,
    ScoreValidationError,
    TemplateReferenceError,
)
from results_engine.models.enumerations import CCIRaterPopulation, RaterType
from results_engine.models.invitation import RaterInvitation
from results_engine.models.results import (
    CCIResult,
    ComputedAssessmentResults,
    RaterAverages,
    ResponseRate,
)
from results_engine.models.template import AssessmentRecord, AssessmentTemplate, CCIBandPolicy, ScaleConfig
from results_engine.scoring.cci_calculator import CoachingCapacityIndexCalculator
from results_engine.scoring.competency_scorer import CompetencyScorer
from results_engine.scoring.response_aggregator import ResponseAggregator
from results_engine.scoring.summary_selector import SummarySelector
from results_engine.scoring.trend_analyzer import TrendAnalyzer
from results_engine.scoring.utils import percent

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]
PreviousLookup = Callable[[datetime], Optional[ComputedAssessmentResults]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ResultsAssembler:
    """Compute one ComputedAssessmentResults snapshot from materialized inputs."""

    def __init__(
        self,
        aggregator: Optional[ResponseAggregator] = None,
        scorer: Optional[CompetencyScorer] = None,
        selector: Optional[SummarySelector] = None,
        cci_calculator: Optional[CoachingCapacityIndexCalculator] = None,
        trend_analyzer: Optional[TrendAnalyzer] = None,
        clock: Optional[Clock] = None,
    ):
        self.aggregator = aggregator or ResponseAggregator()
        self.scorer = scorer or CompetencyScorer()
        self.selector = selector or SummarySelector()
        self.cci_calculator = cci_calculator or CoachingCapacityIndexCalculator()
        self.trend_analyzer = trend_analyzer or TrendAnalyzer()
        self.clock = clock or utc_now

    @classmethod
    def from_settings(cls, app_settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> "ResultsAssembler":
        """Build an assembler whose tunables all come from one Settings object."""
        s = app_settings or get_settings()
        low_max, moderate_max, high_max = s.cci_band_cuts
        return cls(
            selector=SummarySelector(
                gap_threshold=s.gap_threshold,
                ranked_items_limit=s.RANKED_ITEMS_LIMIT,
            ),
            cci_calculator=CoachingCapacityIndexCalculator(
                band_policy=CCIBandPolicy(low_max=low_max, moderate_max=moderate_max, high_max=high_max),
                default_population=CCIRaterPopulation(s.CCI_DEFAULT_RATER_POPULATION),
            ),
            trend_analyzer=TrendAnalyzer(tolerance=s.trend_tolerance),
            clock=clock,
        )

    def assemble(
        self,
        record: AssessmentRecord,
        template: AssessmentTemplate,
        invitations: Iterable[RaterInvitation],
        invitation_totals: Optional[Dict[RaterType, int]] = None,
        previous_lookup: Optional[PreviousLookup] = None,
    ) -> ComputedAssessmentResults:
        """
        Args:
            record: Assessment being computed (subject, template).
            template: The assessment's template.
            invitations: The assessment's invitations; only completed ones are scored.
            invitation_totals: rater_type → invitations sent; defaults to completed counts.
            previous_lookup: Called with computed_at, returns the previous snapshot or None.

        Returns:
            Immutable ComputedAssessmentResults.

        Raises:
            IncompleteDataError: no completed invitations, or no ratings at all.
            ScoreValidationError: rating or derived score outside the scale, or bad totals.
            TemplateReferenceError: response or record pointing outside the template.
        """
        if record.template_id != template.id:
            raise TemplateReferenceError(
                f"Assessment {record.id} uses template '{record.template_id}', got '{template.id}'"
            )

        aggregated = self.aggregator.aggregate(invitations, template)
        if not aggregated.completed_by_type:
            raise IncompleteDataError(record.id, "No completed invitations")
        if aggregated.rating_count == 0:
            raise IncompleteDataError(record.id, "Completed invitations carry no ratings")

        response_rates = self._response_rates(aggregated.completed_by_type, invitation_totals)

        scored = self.scorer.score(aggregated, template)
        summary = self.selector.summarize(scored.competency_scores, template, scored.item_scores)
        cci_result = self.cci_calculator.calculate(aggregated, template)

        self._validate_consistency(template, scored.competency_scores, scored.item_scores, cci_result)

        computed_at = self.clock()
        previous = previous_lookup(computed_at) if previous_lookup else None
        trend = self.trend_analyzer.analyze(
            record.id, computed_at, scored.competency_scores, summary.overall_score, previous,
        )

        results = ComputedAssessmentResults(
            assessment_id=record.id,
            subject_id=record.subject_id,
            template_id=template.id,
            computed_at=computed_at,
            response_rate_by_type=response_rates,
            competency_scores=scored.competency_scores,
            item_scores=scored.item_scores,
            overall_score=summary.overall_score,
            strengths=summary.strengths,
            development_areas=summary.development_areas,
            current_ceiling=summary.current_ceiling,
            cci_result=cci_result,
            trend=trend,
            gap_analysis=summary.gap_analysis,
            top_items=summary.top_items,
            bottom_items=summary.bottom_items,
            johari_window=summary.johari_window,
            comments=tuple(aggregated.comments),
        )

        logger.info(
            "results_assembled",
            assessment_id=record.id,
            template_id=template.id,
            overall_score=float(results.overall_score),
            competencies=len(results.competency_scores),
            cci_band=cci_result.band.value if cci_result else None,
            has_trend=trend is not None,
        )
        return results

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _response_rates(
        completed_by_type: Dict[RaterType, int],
        invitation_totals: Optional[Dict[RaterType, int]],
    ) -> Dict[RaterType, ResponseRate]:
        totals = dict(invitation_totals or {})
        rates: Dict[RaterType, ResponseRate] = {}
        for rater_type in RaterType:
            completed = completed_by_type.get(rater_type, 0)
            total = totals.get(rater_type, completed)
            if completed == 0 and total == 0:
                continue
            if total < completed:
                raise ScoreValidationError(
                    f"{rater_type.value}: {completed} completed invitations but only {total} sent",
                    details={"rater_type": rater_type.value, "completed": completed, "total": total},
                )
            rates[rater_type] = ResponseRate(
                completed=completed, total=total, rate=percent(completed, total),
            )
        return rates

    @staticmethod
    def _validate_consistency(
        template: AssessmentTemplate,
        competency_scores,
        item_scores,
        cci_result: Optional[CCIResult],
    ) -> None:
        scale = template.scale
        known = {comp.id for comp in template.competencies}

        for cs in competency_scores:
            if cs.competency_id not in known:
                raise TemplateReferenceError(
                    f"Scored competency '{cs.competency_id}' is not in template '{template.id}'",
                    competency_id=cs.competency_id,
                )
            _check_range(scale, cs, f"competency '{cs.competency_id}'")

        for item in item_scores:
            _check_range(scale, item, f"question '{item.competency_id}:{item.question_id}'")

        if cci_result is not None and not scale.contains(cci_result.score):
            raise ScoreValidationError(
                f"CCI score {cci_result.score} outside scale [{scale.min}, {scale.max}]",
                details={"cci_score": str(cci_result.score)},
            )


def _check_range(scale: ScaleConfig, averages: RaterAverages, label: str) -> None:
    values: List[Decimal] = list(averages.averages.values()) + [averages.overall_average]
    if averages.others_average is not None:
        values.append(averages.others_average)
    for value in values:
        if not scale.contains(value):
            raise ScoreValidationError(
                f"Average {value} for {label} outside scale [{scale.min}, {scale.max}]",
                details={"target": label, "value": str(value)},
            )
