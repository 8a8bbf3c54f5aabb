# results_engine/scoring/trend_analyzer.py
"""
Trend Analyzer
----------------
Compares the current computation with the subject's previous completed
snapshot (same template family, strictly earlier).

Formula:
    change         = round2(current − previous)
    change_percent = round_half_up(change / previous × 100)   (0 when previous is 0)
    direction      = improved  if change >  ε
                     declined  if change < −ε
                     stable    otherwise

ε defaults to 0.15. Only competencies present in both snapshots are compared.
"""
import structlog
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from results_engine.config import get_settings
from results_engine.models.enumerations import TrendDirection
from results_engine.models.results import (
    CompetencyChange,
    CompetencyScore,
    ComputedAssessmentResults,
    TrendResult,
)
from results_engine.scoring.utils import round2, round_int

logger = structlog.get_logger(__name__)


class TrendAnalyzer:
    """Classify score movement against the previous snapshot."""

    def __init__(self, tolerance: Optional[Decimal] = None):
        self.tolerance = tolerance if tolerance is not None else get_settings().trend_tolerance

    def analyze(
        self,
        assessment_id: str,
        computed_at: datetime,
        competency_scores: Sequence[CompetencyScore],
        overall_score: Decimal,
        previous: Optional[ComputedAssessmentResults],
    ) -> Optional[TrendResult]:
        """
        Args:
            assessment_id: Assessment being computed.
            computed_at: Timestamp of the current computation.
            competency_scores: Current scores, in template order.
            overall_score: Current overall score.
            previous: Previous snapshot from the data source, if any.

        Returns:
            TrendResult, or None for a first assessment, a snapshot of the
            same assessment, or a snapshot that is not strictly earlier.
        """
        if previous is None:
            return None
        if previous.assessment_id == assessment_id:
            logger.info("trend_skipped", assessment_id=assessment_id, reason="same_assessment")
            return None
        if previous.computed_at >= computed_at:
            logger.info(
                "trend_skipped",
                assessment_id=assessment_id,
                reason="previous_not_earlier",
                previous_assessment_id=previous.assessment_id,
            )
            return None

        changes: List[CompetencyChange] = []
        for cs in competency_scores:
            prev = previous.competency_score(cs.competency_id)
            if prev is None:
                continue
            change = round2(cs.overall_average - prev.overall_average)
            changes.append(CompetencyChange(
                competency_id=cs.competency_id,
                competency_name=cs.competency_name,
                previous_score=prev.overall_average,
                current_score=cs.overall_average,
                change=change,
                change_percent=self.change_percent(change, prev.overall_average),
                direction=self.classify(change),
            ))

        overall_change = round2(overall_score - previous.overall_score)
        trend = TrendResult(
            previous_assessment_id=previous.assessment_id,
            previous_completed_at=previous.computed_at,
            overall_direction=self.classify(overall_change),
            overall_change=overall_change,
            competency_changes=tuple(changes),
        )

        logger.info(
            "trend_analyzed",
            assessment_id=assessment_id,
            previous_assessment_id=previous.assessment_id,
            overall_change=float(overall_change),
            overall_direction=trend.overall_direction.value,
            compared=len(changes),
        )
        return trend

    def classify(self, change: Decimal) -> TrendDirection:
        if change > self.tolerance:
            return TrendDirection.IMPROVED
        if change < -self.tolerance:
            return TrendDirection.DECLINED
        return TrendDirection.STABLE

    @staticmethod
    def change_percent(change: Decimal, previous: Decimal) -> int:
        """
        Examples:
            >>> TrendAnalyzer.change_percent(Decimal("0.50"), Decimal("3.00"))
            17
            >>> TrendAnalyzer.change_percent(Decimal("-0.30"), Decimal("4.00"))
            -8
        """
        if previous == 0:
            return 0
        return round_int(change / previous * 100)
