# results_engine/scoring/competency_scorer.py
"""
Competency Scorer
-------------------
Turns aggregated ratings into per-competency (and per-question) scores.

Formula:
    average[type]  = round2(mean(ratings[type]))             for each present type
    overall        = round2(mean(average[type] for present types))
    others         = round2(mean(average[type] for present non-self types))
    gap            = round2(average[self] − overall)          only when self responded

The overall average is a mean of means: every rater type weighs the same no
matter how many raters it had, so ten peers cannot drown out one manager.
round2 is ROUND_HALF_UP.

Worked examples (self / manager / peer / direct_report → overall, gap):
    4.2 / 3.8 / 4.0 / 3.5  →  3.88, +0.32
    3.8 / 4.2 / 4.1 / 4.3  →  4.10, −0.30
"""
import structlog
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from results_engine.models.enumerations import RaterType
from results_engine.models.results import CompetencyScore, ItemScore, average_field
from results_engine.models.template import AssessmentTemplate, CompetencyDefinition, ScaleConfig
from results_engine.scoring.response_aggregator import AggregatedResponses, RatingsByType
from results_engine.scoring.utils import mean, round2, round_int, sample_std_dev

logger = structlog.get_logger(__name__)


@dataclass
class ScoredCompetencies:
    """Output of CompetencyScorer.score()."""
    competency_scores: Tuple[CompetencyScore, ...]
    item_scores: Tuple[ItemScore, ...]
    unscored_competencies: Tuple[str, ...]   # template competencies nobody rated


class CompetencyScorer:
    """Compute rater-type averages, overall average and self/others gap."""

    def score(
        self,
        aggregated: AggregatedResponses,
        template: AssessmentTemplate,
    ) -> ScoredCompetencies:
        """
        Score every template competency (and question) that received ratings.

        Competencies with zero ratings from every rater type are left out of
        the result rather than scored as zero.
        """
        competency_scores: List[CompetencyScore] = []
        item_scores: List[ItemScore] = []
        unscored: List[str] = []

        for competency in template.competencies:
            ratings = aggregated.ratings(competency.id)
            score = self.score_competency(competency, ratings, template.scale)
            if score is None:
                unscored.append(competency.id)
                continue
            competency_scores.append(score)

            for question in competency.questions:
                figures = rater_figures(aggregated.question_ratings(competency.id, question.id))
                if figures is None:
                    continue
                item_scores.append(ItemScore(
                    competency_id=competency.id,
                    question_id=question.id,
                    question_text=question.text,
                    **figures,
                ))

        if unscored:
            logger.warning("competencies_without_responses", competency_ids=unscored)

        logger.info(
            "competencies_scored",
            template_id=template.id,
            scored=len(competency_scores),
            items_scored=len(item_scores),
            overall_averages={cs.competency_id: float(cs.overall_average) for cs in competency_scores},
        )

        return ScoredCompetencies(
            competency_scores=tuple(competency_scores),
            item_scores=tuple(item_scores),
            unscored_competencies=tuple(unscored),
        )

    def score_competency(
        self,
        competency: CompetencyDefinition,
        ratings: RatingsByType,
        scale: ScaleConfig,
    ) -> Optional[CompetencyScore]:
        """
        Args:
            competency: Template competency being scored.
            ratings: rater_type → ratings for this competency (absent types omitted).
            scale: Template scale, used for the response distribution.

        Returns:
            CompetencyScore, or None when no rater type has any rating.

        Examples:
            >>> scorer = CompetencyScorer()
            >>> ratings = {RaterType.SELF: [Decimal("4.2")], RaterType.MANAGER: [Decimal("3.8")],
            ...            RaterType.PEER: [Decimal("4.0")], RaterType.DIRECT_REPORT: [Decimal("3.5")]}
            >>> cs = scorer.score_competency(competency, ratings, scale)
            >>> cs.overall_average, cs.gap
            (Decimal('3.88'), Decimal('0.32'))
        """
        figures = rater_figures(ratings)
        if figures is None:
            return None

        others_ratings = [
            r for rt, values in ratings.items() if rt != RaterType.SELF for r in values
        ]

        return CompetencyScore(
            competency_id=competency.id,
            competency_name=competency.name,
            response_distribution=response_distribution(ratings, scale),
            rater_agreement=round2(sample_std_dev(others_ratings)),
            **figures,
        )


def rater_figures(ratings: RatingsByType) -> Optional[Dict[str, Any]]:
    """Per-type averages, overall, others and gap for one bucket of ratings."""
    type_averages: Dict[RaterType, Decimal] = {
        rt: round2(mean(ratings[rt]))
        for rt in RaterType
        if ratings.get(rt)
    }
    if not type_averages:
        return None

    overall = round2(mean(list(type_averages.values())))
    others = [avg for rt, avg in type_averages.items() if rt != RaterType.SELF]
    self_avg = type_averages.get(RaterType.SELF)

    figures: Dict[str, Any] = {average_field(rt): avg for rt, avg in type_averages.items()}
    figures.update(
        overall_average=overall,
        others_average=round2(mean(others)) if others else None,
        gap=round2(self_avg - overall) if self_avg is not None else None,
        response_count=sum(len(v) for v in ratings.values()),
    )
    return figures


def response_distribution(ratings: RatingsByType, scale: ScaleConfig) -> Dict[int, int]:
    """Count of ratings per scale point (fractional ratings round half-up)."""
    distribution = {point: 0 for point in range(scale.min, scale.max + 1)}
    for values in ratings.values():
        for rating in values:
            point = round_int(rating)
            if point in distribution:
                distribution[point] += 1
    return distribution
