# results_engine/scoring/cci_calculator.py
"""
Coaching Capacity Index (CCI)
-------------------------------
A single 2-decimal score plus a qualitative band, computed over a
template-defined subset of (competency, question) items.

Formula:
    effective_score[item] = round2(mean(ratings of the item's rater population))
    CCI                   = round2(mean(effective_score[item]))

Rater populations:
    all            every rater type, self included
    self           the self rating only
    others         every rater type except self
    others_or_all  others when anyone else rated the item, otherwise all

Bands (upper-inclusive cut points, fractions of the scale span):
    CCI <= min + low_max·span       → Low
    CCI <= min + moderate_max·span  → Moderate
    CCI <= min + high_max·span      → High
    otherwise                       → Very High

On the default 1-5 scale with (0.25, 0.50, 0.75): 2.0 / 3.0 / 4.0.
"""
import structlog
from decimal import Decimal
from typing import List, Optional

from results_engine.config import get_settings
from results_engine.models.enumerations import CCIBand, CCIRaterPopulation, RaterType
from results_engine.models.results import CCIItem, CCIResult
from results_engine.models.template import AssessmentTemplate, CCIBandPolicy, ScaleConfig
from results_engine.scoring.response_aggregator import AggregatedResponses, RatingsByType
from results_engine.scoring.utils import mean, round2

logger = structlog.get_logger(__name__)


class CoachingCapacityIndexCalculator:
    """Calculate the CCI score and band for one assessment."""

    def __init__(
        self,
        band_policy: Optional[CCIBandPolicy] = None,
        default_population: Optional[CCIRaterPopulation] = None,
    ):
        app_settings = get_settings()
        if band_policy is None:
            low_max, moderate_max, high_max = app_settings.cci_band_cuts
            band_policy = CCIBandPolicy(low_max=low_max, moderate_max=moderate_max, high_max=high_max)
        self.band_policy = band_policy
        self.default_population = default_population or CCIRaterPopulation(
            app_settings.CCI_DEFAULT_RATER_POPULATION
        )

    def calculate(
        self,
        aggregated: AggregatedResponses,
        template: AssessmentTemplate,
    ) -> Optional[CCIResult]:
        """
        Args:
            aggregated: Question-level ratings from the ResponseAggregator.
            template: Template naming the CCI items, scale and optional band override.

        Returns:
            CCIResult, or None when no CCI item received ratings from its population.
        """
        items: List[CCIItem] = []

        for definition in template.resolved_cci_items():
            competency = template.competency(definition.competency_id)
            question = competency.question(definition.question_id)
            ratings = aggregated.question_ratings(definition.competency_id, definition.question_id)

            all_ratings = [r for values in ratings.values() for r in values]
            if not all_ratings:
                continue

            population = definition.rater_population or self.default_population
            population_ratings = self.select_population(ratings, population)
            if not population_ratings:
                logger.debug(
                    "cci_item_skipped",
                    competency_id=definition.competency_id,
                    question_id=definition.question_id,
                    rater_population=population.value,
                )
                continue

            items.append(CCIItem(
                competency_id=competency.id,
                question_id=question.id,
                competency_name=competency.name,
                question_text=question.text,
                raw_score=round2(mean(all_ratings)),
                effective_score=round2(mean(population_ratings)),
                rater_population=population,
            ))

        if not items:
            logger.info("cci_not_computed", template_id=template.id, reason="no_rated_items")
            return None

        score = round2(mean([item.effective_score for item in items]))
        policy = template.cci_bands or self.band_policy
        band = self.classify_band(score, template.scale, policy)

        logger.info(
            "cci_calculated",
            template_id=template.id,
            score=float(score),
            band=band.value,
            item_count=len(items),
        )
        return CCIResult(score=score, band=band, items=tuple(items))

    @staticmethod
    def select_population(ratings: RatingsByType, population: CCIRaterPopulation) -> List[Decimal]:
        self_ratings = list(ratings.get(RaterType.SELF, []))
        others = [r for rt, values in ratings.items() if rt != RaterType.SELF for r in values]

        if population == CCIRaterPopulation.SELF:
            return self_ratings
        if population == CCIRaterPopulation.OTHERS:
            return others
        if population == CCIRaterPopulation.OTHERS_OR_ALL and others:
            return others
        return self_ratings + others

    @staticmethod
    def classify_band(score: Decimal, scale: ScaleConfig, policy: CCIBandPolicy) -> CCIBand:
        """
        Examples:
            >>> CoachingCapacityIndexCalculator.classify_band(Decimal("3.00"), ScaleConfig(), CCIBandPolicy())
            <CCIBand.MODERATE: 'Moderate'>
            >>> CoachingCapacityIndexCalculator.classify_band(Decimal("4.01"), ScaleConfig(), CCIBandPolicy())
            <CCIBand.VERY_HIGH: 'Very High'>
        """
        low_cut, moderate_cut, high_cut = policy.cut_points(scale)
        if score <= low_cut:
            return CCIBand.LOW
        if score <= moderate_cut:
            return CCIBand.MODERATE
        if score <= high_cut:
            return CCIBand.HIGH
        return CCIBand.VERY_HIGH
