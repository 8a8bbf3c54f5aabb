# results_engine/scoring/summary_selector.py
"""
Summary Selector
------------------
Derives the report headline figures from scored competencies.

    overall_score      = round2(mean(competency overall averages))
    strengths          = gap < 0, by descending |gap|   (others see more than self)
    development_areas  = gap > 0, by descending |gap|   (self sees more than others)
    current_ceiling    = lowest overall average

Ties always resolve in template order. A competency with no gap, or a gap of
exactly zero, is neither a strength nor a development area.

Also builds the interpretive sections shown on the results page: the
self-vs-others gap analysis, the Johari window and the top/bottom ranked items.
"""
import structlog
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from results_engine.config import get_settings
from results_engine.models.enumerations import GapClassification
from results_engine.models.results import (
    CompetencyScore,
    CurrentCeiling,
    GapEntry,
    GapHighlight,
    ItemScore,
    JohariWindow,
    RankedItem,
)
from results_engine.models.template import AssessmentTemplate
from results_engine.scoring.utils import mean, round2

logger = structlog.get_logger(__name__)


CEILING_NARRATIVE = (
    "The data suggests that {name} represents the current constraint on leadership "
    "capacity. Until this area is addressed, growth in other dimensions may be limited."
)

GAP_INTERPRETATIONS: Dict[GapClassification, str] = {
    GapClassification.BLIND_SPOT: (
        "You rated yourself higher than others on {name}. This may indicate an area "
        "where self-perception differs from how others experience you."
    ),
    GapClassification.HIDDEN_STRENGTH: (
        "Others rated you higher than you rated yourself on {name}. This is a strength "
        "that others see in you that you may not fully recognize."
    ),
    GapClassification.ALIGNED: (
        "Your self-assessment and others' ratings on {name} are well-aligned."
    ),
}


@dataclass
class ResultsSummary:
    """Output of SummarySelector.summarize()."""
    overall_score: Decimal
    strengths: Tuple[GapHighlight, ...]
    development_areas: Tuple[GapHighlight, ...]
    current_ceiling: Optional[CurrentCeiling]
    gap_analysis: Tuple[GapEntry, ...]
    johari_window: JohariWindow
    top_items: Tuple[RankedItem, ...]
    bottom_items: Tuple[RankedItem, ...]


class SummarySelector:
    """Select overall score, strengths, development areas and the current ceiling."""

    def __init__(
        self,
        gap_threshold: Optional[Decimal] = None,
        ranked_items_limit: Optional[int] = None,
    ):
        app_settings = get_settings()
        self.gap_threshold = (
            gap_threshold if gap_threshold is not None else app_settings.gap_threshold
        )
        self.ranked_items_limit = (
            ranked_items_limit if ranked_items_limit is not None else app_settings.RANKED_ITEMS_LIMIT
        )

    def summarize(
        self,
        competency_scores: Sequence[CompetencyScore],
        template: AssessmentTemplate,
        item_scores: Sequence[ItemScore] = (),
    ) -> ResultsSummary:
        """
        Args:
            competency_scores: Scored competencies, in template order.
            template: Template supplying order, subtitles and the scale midpoint.
            item_scores: Question-level scores for the ranked item lists.

        Raises:
            ValueError: competency_scores is empty (the assembler rejects that earlier).
        """
        strengths, development_areas = self.select_highlights(competency_scores, template)
        top_items, bottom_items = self.ranked_items(item_scores, template)
        summary = ResultsSummary(
            overall_score=self.overall_score(competency_scores),
            strengths=strengths,
            development_areas=development_areas,
            current_ceiling=self.current_ceiling(competency_scores, template),
            gap_analysis=self.gap_analysis(competency_scores),
            johari_window=self.johari_window(competency_scores, template),
            top_items=top_items,
            bottom_items=bottom_items,
        )

        logger.info(
            "summary_selected",
            overall_score=float(summary.overall_score),
            strengths=[h.competency_id for h in summary.strengths],
            development_areas=[h.competency_id for h in summary.development_areas],
            current_ceiling=summary.current_ceiling.competency_id if summary.current_ceiling else None,
        )
        return summary

    @staticmethod
    def overall_score(competency_scores: Sequence[CompetencyScore]) -> Decimal:
        """
        Equal-weight mean of competency overall averages.

        Examples:
            3.88, 4.10, 3.60, 3.80 → 15.38 / 4 = 3.845 → 3.85
        """
        return round2(mean([cs.overall_average for cs in competency_scores]))

    @staticmethod
    def select_highlights(
        competency_scores: Sequence[CompetencyScore],
        template: AssessmentTemplate,
    ) -> Tuple[Tuple[GapHighlight, ...], Tuple[GapHighlight, ...]]:
        """Partition by the sign of gap; returns (strengths, development_areas)."""
        order = template.competency_order
        with_gap = [cs for cs in competency_scores if cs.gap is not None and cs.gap != 0]
        with_gap.sort(key=lambda cs: (-abs(cs.gap), order.get(cs.competency_id, len(order))))

        def highlight(cs: CompetencyScore) -> GapHighlight:
            return GapHighlight(
                competency_id=cs.competency_id,
                competency_name=cs.competency_name,
                gap=cs.gap,
            )

        strengths = tuple(highlight(cs) for cs in with_gap if cs.gap < 0)
        development_areas = tuple(highlight(cs) for cs in with_gap if cs.gap > 0)
        return strengths, development_areas

    @staticmethod
    def current_ceiling(
        competency_scores: Sequence[CompetencyScore],
        template: AssessmentTemplate,
    ) -> Optional[CurrentCeiling]:
        """Lowest overall average; first in template order on ties."""
        if not competency_scores:
            return None
        order = template.competency_order
        lowest = min(
            competency_scores,
            key=lambda cs: (cs.overall_average, order.get(cs.competency_id, len(order))),
        )
        definition = template.competency(lowest.competency_id)
        subtitle = definition.subtitle if definition and definition.subtitle else None
        name = f"{lowest.competency_name} ({subtitle})" if subtitle else lowest.competency_name

        return CurrentCeiling(
            competency_id=lowest.competency_id,
            competency_name=lowest.competency_name,
            subtitle=subtitle,
            score=lowest.overall_average,
            narrative=CEILING_NARRATIVE.format(name=name),
        )

    def gap_analysis(self, competency_scores: Sequence[CompetencyScore]) -> Tuple[GapEntry, ...]:
        """
        Self versus others for every competency that has both.

        gap = round2(self − others); > threshold is a blind spot,
        < −threshold a hidden strength, anything else aligned.
        """
        entries: List[GapEntry] = []
        for cs in competency_scores:
            if cs.self_average is None or cs.others_average is None:
                continue
            gap = round2(cs.self_average - cs.others_average)
            classification = self.classify_gap(gap)
            entries.append(GapEntry(
                competency_id=cs.competency_id,
                competency_name=cs.competency_name,
                self_average=cs.self_average,
                others_average=cs.others_average,
                gap=gap,
                classification=classification,
                interpretation=GAP_INTERPRETATIONS[classification].format(name=cs.competency_name),
            ))
        return tuple(entries)

    def classify_gap(self, gap: Decimal) -> GapClassification:
        if gap > self.gap_threshold:
            return GapClassification.BLIND_SPOT
        if gap < -self.gap_threshold:
            return GapClassification.HIDDEN_STRENGTH
        return GapClassification.ALIGNED

    @staticmethod
    def johari_window(
        competency_scores: Sequence[CompetencyScore],
        template: AssessmentTemplate,
    ) -> JohariWindow:
        """Place each competency by self-high / others-high, high meaning >= scale midpoint."""
        midpoint = template.scale.midpoint
        quadrants: Dict[str, List[str]] = {
            "open_area": [], "blind_spot": [], "hidden_area": [], "unknown_area": [],
        }
        for cs in competency_scores:
            if cs.self_average is None or cs.others_average is None:
                continue
            self_high = cs.self_average >= midpoint
            others_high = cs.others_average >= midpoint
            if self_high and others_high:
                quadrants["open_area"].append(cs.competency_name)
            elif others_high:
                quadrants["blind_spot"].append(cs.competency_name)
            elif self_high:
                quadrants["hidden_area"].append(cs.competency_name)
            else:
                quadrants["unknown_area"].append(cs.competency_name)

        return JohariWindow(**{k: tuple(v) for k, v in quadrants.items()})

    def ranked_items(
        self,
        item_scores: Sequence[ItemScore],
        template: AssessmentTemplate,
    ) -> Tuple[Tuple[RankedItem, ...], Tuple[RankedItem, ...]]:
        """N highest and N lowest question-level overall averages."""
        if not item_scores:
            return (), ()

        position: Dict[Tuple[str, str], int] = {}
        names: Dict[str, str] = {}
        for comp in template.competencies:
            names[comp.id] = comp.name
            for q in comp.questions:
                position[(comp.id, q.id)] = len(position)

        def pos(item: ItemScore) -> int:
            return position.get((item.competency_id, item.question_id), len(position))

        def ranked(item: ItemScore) -> RankedItem:
            return RankedItem(
                competency_id=item.competency_id,
                competency_name=names.get(item.competency_id, ""),
                question_id=item.question_id,
                question_text=item.question_text,
                overall_average=item.overall_average,
                self_average=item.self_average,
                gap=item.gap,
            )

        limit = self.ranked_items_limit
        top = sorted(item_scores, key=lambda i: (-i.overall_average, pos(i)))[:limit]
        bottom = sorted(item_scores, key=lambda i: (i.overall_average, pos(i)))[:limit]
        return tuple(ranked(i) for i in top), tuple(ranked(i) for i in bottom)
