# results_engine/scoring/response_aggregator.py
"""
Response Aggregator
---------------------
Walks the completed invitations of one assessment and buckets every rating by
the competency that owns the question and the invitation's rater type.

    competency_id → rater_type → [ratings]
    competency_id → question_id → rater_type → [ratings]   (item level)

Rules:
    - only status=completed invitations participate
    - a rating outside [scale.min, scale.max] aborts with ScoreValidationError
    - a response naming an unknown competency/question aborts with TemplateReferenceError
    - reverse-scored questions contribute (scale.max + scale.min − rating)
    - a competency/rater-type pair with no ratings is absent, never zero
"""
import structlog
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from results_engine.core.exceptions import ScoreValidationError, TemplateReferenceError
from results_engine.models.enumerations import RaterType
from results_engine.models.invitation import QuestionResponse, RaterInvitation
from results_engine.models.results import RaterComment
from results_engine.models.template import AssessmentTemplate, TemplateQuestion

logger = structlog.get_logger(__name__)

RatingsByType = Dict[RaterType, List[Decimal]]


@dataclass
class AggregatedResponses:
    """Output of ResponseAggregator.aggregate()."""
    by_competency: Dict[str, RatingsByType] = field(default_factory=dict)
    by_question: Dict[str, Dict[str, RatingsByType]] = field(default_factory=dict)
    comments: List[RaterComment] = field(default_factory=list)
    completed_by_type: Dict[RaterType, int] = field(default_factory=dict)
    rating_count: int = 0

    def ratings(self, competency_id: str) -> RatingsByType:
        return self.by_competency.get(competency_id, {})

    def question_ratings(self, competency_id: str, question_id: str) -> RatingsByType:
        return self.by_question.get(competency_id, {}).get(question_id, {})


class ResponseAggregator:
    """Group raw ratings by competency and rater type."""

    def aggregate(
        self,
        invitations: Iterable[RaterInvitation],
        template: AssessmentTemplate,
    ) -> AggregatedResponses:
        """
        Args:
            invitations: Invitations of one assessment. Non-completed ones are skipped.
            template: Template supplying competencies, questions and the scale.

        Returns:
            AggregatedResponses with competency- and question-level buckets.

        Raises:
            ScoreValidationError: a rating lies outside the template scale.
            TemplateReferenceError: a response names a competency/question not in the template.
        """
        by_competency: Dict[str, Dict[RaterType, List[Decimal]]] = defaultdict(lambda: defaultdict(list))
        by_question: Dict[str, Dict[str, Dict[RaterType, List[Decimal]]]] = defaultdict(
            lambda: defaultdict(lambda: defaultdict(list))
        )
        comments: List[RaterComment] = []
        completed_by_type: Dict[RaterType, int] = defaultdict(int)
        rating_count = 0
        skipped = 0

        for invitation in invitations:
            if not invitation.is_completed:
                skipped += 1
                continue
            completed_by_type[invitation.rater_type] += 1

            for response in invitation.responses:
                question = self._resolve_question(response, template)

                if response.rating is not None:
                    rating = self._effective_rating(response, question, invitation, template)
                    by_competency[response.competency_id][invitation.rater_type].append(rating)
                    by_question[response.competency_id][response.question_id][invitation.rater_type].append(rating)
                    rating_count += 1

                if response.comment and response.comment.strip():
                    comments.append(RaterComment(
                        competency_id=response.competency_id,
                        question_id=response.question_id,
                        rater_type=invitation.rater_type,
                        comment=response.comment.strip(),
                    ))

        logger.info(
            "responses_aggregated",
            template_id=template.id,
            completed_by_type={rt.value: n for rt, n in completed_by_type.items()},
            skipped_invitations=skipped,
            rating_count=rating_count,
            comment_count=len(comments),
        )

        return AggregatedResponses(
            by_competency=_freeze(by_competency),
            by_question=_freeze(by_question),
            comments=comments,
            completed_by_type=dict(completed_by_type),
            rating_count=rating_count,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_question(response: QuestionResponse, template: AssessmentTemplate) -> TemplateQuestion:
        competency = template.competency(response.competency_id)
        if competency is None:
            raise TemplateReferenceError(
                f"Response references unknown competency '{response.competency_id}'",
                competency_id=response.competency_id,
                question_id=response.question_id,
            )
        question = competency.question(response.question_id)
        if question is None:
            raise TemplateReferenceError(
                f"Question '{response.question_id}' is not part of competency '{response.competency_id}'",
                competency_id=response.competency_id,
                question_id=response.question_id,
            )
        return question

    @staticmethod
    def _effective_rating(
        response: QuestionResponse,
        question: TemplateQuestion,
        invitation: RaterInvitation,
        template: AssessmentTemplate,
    ) -> Decimal:
        scale = template.scale
        rating = response.rating
        if not scale.contains(rating):
            raise ScoreValidationError(
                f"Rating {rating} for question '{response.question_id}' is outside "
                f"scale [{scale.min}, {scale.max}]",
                details={
                    "invitation_id": invitation.id,
                    "competency_id": response.competency_id,
                    "question_id": response.question_id,
                    "rating": str(rating),
                },
            )
        if question.reverse_scored:
            return scale.max_decimal + scale.min_decimal - rating
        return rating


def _freeze(nested: dict) -> dict:
    """defaultdict trees -> plain dicts, so lookups never create empty buckets."""
    return {
        key: _freeze(value) if isinstance(value, dict) else value
        for key, value in nested.items()
    }
