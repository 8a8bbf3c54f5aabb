# tests/factories.py

"""
Test data builders shared by conftest fixtures and hypothesis tests.

REFERENCE DATA:
- Template "leadership-360": VISION, CLARITY, TEAMWORK, CANDOR, ten questions
  each, question 1 of every competency is a CCI item, scale 1-5.
- One rater per type (self, manager, peer, direct_report); each rater's ten
  ratings average exactly to the figure in RATER_MEANS.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from results_engine.models import (
    AssessmentRecord,
    AssessmentTemplate,
    CompetencyDefinition,
    InvitationStatus,
    QuestionResponse,
    RaterInvitation,
    RaterType,
    ScaleConfig,
    TemplateQuestion,
)

TEMPLATE_ID = "leadership-360"
FAMILY_ID = "leadership-360-family"
SUBJECT_ID = "subject-001"
ASSESSMENT_ID = "assessment-2026-q1"
PREVIOUS_ASSESSMENT_ID = "assessment-2025-q3"

QUESTIONS_PER_COMPETENCY = 10

COMPUTED_AT = datetime(2026, 3, 15, 9, 30, tzinfo=timezone.utc)

COMPETENCIES = [
    ("vision", "VISION", "Direction Must Hold Under Pressure"),
    ("clarity", "CLARITY", "Structure Must Reduce Friction"),
    ("teamwork", "TEAMWORK", "Tension Must Improve Performance"),
    ("candor", "CANDOR", "Standards Must Be Protected"),
]

# competency -> rater type -> mean of that rater's ten ratings
RATER_MEANS: Dict[str, Dict[RaterType, str]] = {
    "vision": {
        RaterType.SELF: "4.2", RaterType.MANAGER: "3.8",
        RaterType.PEER: "4.0", RaterType.DIRECT_REPORT: "3.5",
    },
    "clarity": {
        RaterType.SELF: "3.8", RaterType.MANAGER: "4.2",
        RaterType.PEER: "4.1", RaterType.DIRECT_REPORT: "4.3",
    },
    "teamwork": {
        RaterType.SELF: "4.0", RaterType.MANAGER: "3.5",
        RaterType.PEER: "3.7", RaterType.DIRECT_REPORT: "3.2",
    },
    "candor": {
        RaterType.SELF: "3.5", RaterType.MANAGER: "4.0",
        RaterType.PEER: "3.9", RaterType.DIRECT_REPORT: "3.8",
    },
}

# Expected (overall_average, gap) per competency
EXPECTED_SCORES = {
    "vision": (Decimal("3.88"), Decimal("0.32")),
    "clarity": (Decimal("4.10"), Decimal("-0.30")),
    "teamwork": (Decimal("3.60"), Decimal("0.40")),
    "candor": (Decimal("3.80"), Decimal("-0.30")),
}

EXPECTED_OVERALL_SCORE = Decimal("3.85")


def question_id(competency_id: str, n: int) -> str:
    return f"{competency_id}-q{n}"


def spread(mean: str, count: int = QUESTIONS_PER_COMPETENCY) -> List[int]:
    """
    Integer ratings whose average is exactly `mean` (one decimal place).

    Examples:
        >>> spread("4.2")
        [5, 5, 4, 4, 4, 4, 4, 4, 4, 4]
    """
    total = int(Decimal(mean) * count)
    base, extra = divmod(total, count)
    return [base + 1] * extra + [base] * (count - extra)


def build_template(
    template_id: str = TEMPLATE_ID,
    family_id: Optional[str] = FAMILY_ID,
    **overrides,
) -> AssessmentTemplate:
    competencies = [
        CompetencyDefinition(
            id=cid,
            name=name,
            subtitle=subtitle,
            questions=[
                TemplateQuestion(
                    id=question_id(cid, n),
                    text=f"{name.title()} behaviour {n}",
                    is_cci=(n == 1),
                )
                for n in range(1, QUESTIONS_PER_COMPETENCY + 1)
            ],
        )
        for cid, name, subtitle in COMPETENCIES
    ]
    data = dict(
        id=template_id,
        template_family_id=family_id,
        name="Leadership 360",
        competencies=competencies,
        scale=ScaleConfig(min=1, max=5),
    )
    data.update(overrides)
    return AssessmentTemplate(**data)


def build_record(
    assessment_id: str = ASSESSMENT_ID,
    subject_id: str = SUBJECT_ID,
    template_id: str = TEMPLATE_ID,
) -> AssessmentRecord:
    return AssessmentRecord(id=assessment_id, subject_id=subject_id, template_id=template_id)


def build_invitation(
    rater_type: RaterType,
    ratings: Dict[str, List[Optional[int]]],
    assessment_id: str = ASSESSMENT_ID,
    rater_id: Optional[str] = None,
    status: InvitationStatus = InvitationStatus.COMPLETED,
    comments: Optional[Dict[str, str]] = None,
) -> RaterInvitation:
    """ratings: competency_id -> ratings for questions 1..n, in order."""
    comments = comments or {}
    responses = [
        QuestionResponse(
            question_id=question_id(cid, n),
            competency_id=cid,
            rating=Decimal(rating) if rating is not None else None,
            comment=comments.get(question_id(cid, n)),
        )
        for cid, values in ratings.items()
        for n, rating in enumerate(values, start=1)
    ]
    rater_id = rater_id or f"{rater_type.value}-rater"
    return RaterInvitation(
        id=f"inv-{assessment_id}-{rater_id}",
        assessment_id=assessment_id,
        rater_id=rater_id,
        rater_type=rater_type,
        status=status,
        responses=responses,
        completed_at=(
            datetime(2026, 3, 1, tzinfo=timezone.utc)
            if status == InvitationStatus.COMPLETED else None
        ),
    )


def build_reference_invitations(
    assessment_id: str = ASSESSMENT_ID,
    means: Dict[str, Dict[RaterType, str]] = RATER_MEANS,
) -> List[RaterInvitation]:
    """One completed invitation per rater type reproducing `means`."""
    rater_types = [RaterType.SELF, RaterType.MANAGER, RaterType.PEER, RaterType.DIRECT_REPORT]
    return [
        build_invitation(
            rater_type,
            {cid: spread(by_type[rater_type]) for cid, by_type in means.items() if rater_type in by_type},
            assessment_id=assessment_id,
        )
        for rater_type in rater_types
    ]
