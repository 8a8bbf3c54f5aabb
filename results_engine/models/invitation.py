from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from results_engine.models.base import EngineModel
from results_engine.models.enumerations import InvitationStatus, RaterType
from results_engine.scoring.utils import to_decimal


class QuestionResponse(EngineModel):
    """A single rater's answer to one template question."""

    question_id: str
    competency_id: str
    rating: Optional[Decimal] = Field(
        default=None,
        allow_inf_nan=False,
        description="Numeric rating; None for a comment-only answer",
    )
    comment: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def rating_from_float(cls, v):
        # 4.2 must become Decimal("4.2"), not the binary expansion of the float
        if isinstance(v, float):
            return to_decimal(v)
        return v


class RaterInvitation(EngineModel):
    id: str
    assessment_id: str
    rater_id: str
    rater_type: RaterType
    status: InvitationStatus = InvitationStatus.PENDING
    responses: List[QuestionResponse] = Field(default_factory=list)
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == InvitationStatus.COMPLETED
