"""
Results Data Source - Assessment Results Engine
results_engine/services/data_source.py

The data-access boundary the engine consumes: invitations, templates,
assessment records and stored results snapshots. Snapshots are append-only;
a new computation never replaces an earlier one.
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from results_engine.core.exceptions import EntityNotFoundException
from results_engine.models.enumerations import RaterType
from results_engine.models.invitation import RaterInvitation
from results_engine.models.results import ComputedAssessmentResults
from results_engine.models.template import AssessmentRecord, AssessmentTemplate

logger = logging.getLogger(__name__)


@runtime_checkable
class ResultsDataSource(Protocol):
    """Everything the results service reads from and writes to the platform."""

    def fetch_assessment(self, assessment_id: str) -> AssessmentRecord: ...

    def fetch_template(self, template_id: str) -> AssessmentTemplate: ...

    def fetch_completed_invitations(self, assessment_id: str) -> List[RaterInvitation]: ...

    def fetch_invitation_totals(self, assessment_id: str) -> Dict[RaterType, int]: ...

    def fetch_previous_completed_results(
        self,
        subject_id: str,
        template_family_id: str,
        before: datetime,
        exclude_assessment_id: Optional[str] = None,
    ) -> Optional[ComputedAssessmentResults]: ...

    def fetch_latest_results(self, assessment_id: str) -> Optional[ComputedAssessmentResults]: ...

    def append_results(self, record: AssessmentRecord, results: ComputedAssessmentResults) -> None: ...


class InMemoryDataSource:
    """
    Dictionary-backed data source for tests and local runs.

    Populate it explicitly with seed(); it never carries process-wide data.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._assessments: Dict[str, AssessmentRecord] = {}
        self._templates: Dict[str, AssessmentTemplate] = {}
        self._invitations: Dict[str, List[RaterInvitation]] = defaultdict(list)
        # assessment_id -> snapshots, oldest first
        self._snapshots: Dict[str, List[ComputedAssessmentResults]] = defaultdict(list)
        # assessment_id -> template family, recorded on append
        self._families: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Fixture loading
    # ------------------------------------------------------------------

    def seed(
        self,
        templates: Iterable[AssessmentTemplate] = (),
        assessments: Iterable[AssessmentRecord] = (),
        invitations: Iterable[RaterInvitation] = (),
        snapshots: Iterable[ComputedAssessmentResults] = (),
    ) -> "InMemoryDataSource":
        """Load fixture data. Returns self so calls can be chained."""
        with self._lock:
            for template in templates:
                self._templates[template.id] = template
            for record in assessments:
                self._assessments[record.id] = record
            for invitation in invitations:
                self._invitations[invitation.assessment_id].append(invitation)
        for snapshot in snapshots:
            self.append_results(self.fetch_assessment(snapshot.assessment_id), snapshot)
        return self

    # ------------------------------------------------------------------
    # ResultsDataSource
    # ------------------------------------------------------------------

    def fetch_assessment(self, assessment_id: str) -> AssessmentRecord:
        record = self._assessments.get(assessment_id)
        if record is None:
            raise EntityNotFoundException("Assessment", assessment_id)
        return record

    def fetch_template(self, template_id: str) -> AssessmentTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise EntityNotFoundException("Template", template_id)
        return template

    def fetch_completed_invitations(self, assessment_id: str) -> List[RaterInvitation]:
        return [inv for inv in self._invitations.get(assessment_id, []) if inv.is_completed]

    def fetch_invitation_totals(self, assessment_id: str) -> Dict[RaterType, int]:
        totals: Dict[RaterType, int] = defaultdict(int)
        for inv in self._invitations.get(assessment_id, []):
            totals[inv.rater_type] += 1
        return dict(totals)

    def fetch_previous_completed_results(
        self,
        subject_id: str,
        template_family_id: str,
        before: datetime,
        exclude_assessment_id: Optional[str] = None,
    ) -> Optional[ComputedAssessmentResults]:
        """Latest snapshot of another assessment of the same subject and family, strictly before `before`."""
        candidates: List[ComputedAssessmentResults] = []
        for assessment_id in list(self._snapshots):
            if assessment_id == exclude_assessment_id:
                continue
            if self._families.get(assessment_id) != template_family_id:
                continue
            earlier = [
                s for s in self.history(assessment_id)
                if s.subject_id == subject_id and s.computed_at < before
            ]
            if earlier:
                candidates.append(earlier[-1])
        if not candidates:
            return None
        return max(candidates, key=lambda s: s.computed_at)

    def fetch_latest_results(self, assessment_id: str) -> Optional[ComputedAssessmentResults]:
        history = self.history(assessment_id)
        return history[-1] if history else None

    def append_results(self, record: AssessmentRecord, results: ComputedAssessmentResults) -> None:
        template = self._templates.get(record.template_id)
        family = record.template_family_id or (template.family_id if template else record.template_id)
        with self._lock:
            self._snapshots[record.id].append(results)
            self._families[record.id] = family
        logger.info(
            f"Stored results snapshot #{len(self._snapshots[record.id])} for assessment {record.id}"
        )

    def history(self, assessment_id: str) -> List[ComputedAssessmentResults]:
        """Every stored snapshot of one assessment, oldest first."""
        return list(self._snapshots.get(assessment_id, []))
