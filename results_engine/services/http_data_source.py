"""
HTTP Data Source - Assessment Results Engine
results_engine/services/http_data_source.py

ResultsDataSource backed by the platform's data API. Timeouts and connect
retries live here and nowhere else in the engine.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from results_engine.config import Settings, get_settings
from results_engine.core.exceptions import DataSourceException, EntityNotFoundException
from results_engine.models.enumerations import RaterType
from results_engine.models.invitation import RaterInvitation
from results_engine.models.results import ComputedAssessmentResults
from results_engine.models.template import AssessmentRecord, AssessmentTemplate

logger = logging.getLogger(__name__)


class HttpResultsDataSource:
    """Read inputs from, and append snapshots to, the platform data API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        app_settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        cfg = app_settings or get_settings()
        self.base_url = (base_url or cfg.DATA_API_URL).rstrip("/")
        self.client = httpx.Client(
            base_url=f"{self.base_url}{cfg.API_V1_PREFIX}",
            timeout=cfg.DATA_API_TIMEOUT_SECONDS,
            transport=transport or httpx.HTTPTransport(retries=cfg.DATA_API_RETRIES),
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self.client.close()

    # ------------------------------------------------------------------
    # ResultsDataSource
    # ------------------------------------------------------------------

    def fetch_assessment(self, assessment_id: str) -> AssessmentRecord:
        data = self._get(f"/assessments/{assessment_id}", entity=("Assessment", assessment_id))
        return AssessmentRecord.model_validate(data)

    def fetch_template(self, template_id: str) -> AssessmentTemplate:
        data = self._get(f"/templates/{template_id}", entity=("Template", template_id))
        return AssessmentTemplate.model_validate(data)

    def fetch_completed_invitations(self, assessment_id: str) -> List[RaterInvitation]:
        data = self._get(
            f"/assessments/{assessment_id}/invitations",
            params={"status": "completed"},
            entity=("Assessment", assessment_id),
        )
        return [RaterInvitation.model_validate(item) for item in data]

    def fetch_invitation_totals(self, assessment_id: str) -> Dict[RaterType, int]:
        data = self._get(
            f"/assessments/{assessment_id}/invitations/summary",
            entity=("Assessment", assessment_id),
        )
        return {RaterType(rater_type): int(count) for rater_type, count in data.items()}

    def fetch_previous_completed_results(
        self,
        subject_id: str,
        template_family_id: str,
        before: datetime,
        exclude_assessment_id: Optional[str] = None,
    ) -> Optional[ComputedAssessmentResults]:
        params = {"templateFamilyId": template_family_id, "before": before.isoformat()}
        if exclude_assessment_id:
            params["excludeAssessmentId"] = exclude_assessment_id
        data = self._get(f"/subjects/{subject_id}/results/previous", params=params)
        return ComputedAssessmentResults.model_validate(data) if data else None

    def fetch_latest_results(self, assessment_id: str) -> Optional[ComputedAssessmentResults]:
        data = self._get(f"/assessments/{assessment_id}/results/latest")
        return ComputedAssessmentResults.model_validate(data) if data else None

    def append_results(self, record: AssessmentRecord, results: ComputedAssessmentResults) -> None:
        self._request("POST", f"/assessments/{record.id}/results", json=results.to_wire())
        logger.info(f"Appended results snapshot for assessment {record.id}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        entity: Optional[tuple] = None,
    ) -> Any:
        """
        GET a JSON document.

        A 404 raises EntityNotFoundException when `entity` names what was
        requested; otherwise 404 and 204 mean "nothing there" and return None.
        """
        response = self._request("GET", path, params=params, allow_missing=True)
        if response.status_code in (204, 404):
            if entity is not None:
                raise EntityNotFoundException(*entity)
            return None
        return response.json()

    def _request(self, method: str, path: str, allow_missing: bool = False, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Data API {method} {path} failed: {e}")
            raise DataSourceException(f"Data API unreachable: {e}") from e

        if allow_missing and response.status_code in (204, 404):
            return response
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Data API {method} {path} returned {e.response.status_code}: {e.response.text[:200]}"
            )
            raise DataSourceException(
                f"Data API {method} {path} returned {e.response.status_code}"
            ) from e
        return response
