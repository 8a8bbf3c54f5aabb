# tests/conftest.py

"""
Pytest Fixtures - Shared test configurations and data for the results engine

Reference data lives in tests/factories.py:
- Template:   leadership-360 (VISION, CLARITY, TEAMWORK, CANDOR)
- Subject:    subject-001
- Assessment: assessment-2026-q1 (four completed raters, one pending peer)
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from factories import (
    ASSESSMENT_ID,
    COMPUTED_AT,
    build_invitation,
    build_record,
    build_reference_invitations,
    build_template,
)
from results_engine.core.dependencies import get_results_service
from results_engine.main import app
from results_engine.models import InvitationStatus, RaterType
from results_engine.scoring.results_assembler import ResultsAssembler
from results_engine.services.cache import reset_cache
from results_engine.services.data_source import InMemoryDataSource
from results_engine.services.results_service import ResultsService


# =============================================================================
# REFERENCE DATA FIXTURES
# =============================================================================

@pytest.fixture
def template():
    """Leadership 360 template, 4 competencies x 10 questions, scale 1-5."""
    return build_template()


@pytest.fixture
def record():
    return build_record()


@pytest.fixture
def completed_invitations():
    """Self, manager, peer and direct report, all completed."""
    return build_reference_invitations()


@pytest.fixture
def pending_peer_invitation():
    return build_invitation(
        RaterType.PEER,
        {},
        rater_id="peer-rater-2",
        status=InvitationStatus.SENT,
    )


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

class FixedClock:
    """Deterministic clock; advance() moves it forward between computations."""

    def __init__(self, start: datetime = COMPUTED_AT):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def assembler(clock):
    return ResultsAssembler(clock=clock)


@pytest.fixture
def data_source(template, record, completed_invitations, pending_peer_invitation):
    """In-memory data source seeded with the reference assessment."""
    return InMemoryDataSource().seed(
        templates=[template],
        assessments=[record],
        invitations=completed_invitations + [pending_peer_invitation],
    )


@pytest.fixture
def service(data_source, assembler):
    """ResultsService with caching disabled."""
    return ResultsService(data_source, assembler=assembler, cache=None)


@pytest.fixture
def assessment_id():
    return ASSESSMENT_ID


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(service):
    """TestClient with the results service bound to the seeded in-memory source."""
    app.dependency_overrides[get_results_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_cache_singleton():
    yield
    reset_cache()
