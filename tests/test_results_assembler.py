# tests/test_results_assembler.py
"""
ResultsAssembler tests - end-to-end computation on the reference assessment,
failure modes, response rates and the wire format.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from factories import (
    COMPUTED_AT,
    EXPECTED_OVERALL_SCORE,
    build_invitation,
    build_record,
    build_reference_invitations,
    build_template,
)
from results_engine.core.exceptions import (
    IncompleteDataError,
    ScoreValidationError,
    TemplateReferenceError,
)
from results_engine.models import CCIBand, InvitationStatus, RaterType, TrendDirection
from results_engine.scoring.results_assembler import ResultsAssembler


class TestReferenceAssessment:

    @pytest.fixture
    def results(self, assembler, record, template, completed_invitations):
        return assembler.assemble(
            record,
            template,
            completed_invitations,
            invitation_totals={RaterType.SELF: 1, RaterType.MANAGER: 1, RaterType.PEER: 2,
                               RaterType.DIRECT_REPORT: 1},
        )

    def test_headline_figures(self, results):
        assert results.overall_score == EXPECTED_OVERALL_SCORE
        assert [h.competency_id for h in results.strengths] == ["clarity", "candor"]
        assert [h.competency_id for h in results.development_areas] == ["teamwork", "vision"]
        assert results.current_ceiling.competency_id == "teamwork"
        assert results.cci_result.band == CCIBand.VERY_HIGH
        assert results.trend is None

    def test_snapshot_metadata(self, results, record):
        assert results.assessment_id == record.id
        assert results.subject_id == record.subject_id
        assert results.template_id == "leadership-360"
        assert results.computed_at == COMPUTED_AT

    def test_response_rates(self, results):
        rates = results.response_rate_by_type
        assert set(rates) == {RaterType.SELF, RaterType.MANAGER, RaterType.PEER, RaterType.DIRECT_REPORT}
        assert rates[RaterType.PEER].completed == 1
        assert rates[RaterType.PEER].total == 2
        assert rates[RaterType.PEER].rate == 50
        assert rates[RaterType.SELF].rate == 100

    def test_item_and_ranked_lists(self, results):
        assert len(results.item_scores) == 40
        assert len(results.top_items) == 5
        assert len(results.bottom_items) == 5
        assert results.top_items[0].overall_average >= results.bottom_items[0].overall_average

    def test_wire_format(self, results):
        wire = results.to_wire()

        assert wire["overallScore"] == "3.85"
        assert wire["responseRateByType"]["direct_report"] == {"completed": 1, "total": 1, "rate": 100}
        vision = wire["competencyScores"][0]
        assert vision["competencyId"] == "vision"
        assert vision["overallAverage"] == "3.88"
        assert vision["gap"] == "0.32"
        assert vision["selfAverage"] == "4.20"
        assert wire["cciResult"]["band"] == "Very High"
        assert wire["currentCeiling"]["score"] == "3.60"
        assert "rater_id" not in str(wire) and "raterId" not in str(wire)


class TestFailures:

    def test_no_completed_invitations(self, assembler, record, template):
        pending = build_invitation(RaterType.PEER, {"vision": [3]}, status=InvitationStatus.SENT)
        with pytest.raises(IncompleteDataError):
            assembler.assemble(record, template, [pending])

    def test_empty_invitation_list(self, assembler, record, template):
        with pytest.raises(IncompleteDataError):
            assembler.assemble(record, template, [])

    def test_completed_without_ratings(self, assembler, record, template):
        invitation = build_invitation(RaterType.SELF, {"vision": [None]})
        with pytest.raises(IncompleteDataError):
            assembler.assemble(record, template, [invitation])

    def test_rating_above_scale(self, assembler, record, template):
        invitations = build_reference_invitations()
        invitations.append(build_invitation(RaterType.PEER, {"vision": [6]}, rater_id="p2"))
        with pytest.raises(ScoreValidationError):
            assembler.assemble(record, template, invitations)

    def test_totals_below_completed(self, assembler, record, template, completed_invitations):
        with pytest.raises(ScoreValidationError):
            assembler.assemble(
                record, template, completed_invitations, invitation_totals={RaterType.PEER: 0}
            )

    def test_record_for_another_template(self, assembler, template, completed_invitations):
        record = build_record(template_id="pulse-survey")
        with pytest.raises(TemplateReferenceError):
            assembler.assemble(record, template, completed_invitations)


class TestPartialData:

    def test_unrated_competency_absent_everywhere(self, assembler, record, template):
        invitations = [
            build_invitation(RaterType.SELF, {"vision": [4], "clarity": [3]}),
            build_invitation(RaterType.PEER, {"vision": [3], "clarity": [4]}),
        ]
        results = assembler.assemble(record, template, invitations)

        assert [cs.competency_id for cs in results.competency_scores] == ["vision", "clarity"]
        assert results.competency_score("teamwork") is None
        # vision 3.50, clarity 3.50
        assert results.overall_score == Decimal("3.50")
        assert results.current_ceiling.competency_id == "vision"

    def test_totals_default_to_completed(self, assembler, record, template):
        results = assembler.assemble(
            record, template, [build_invitation(RaterType.SELF, {"vision": [4]})]
        )
        assert set(results.response_rate_by_type) == {RaterType.SELF}
        assert results.response_rate_by_type[RaterType.SELF].rate == 100

    def test_invited_type_without_completions_reported(self, assembler, record, template):
        results = assembler.assemble(
            record, template, [build_invitation(RaterType.SELF, {"vision": [4]})],
            invitation_totals={RaterType.SELF: 1, RaterType.MANAGER: 1},
        )
        assert results.response_rate_by_type[RaterType.MANAGER].completed == 0
        assert results.response_rate_by_type[RaterType.MANAGER].rate == 0


class TestTrendLookup:

    def test_lookup_receives_computed_at(self, clock, record, template, completed_invitations):
        assembler = ResultsAssembler(clock=clock)
        first = assembler.assemble(
            build_record(assessment_id="assessment-2025-q3"), template, completed_invitations,
        )
        clock.advance(days=180)

        seen = []

        def lookup(before):
            seen.append(before)
            return first

        second = assembler.assemble(record, template, completed_invitations, previous_lookup=lookup)

        assert seen == [COMPUTED_AT + timedelta(days=180)]
        assert second.trend.previous_assessment_id == "assessment-2025-q3"
        assert second.trend.overall_change == Decimal("0.00")
        assert second.trend.overall_direction == TrendDirection.STABLE
        assert len(second.trend.competency_changes) == 4


class TestFromSettings:

    def test_uses_configured_tunables(self, clock):
        from results_engine.config import Settings

        cfg = Settings(
            TREND_STABLE_TOLERANCE=0.3,
            GAP_CLASSIFICATION_THRESHOLD=0.2,
            RANKED_ITEMS_LIMIT=2,
            CCI_DEFAULT_RATER_POPULATION="all",
        )
        assembler = ResultsAssembler.from_settings(cfg, clock=clock)

        assert assembler.trend_analyzer.tolerance == Decimal("0.3")
        assert assembler.selector.gap_threshold == Decimal("0.2")
        assert assembler.selector.ranked_items_limit == 2
        assert assembler.cci_calculator.default_population.value == "all"
        assert assembler.clock is clock

    def test_template_without_explicit_family(self, assembler, record, completed_invitations):
        template = build_template(family_id=None)
        results = assembler.assemble(record, template, completed_invitations)
        assert results.overall_score == EXPECTED_OVERALL_SCORE
