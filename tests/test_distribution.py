"""
Tests for intensity distribution validation.

Run with: python -m pytest tests/test_distribution.py -v
"""

from datetime import date

import pytest

from planning.plan import Plan, TrainingPhase, IntensityDistribution
from planning.distribution import (
    DEFAULT_DISTRIBUTION,
    OVERALL,
    DistributionParams,
    Severity,
    ViolationType,
    bucket_minutes,
    calculate_intensity_distribution,
    check_distribution,
    classify_severity,
    validate_intensity_distribution,
)
from planning.methodology import UnknownMethodologyError, get_methodology_strategy

from conftest import make_workout, make_block


TARGET = IntensityDistribution(easy=80, moderate=15, hard=5)


class TestBuckets:
    """Tests for bucketing segment minutes."""

    def test_boundaries_inclusive(self):
        workout = make_workout('w', [(10, 75), (20, 85), (30, 86)])
        assert bucket_minutes([workout]) == (10, 20, 30)

    def test_custom_ceilings(self):
        workout = make_workout('w', [(10, 70), (10, 78)])
        params = DistributionParams(easy_ceiling=68, moderate_ceiling=80)
        assert bucket_minutes([workout], params) == (0, 20, 0)


class TestCalculateDistribution:

    def test_percentages(self):
        workouts = [make_workout('a', [(60, 65), (20, 80), (20, 90)])]
        dist = calculate_intensity_distribution(workouts)
        assert (dist.easy, dist.moderate, dist.hard) == (60, 20, 20)

    def test_sums_to_hundred(self):
        workouts = [make_workout('a', [(45, 60), (30, 80), (25, 95)])]
        dist = calculate_intensity_distribution(workouts)
        assert dist.easy + dist.moderate + dist.hard == 100

    def test_half_rounds_up(self):
        workouts = [make_workout('a', [(1, 60), (199, 80)])]
        assert calculate_intensity_distribution(workouts).easy == 1

    def test_no_time_gives_default(self):
        assert calculate_intensity_distribution([]) == DEFAULT_DISTRIBUTION
        assert calculate_intensity_distribution([make_workout('empty', [])]) == DEFAULT_DISTRIBUTION


class TestSeverity:

    @pytest.mark.parametrize("difference,expected", [
        (5, Severity.LOW),
        (5.5, Severity.MEDIUM),
        (10, Severity.MEDIUM),
        (12, Severity.HIGH),
        (15, Severity.HIGH),
        (16, Severity.CRITICAL),
        (-20, Severity.CRITICAL),
    ])
    def test_bands(self, difference, expected):
        assert classify_severity(difference) == expected

    def test_rank_ordering(self):
        assert Severity.LOW.rank < Severity.MEDIUM.rank < Severity.HIGH.rank < Severity.CRITICAL.rank


class TestCheckDistribution:
    """Tests for comparing one distribution with its target."""

    def test_within_tolerance(self):
        actual = IntensityDistribution(easy=76, moderate=15, hard=9)
        assert check_distribution(actual, TARGET, 'base') == ()

    def test_insufficient_easy(self):
        actual = IntensityDistribution(easy=70, moderate=25, hard=5)
        (violation,) = check_distribution(actual, TARGET, 'build', 'build-2024-01-01')
        assert violation.type == ViolationType.INSUFFICIENT_EASY
        assert violation.difference == 10
        assert violation.severity == Severity.MEDIUM
        assert violation.block_key == 'build-2024-01-01'

    def test_excessive_hard(self):
        actual = IntensityDistribution(easy=78, moderate=0, hard=22)
        (violation,) = check_distribution(actual, TARGET, 'peak')
        assert violation.type == ViolationType.EXCESSIVE_HARD
        assert violation.actual == 22
        assert violation.severity == Severity.CRITICAL

    def test_both(self):
        actual = IntensityDistribution(easy=50, moderate=20, hard=30)
        types = {v.type for v in check_distribution(actual, TARGET, 'peak')}
        assert types == {ViolationType.INSUFFICIENT_EASY, ViolationType.EXCESSIVE_HARD}


class TestValidatePlan:
    """Tests for whole-plan validation."""

    def test_compliant_plan(self, compliant_plan):
        result = validate_intensity_distribution(compliant_plan, 'daniels')
        assert result.is_valid
        assert result.violations == ()
        assert result.overall.easy == 100

    def test_moderate_heavy_plan(self, moderate_heavy_plan):
        result = validate_intensity_distribution(moderate_heavy_plan, 'daniels')
        assert not result.is_valid

        by_phase = {v.phase: v for v in result.violations}
        assert by_phase['base'].type == ViolationType.INSUFFICIENT_EASY
        assert by_phase['base'].block_key == 'base-2024-01-01'
        assert by_phase[OVERALL].is_overall
        assert by_phase[OVERALL].severity == Severity.CRITICAL

    def test_phases_keyed_by_block(self, moderate_heavy_plan):
        result = validate_intensity_distribution(moderate_heavy_plan, 'daniels')
        assert list(result.phases) == ['base-2024-01-01']
        assert result.phases['base-2024-01-01'].moderate == 60

    def test_accepts_target_mapping(self, moderate_heavy_plan):
        strategy = get_methodology_strategy('daniels')
        by_name = validate_intensity_distribution(moderate_heavy_plan, 'daniels')
        by_map = validate_intensity_distribution(moderate_heavy_plan, strategy.phase_targets)
        assert by_name == by_map

    def test_empty_block_raises_nothing(self, compliant_plan):
        empty = make_block(TrainingPhase.PEAK, date(2024, 2, 1), [make_workout('rest', [])])
        plan = Plan(blocks=compliant_plan.blocks + (empty,))
        result = validate_intensity_distribution(plan, 'daniels')
        assert result.is_valid
        assert result.phases[empty.key] == DEFAULT_DISTRIBUTION

    def test_phase_without_target_not_checked(self, moderate_heavy_plan):
        result = validate_intensity_distribution(moderate_heavy_plan, {})
        assert [v.phase for v in result.violations] == [OVERALL]

    def test_empty_plan(self):
        result = validate_intensity_distribution(Plan(), 'daniels')
        assert result.is_valid
        assert result.overall == DEFAULT_DISTRIBUTION

    def test_unknown_methodology(self, compliant_plan):
        with pytest.raises(UnknownMethodologyError):
            validate_intensity_distribution(compliant_plan, 'galloway')

    def test_to_dict(self, moderate_heavy_plan):
        d = validate_intensity_distribution(moderate_heavy_plan, 'daniels').to_dict()
        assert d['is_valid'] is False
        assert d['violations'][0]['type'] == 'insufficient_easy'


class TestDistributionParams:

    def test_defaults_valid(self):
        assert DistributionParams().validate() == (True, "")

    def test_target_must_sum_to_hundred(self):
        params = DistributionParams(overall_target=IntensityDistribution(70, 10, 10))
        valid, msg = params.validate()
        assert not valid
        assert 'sum' in msg

    def test_round_trip(self):
        params = DistributionParams(tolerance=3)
        assert DistributionParams.from_dict(params.to_dict()) == params
