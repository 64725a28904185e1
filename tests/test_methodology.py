"""
Tests for methodology strategies, pace derivation and workout selection.

Run with: python -m pytest tests/test_methodology.py -v
"""

from datetime import date

import pytest

from fitness.metrics import compute_fitness_metrics, DEFAULT_VDOT
from planning.plan import TrainingPhase, WorkoutType, Zone, IntensityDistribution
from planning.templates import WORKOUT_TEMPLATES, templates_for_type, workout_from_template
from planning.methodology import (
    DEFAULT_LT_PACE,
    FALLBACK_TEMPLATE,
    Methodology,
    PaceSystem,
    UnknownMethodologyError,
    FoundationMetricError,
    resolve_methodology,
    get_methodology_strategy,
    available_methodologies,
    calculate_vdot_paces,
    calculate_lt_paces,
    vdot_pace_for_zone,
    lt_pace_for_zone,
    heart_rate_for_zone,
    customize_workout,
    annotate_plan_paces,
    format_pace,
)

from conftest import make_workout


# =============================================================================
# Strategy lookup
# =============================================================================

class TestStrategyLookup:
    """Tests for resolving methodology names."""

    def test_all_methodologies_available(self):
        assert available_methodologies() == ['daniels', 'lydiard', 'pfitzinger', 'hudson', 'custom']

    def test_same_instance_returned(self):
        assert get_methodology_strategy('daniels') is get_methodology_strategy('daniels')
        assert get_methodology_strategy(' Daniels ') is get_methodology_strategy(Methodology.DANIELS)

    def test_strategy_passes_through(self):
        strategy = get_methodology_strategy('lydiard')
        assert get_methodology_strategy(strategy) is strategy

    def test_unknown_name(self):
        with pytest.raises(UnknownMethodologyError) as exc:
            resolve_methodology('galloway')
        assert 'galloway' in str(exc.value)
        assert isinstance(exc.value, ValueError)

    @pytest.mark.parametrize("name", ['daniels', 'lydiard', 'pfitzinger', 'hudson', 'custom'])
    def test_targets_sum_to_hundred(self, name):
        strategy = get_methodology_strategy(name)
        for target in strategy.phase_targets.values():
            assert target.easy + target.moderate + target.hard + target.very_hard == 100

    def test_daniels_tables(self):
        strategy = get_methodology_strategy('daniels')
        assert strategy.intensity_distribution == IntensityDistribution(80, 10, 10)
        assert strategy.phase_target(TrainingPhase.BASE).easy == 85
        assert strategy.pace_system == PaceSystem.VDOT

    def test_pfitzinger_uses_lactate_threshold(self):
        strategy = get_methodology_strategy('pfitzinger')
        assert strategy.pace_system == PaceSystem.LACTATE_THRESHOLD
        assert strategy.default_foundation() == DEFAULT_LT_PACE

    def test_emphasis_default(self):
        strategy = get_methodology_strategy('daniels')
        assert strategy.emphasis(WorkoutType.TEMPO) == 1.5
        assert get_methodology_strategy('hudson').emphasis(WorkoutType.STRENGTH) == 1.0

    def test_to_dict(self):
        d = get_methodology_strategy('pfitzinger').to_dict()
        assert d['pace_system'] == 'lactate_threshold'
        assert d['phase_targets']['build']['easy'] == 70


# =============================================================================
# Pace derivation
# =============================================================================

class TestVDOTPaces:
    """Tests for the Daniels pace table."""

    def test_targets(self):
        paces = calculate_vdot_paces(50)
        assert paces['easy'].target == pytest.approx(4.5 / 0.70)
        assert paces['threshold'].target == pytest.approx(4.5 / 0.88)
        assert paces['repetition'].target == pytest.approx(4.5 / 1.05)

    def test_bands_ordered(self):
        for pace in calculate_vdot_paces(45).values():
            assert pace.min < pace.target < pace.max

    def test_faster_with_higher_vdot(self):
        assert calculate_vdot_paces(60)['threshold'].target < calculate_vdot_paces(40)['threshold'].target

    @pytest.mark.parametrize("vdot", [29, 86, 0])
    def test_out_of_range(self, vdot):
        with pytest.raises(FoundationMetricError):
            calculate_vdot_paces(vdot)

    def test_range_ends_accepted(self):
        calculate_vdot_paces(30)
        calculate_vdot_paces(85)

    def test_zone_mapping(self):
        paces = calculate_vdot_paces(50)
        assert vdot_pace_for_zone(Zone.EASY, paces) == paces['easy']
        assert vdot_pace_for_zone(Zone.VO2_MAX, paces) == paces['interval']
        assert vdot_pace_for_zone(Zone.RECOVERY, paces).target > paces['easy'].max

        steady = vdot_pace_for_zone(Zone.STEADY, paces)
        assert steady.min == paces['marathon'].max
        assert steady.max == paces['easy'].min


class TestLTPaces:
    """Tests for the Pfitzinger pace table."""

    def test_offsets(self):
        paces = calculate_lt_paces(5.0)
        assert paces['lactate_threshold'].target == 5.0
        assert paces['recovery'].min == pytest.approx(5.5)
        assert paces['vo2max'].target == pytest.approx(4.792)

    @pytest.mark.parametrize("lt_pace", [2.4, 10.5])
    def test_out_of_range(self, lt_pace):
        with pytest.raises(FoundationMetricError):
            calculate_lt_paces(lt_pace)

    def test_zone_mapping(self):
        paces = calculate_lt_paces(5.0)
        assert lt_pace_for_zone(Zone.TEMPO, paces) == paces['lactate_threshold']
        assert lt_pace_for_zone(Zone.STEADY, paces) == paces['general_aerobic']


class TestFoundation:

    def test_vdot_from_metrics(self, steady_history):
        metrics = compute_fitness_metrics(steady_history)
        assert get_methodology_strategy('daniels').foundation_from_metrics(metrics) == 40

    def test_lt_pace_from_metrics(self, steady_history):
        metrics = compute_fitness_metrics(steady_history)
        foundation = get_methodology_strategy('pfitzinger').foundation_from_metrics(metrics)
        assert foundation == pytest.approx(metrics.threshold_pace)

    def test_missing_metrics(self):
        assert get_methodology_strategy('daniels').foundation_from_metrics(None) == DEFAULT_VDOT


class TestHeartRate:

    def test_easy_band(self):
        hr = heart_rate_for_zone(Zone.EASY, 40)
        assert (hr.min, hr.max) == (120, 139)

    def test_max_hr_rises_with_vdot(self):
        assert heart_rate_for_zone(Zone.EASY, 60).max > heart_rate_for_zone(Zone.EASY, 40).max


# =============================================================================
# Workout selection
# =============================================================================

class TestSelection:
    """Tests for selection rules."""

    def test_daniels_vo2max_alternates(self):
        strategy = get_methodology_strategy('daniels')
        assert strategy.select_workout(WorkoutType.VO2MAX, TrainingPhase.BUILD, 1) == 'VO2MAX_5X3'
        assert strategy.select_workout(WorkoutType.VO2MAX, TrainingPhase.BUILD, 3) == 'VO2MAX_5X3'
        assert strategy.select_workout(WorkoutType.VO2MAX, TrainingPhase.BUILD, 4) == 'VO2MAX_4X4'
        assert strategy.select_workout(WorkoutType.VO2MAX, TrainingPhase.PEAK, 2) == 'VO2MAX_4X4'

    def test_daniels_base_introduces_quality_gradually(self):
        strategy = get_methodology_strategy('daniels')
        assert strategy.select_workout(WorkoutType.TEMPO, TrainingPhase.BASE, 1) == 'EASY_AEROBIC'
        assert strategy.select_workout(WorkoutType.TEMPO, TrainingPhase.BASE, 3) == 'TEMPO_CONTINUOUS'

    def test_daniels_recovery_phase_is_easy(self):
        strategy = get_methodology_strategy('daniels')
        assert strategy.select_workout(WorkoutType.VO2MAX, TrainingPhase.RECOVERY, 1) == 'EASY_AEROBIC'
        assert strategy.select_workout(WorkoutType.RECOVERY, TrainingPhase.RECOVERY, 1) == 'RECOVERY_JOG'

    def test_lydiard_hills_before_peak(self):
        strategy = get_methodology_strategy('lydiard')
        assert strategy.select_workout(WorkoutType.VO2MAX, TrainingPhase.BUILD, 1) == 'HILL_REPEATS_6X2'

    def test_falls_back_to_first_of_type(self):
        strategy = get_methodology_strategy('hudson')
        assert strategy.select_workout(WorkoutType.THRESHOLD, TrainingPhase.BUILD, 1) == \
            templates_for_type(WorkoutType.THRESHOLD)[0]

    def test_falls_back_to_easy(self):
        strategy = get_methodology_strategy('hudson')
        assert templates_for_type(WorkoutType.CROSS_TRAINING) == []
        assert strategy.select_workout(WorkoutType.CROSS_TRAINING, TrainingPhase.BASE, 1) == FALLBACK_TEMPLATE

    def test_selected_templates_exist(self):
        for name in available_methodologies():
            strategy = get_methodology_strategy(name)
            for phase in TrainingPhase:
                for workout_type in WorkoutType:
                    for week in range(1, 7):
                        assert strategy.select_workout(workout_type, phase, week) in WORKOUT_TEMPLATES


# =============================================================================
# Customization and annotation
# =============================================================================

class TestCustomize:

    def test_scaled_by_phase_and_emphasis(self):
        strategy = get_methodology_strategy('daniels')
        workout = make_workout('e', [(60, 65)])
        customized = customize_workout(strategy, workout, TrainingPhase.BUILD)
        assert customized.segments[0].intensity == 78      # 65 * 1.0 * 1.2

    def test_clamped(self):
        strategy = get_methodology_strategy('daniels')
        workout = make_workout('r', [(10, 30), (20, 98)], WorkoutType.RECOVERY)
        customized = customize_workout(strategy, workout, TrainingPhase.PEAK)
        assert [s.intensity for s in customized.segments] == [40, 100]

    def test_original_untouched(self):
        strategy = get_methodology_strategy('daniels')
        workout = make_workout('e', [(60, 65)])
        customize_workout(strategy, workout, TrainingPhase.PEAK)
        assert workout.segments[0].intensity == 65


class TestAnnotatePaces:

    def test_vdot_plan_gets_paces_and_heart_rate(self, compliant_plan):
        strategy = get_methodology_strategy('daniels')
        annotated = annotate_plan_paces(compliant_plan, strategy, 45)
        segment = annotated.workouts[0].segments[0]
        assert segment.pace_target == calculate_vdot_paces(45)['easy']
        assert segment.heart_rate_target is not None

    def test_lt_plan_has_no_heart_rate(self, compliant_plan):
        strategy = get_methodology_strategy('pfitzinger')
        annotated = annotate_plan_paces(compliant_plan, strategy, 5.0)
        segment = annotated.workouts[0].segments[0]
        assert segment.pace_target == calculate_lt_paces(5.0)['general_aerobic']
        assert segment.heart_rate_target is None

    def test_invalid_foundation(self, compliant_plan):
        with pytest.raises(FoundationMetricError):
            annotate_plan_paces(compliant_plan, get_methodology_strategy('daniels'), 20)


class TestTemplates:

    def test_workout_from_template(self):
        workout = workout_from_template('LONG_RUN', 'w1', date(2024, 1, 7))
        assert workout.type == WorkoutType.LONG_RUN
        assert workout.total_duration == 120
        assert workout.date == date(2024, 1, 7)

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            workout_from_template('MARATHON_SIM', 'w1', date(2024, 1, 7))


@pytest.mark.parametrize("pace,expected", [(4.5, "4:30"), (5.0, "5:00"), (4.999, "5:00")])
def test_format_pace(pace, expected):
    assert format_pace(pace) == expected
