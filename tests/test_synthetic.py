"""
Tests for synthetic run histories and plans.

Run with: python -m pytest tests/test_synthetic.py -v
"""

from datetime import date

import pytest

from fitness.metrics import calculate_vdot
from planning.plan import TrainingPhase, WorkoutType
from planning.distribution import validate_intensity_distribution
from planning.adjustment import validate_and_enforce
from data.synthetic import (
    RunnerArchetype,
    generate_runner_profiles,
    generate_run_history,
    generate_plan,
)


class TestProfiles:

    def test_count_and_mix(self):
        profiles = generate_runner_profiles(8, seed=1)
        assert len(profiles) == 8
        assert {p.archetype for p in profiles} == set(RunnerArchetype)

    def test_reproducible(self):
        a = generate_runner_profiles(5, seed=7)
        b = generate_runner_profiles(5, seed=7)
        assert [p.to_dict() for p in a] == [p.to_dict() for p in b]

    def test_extra_profiles(self):
        assert len(generate_runner_profiles(12, seed=3)) == 12


class TestRunHistory:
    """Tests for simulated run histories."""

    @pytest.fixture
    def competitive(self):
        return [p for p in generate_runner_profiles(8, seed=42)
                if p.archetype == RunnerArchetype.COMPETITIVE][0]

    def test_runs_per_week(self, competitive):
        runs = generate_run_history(competitive, n_weeks=4, seed=42)
        assert len(runs) == 4 * competitive.runs_per_week

    def test_chronological(self, competitive):
        runs = generate_run_history(competitive, n_weeks=4, seed=42)
        assert [r.date for r in runs] == sorted(r.date for r in runs)

    def test_races_scheduled(self, competitive):
        runs = generate_run_history(competitive, n_weeks=8, seed=42)
        assert sum(r.is_race for r in runs) == 2

    def test_reproducible(self, competitive):
        assert generate_run_history(competitive, 6, seed=5) == generate_run_history(competitive, 6, seed=5)

    def test_race_drives_vdot(self, competitive):
        runs = generate_run_history(competitive, n_weeks=8, seed=42)
        assert 30 <= calculate_vdot(runs) <= 85


class TestGeneratePlan:
    """Tests for methodology-driven plan assembly."""

    def test_structure(self):
        plan = generate_plan('daniels')
        assert [b.phase for b in plan.blocks] == [
            TrainingPhase.BASE, TrainingPhase.BUILD, TrainingPhase.PEAK, TrainingPhase.TAPER,
        ]
        assert len(plan.workouts) == 20 + 20 + 15 + 8
        assert [m.week_number for b in plan.blocks for m in b.microcycles] == list(range(1, 14))

    def test_blocks_contiguous(self):
        plan = generate_plan('lydiard', start=date(2024, 3, 4))
        assert plan.blocks[0].start_date == date(2024, 3, 4)
        for prev, nxt in zip(plan.blocks, plan.blocks[1:]):
            assert (nxt.start_date - prev.end_date).days == 1

    def test_uncustomized_uses_template_intensities(self):
        plan = generate_plan('daniels', customize=False)
        first = plan.blocks[0].microcycles[0].workouts[0]
        assert first.type == WorkoutType.EASY
        assert first.segments[0].intensity == 65

    def test_customized_intensities_clamped(self):
        plan = generate_plan('daniels')
        assert all(40 <= s.intensity <= 100 for w in plan.workouts for s in w.segments)

    def test_focus_areas_from_methodology(self):
        plan = generate_plan('pfitzinger')
        assert plan.blocks[1].focus_areas == ('lactate_threshold', 'marathon_pace')

    @pytest.mark.parametrize("methodology", ['daniels', 'lydiard', 'pfitzinger', 'hudson', 'custom'])
    def test_enforcement_reports_residuals(self, methodology):
        result = validate_and_enforce(generate_plan(methodology), methodology)
        remaining = validate_intensity_distribution(result.plan, methodology).violations
        assert len(result.residual_violations) == len(remaining)
        assert result.iterations <= 10
