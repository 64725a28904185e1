"""Shared fixtures for the test suite."""

from datetime import date, datetime, timedelta

import pytest

from fitness.records import RunRecord
from planning.plan import Plan, Block, Microcycle, Workout, Segment, WorkoutType, TrainingPhase, Zone


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_run(day: datetime, distance_km: float = 10.0, pace: float = 5.0, **kwargs) -> RunRecord:
    return RunRecord(
        date=day,
        distance_km=distance_km,
        duration_min=distance_km * pace,
        avg_pace=pace,
        **kwargs
    )


def make_workout(workout_id: str, segments, workout_type=WorkoutType.EASY,
                 on: date = date(2024, 1, 2)) -> Workout:
    """segments: (duration, intensity) pairs."""
    return Workout(
        id=workout_id,
        date=on,
        type=workout_type,
        name=workout_id,
        segments=tuple(
            Segment(duration=d, intensity=i, zone=Zone.EASY if i <= 75 else Zone.TEMPO,
                    description="Run")
            for d, i in segments
        ),
    )


def make_block(phase: TrainingPhase, start: date, workouts) -> Block:
    return Block(
        phase=phase,
        start_date=start,
        end_date=start + timedelta(days=6),
        microcycles=(Microcycle(week_number=1, workouts=tuple(workouts)),),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def steady_history():
    """Ten 10 km runs at 5:00/km, one every other day."""
    start = datetime(2024, 3, 4, 7, 0)
    return [make_run(start + timedelta(days=2 * i)) for i in range(10)]


@pytest.fixture
def moderate_heavy_plan():
    """Base block with 60% of time at intensity 80."""
    workouts = [
        make_workout(f"steady-{i}", [(40, 65), (60, 80)], WorkoutType.STEADY)
        for i in range(3)
    ]
    return Plan(blocks=(make_block(TrainingPhase.BASE, date(2024, 1, 1), workouts),),
                name="moderate heavy")


@pytest.fixture
def compliant_plan():
    workouts = [make_workout(f"easy-{i}", [(60, 65)]) for i in range(4)]
    return Plan(blocks=(make_block(TrainingPhase.BASE, date(2024, 1, 1), workouts),),
                name="all easy")
