"""
Synthetic runner data generation.

Generates realistic run histories and periodized plans with:
- Varied runner archetypes (pace, volume, frequency, heart rate)
- Day-to-day variance in distance, pace and heart rate
- Occasional hard sessions and races
- Plans assembled from methodology selection rules and templates
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Dict, Any, Sequence, Tuple, Union

import numpy as np

from fitness.records import RunRecord
from planning.plan import Plan, Block, Microcycle, WorkoutType, TrainingPhase
from planning.templates import workout_from_template
from planning.methodology import (
    Methodology,
    MethodologyStrategy,
    get_methodology_strategy,
    customize_workout,
)


class RunnerArchetype(Enum):
    BEGINNER = "beginner"
    RECREATIONAL = "recreational"
    COMPETITIVE = "competitive"
    MASTERS = "masters"


@dataclass
class RunnerProfile:
    """
    Runner characteristics used to simulate a history.

    Units:
        easy_pace: min/km
        weekly_distance_km: km
    """
    id: str
    name: str
    archetype: RunnerArchetype
    easy_pace: float
    weekly_distance_km: float
    runs_per_week: int
    resting_hr: float
    max_hr: float
    race_every_weeks: int = 0   # 0: never races

    def to_dict(self) -> Dict[str, Any]:
        """Convert profile to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'archetype': self.archetype.value,
            'easy_pace': self.easy_pace,
            'weekly_distance_km': self.weekly_distance_km,
            'runs_per_week': self.runs_per_week,
            'resting_hr': self.resting_hr,
            'max_hr': self.max_hr,
            'race_every_weeks': self.race_every_weeks,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# RUNNER ARCHETYPES
# ═══════════════════════════════════════════════════════════════════════════════

def create_beginner(id_num: int) -> RunnerProfile:
    """New runner, short easy runs, no racing."""
    return RunnerProfile(
        id=f"beginner_{id_num}",
        name=f"Beginner {id_num}",
        archetype=RunnerArchetype.BEGINNER,
        easy_pace=np.random.uniform(6.5, 7.5),
        weekly_distance_km=np.random.uniform(12, 20),
        runs_per_week=3,
        resting_hr=np.random.uniform(66, 78),
        max_hr=np.random.uniform(180, 195),
    )


def create_recreational(id_num: int) -> RunnerProfile:
    """Regular runner with the odd parkrun."""
    return RunnerProfile(
        id=f"recreational_{id_num}",
        name=f"Recreational {id_num}",
        archetype=RunnerArchetype.RECREATIONAL,
        easy_pace=np.random.uniform(5.5, 6.5),
        weekly_distance_km=np.random.uniform(25, 40),
        runs_per_week=4,
        resting_hr=np.random.uniform(56, 66),
        max_hr=np.random.uniform(178, 192),
        race_every_weeks=6,
    )


def create_competitive(id_num: int) -> RunnerProfile:
    """High-volume club runner racing regularly."""
    return RunnerProfile(
        id=f"competitive_{id_num}",
        name=f"Competitive {id_num}",
        archetype=RunnerArchetype.COMPETITIVE,
        easy_pace=np.random.uniform(4.6, 5.3),
        weekly_distance_km=np.random.uniform(55, 85),
        runs_per_week=6,
        resting_hr=np.random.uniform(44, 54),
        max_hr=np.random.uniform(182, 198),
        race_every_weeks=4,
    )


def create_masters(id_num: int) -> RunnerProfile:
    """Experienced 50+ runner, moderate volume."""
    return RunnerProfile(
        id=f"masters_{id_num}",
        name=f"Masters {id_num}",
        archetype=RunnerArchetype.MASTERS,
        easy_pace=np.random.uniform(5.6, 6.6),
        weekly_distance_km=np.random.uniform(30, 50),
        runs_per_week=5,
        resting_hr=np.random.uniform(50, 62),
        max_hr=np.random.uniform(160, 172),
        race_every_weeks=8,
    )


ARCHETYPE_CREATORS = [
    (create_beginner, 2),
    (create_recreational, 3),
    (create_competitive, 2),
    (create_masters, 2),
]


def generate_runner_profiles(
    n_profiles: int = 8,
    seed: Optional[int] = None
) -> List[RunnerProfile]:
    """
    Generate diverse runner profiles.

    Args:
        n_profiles: Number of profiles to generate
        seed: Random seed for reproducibility

    Returns:
        List of RunnerProfile objects
    """
    if seed is not None:
        np.random.seed(seed)

    profiles = []

    for creator, default_count in ARCHETYPE_CREATORS:
        for i in range(default_count):
            if len(profiles) >= n_profiles:
                break
            profiles.append(creator(i + 1))

    while len(profiles) < n_profiles:
        creator, _ = ARCHETYPE_CREATORS[np.random.randint(len(ARCHETYPE_CREATORS))]
        profiles.append(creator(len(profiles) + 1))

    return profiles[:n_profiles]


# ═══════════════════════════════════════════════════════════════════════════════
# RUN HISTORY GENERATION
# ═══════════════════════════════════════════════════════════════════════════════

# Weekday offsets used for n runs per week (Monday = 0); last day is the long run
RUN_DAYS = {
    2: (2, 6),
    3: (1, 3, 6),
    4: (1, 3, 4, 6),
    5: (0, 1, 3, 4, 6),
    6: (0, 1, 2, 3, 4, 6),
    7: (0, 1, 2, 3, 4, 5, 6),
}


def _hr_for_effort(profile: RunnerProfile, effort: int) -> float:
    """Heart rate at an RPE, on the heart rate reserve scale."""
    fraction = 0.45 + 0.05 * effort
    return profile.resting_hr + fraction * (profile.max_hr - profile.resting_hr)


def generate_run_history(
    profile: RunnerProfile,
    n_weeks: int = 12,
    start: Optional[datetime] = None,
    seed: Optional[int] = None
) -> List[RunRecord]:
    """
    Simulate a chronological run history for a profile.

    Each week holds one long run (about 30% of volume), one workout
    (effort 8) when the runner does 4+ runs, and easy runs otherwise.
    Races replace the workout every race_every_weeks weeks.

    Args:
        profile: Runner to simulate
        n_weeks: Number of weeks
        start: Monday of the first week (default 2024-01-01)
        seed: Random seed for reproducibility

    Returns:
        List of RunRecord, oldest first
    """
    if seed is not None:
        np.random.seed(seed)
    start = start or datetime(2024, 1, 1, 7, 0)

    days = RUN_DAYS[int(np.clip(profile.runs_per_week, 2, 7))]
    runs = []

    for week in range(n_weeks):
        week_start = start + timedelta(weeks=week)
        volume = profile.weekly_distance_km * np.random.uniform(0.85, 1.15)
        long_km = volume * 0.3
        other_km = (volume - long_km) / max(1, len(days) - 1)
        is_race_week = profile.race_every_weeks > 0 and (week + 1) % profile.race_every_weeks == 0

        for i, day in enumerate(days):
            is_long = i == len(days) - 1
            is_workout = i == 1 and len(days) >= 4

            if is_long:
                distance = long_km
                pace = profile.easy_pace * np.random.uniform(1.0, 1.05)
                effort = 5
            elif is_workout and is_race_week:
                distance = 5.0
                pace = profile.easy_pace * np.random.uniform(0.78, 0.82)
                effort = 10
            elif is_workout:
                distance = other_km
                pace = profile.easy_pace * np.random.uniform(0.86, 0.90)
                effort = 8
            else:
                distance = other_km * np.random.uniform(0.8, 1.2)
                pace = profile.easy_pace * np.random.uniform(0.97, 1.05)
                effort = int(np.random.choice([3, 4, 5]))

            distance = round(float(distance), 2)
            pace = round(float(pace), 3)
            hr = _hr_for_effort(profile, effort) + np.random.normal(0, 3)

            runs.append(RunRecord(
                date=week_start + timedelta(days=day),
                distance_km=distance,
                duration_min=round(distance * pace, 2),
                avg_pace=pace,
                avg_heart_rate=round(float(hr)),
                effort_level=effort,
                is_race=is_workout and is_race_week,
            ))

    return runs


# ═══════════════════════════════════════════════════════════════════════════════
# PLAN GENERATION
# ═══════════════════════════════════════════════════════════════════════════════

# (weekday offset, workout type) per phase
WEEK_PATTERNS = {
    TrainingPhase.BASE: (
        (1, WorkoutType.EASY), (2, WorkoutType.TEMPO), (3, WorkoutType.EASY),
        (5, WorkoutType.EASY), (6, WorkoutType.LONG_RUN),
    ),
    TrainingPhase.BUILD: (
        (1, WorkoutType.EASY), (2, WorkoutType.THRESHOLD), (3, WorkoutType.EASY),
        (4, WorkoutType.VO2MAX), (6, WorkoutType.LONG_RUN),
    ),
    TrainingPhase.PEAK: (
        (1, WorkoutType.EASY), (2, WorkoutType.VO2MAX), (3, WorkoutType.EASY),
        (4, WorkoutType.THRESHOLD), (6, WorkoutType.LONG_RUN),
    ),
    TrainingPhase.TAPER: (
        (1, WorkoutType.EASY), (2, WorkoutType.TEMPO), (4, WorkoutType.EASY),
        (6, WorkoutType.EASY),
    ),
    TrainingPhase.RECOVERY: (
        (1, WorkoutType.RECOVERY), (3, WorkoutType.EASY), (5, WorkoutType.RECOVERY),
    ),
}

DEFAULT_PHASE_WEEKS = (
    (TrainingPhase.BASE, 4),
    (TrainingPhase.BUILD, 4),
    (TrainingPhase.PEAK, 3),
    (TrainingPhase.TAPER, 2),
)


def generate_plan(
    methodology: Union[str, Methodology, MethodologyStrategy] = Methodology.DANIELS,
    phase_weeks: Sequence[Tuple[TrainingPhase, int]] = DEFAULT_PHASE_WEEKS,
    start: Optional[date] = None,
    customize: bool = True,
    name: str = ""
) -> Plan:
    """
    Assemble a periodized plan from a methodology's selection rules.

    Args:
        methodology: Methodology supplying templates and emphasis
        phase_weeks: Ordered (phase, number of weeks) pairs
        start: Monday of the first week (default 2024-01-01)
        customize: Scale intensities by phase and emphasis
        name: Plan name

    Returns:
        Plan with one block per phase
    """
    strategy = get_methodology_strategy(methodology)
    start = start or date(2024, 1, 1)

    blocks = []
    week_start = start
    global_week = 0

    for phase, n_weeks in phase_weeks:
        block_start = week_start
        microcycles = []

        for week_in_phase in range(1, n_weeks + 1):
            global_week += 1
            workouts = []
            for day, workout_type in WEEK_PATTERNS[phase]:
                template = strategy.select_workout(workout_type, phase, week_in_phase)
                workout = workout_from_template(
                    template, f"w{global_week:02d}-d{day}", week_start + timedelta(days=day)
                )
                if customize:
                    workout = customize_workout(strategy, workout, phase)
                workouts.append(workout)

            microcycles.append(Microcycle(
                week_number=global_week,
                workouts=tuple(workouts),
                pattern=phase.value,
            ))
            week_start += timedelta(weeks=1)

        blocks.append(Block(
            phase=phase,
            start_date=block_start,
            end_date=week_start - timedelta(days=1),
            microcycles=tuple(microcycles),
            focus_areas=strategy.adaptation_targets.get(phase, ()),
        ))

    return Plan(
        blocks=tuple(blocks),
        name=name or f"{strategy.name} ({sum(w for _, w in phase_weeks)} weeks)",
    )


if __name__ == '__main__':
    profiles = generate_runner_profiles(4, seed=42)
    for p in profiles:
        history = generate_run_history(p, n_weeks=8, seed=42)
        print(f"{p.name:<20} {len(history):>3} runs, "
              f"{sum(r.distance_km for r in history):>6.1f} km")

    plan = generate_plan('daniels')
    print(f"\n{plan.name}: {len(plan.workouts)} workouts in {len(plan.blocks)} blocks")
