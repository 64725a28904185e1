"""
Training plan tree: Plan -> Block -> Microcycle -> Workout -> Segment.

Every node is a frozen dataclass holding tuples, so a plan is a value.
Adjustments build a new plan with dataclasses.replace and reuse every
subtree they did not touch.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Callable, Dict, Any, Iterator, Optional, Tuple


class TrainingPhase(Enum):
    """Named stage of a periodized plan."""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"
    RECOVERY = "recovery"


class WorkoutType(Enum):
    """Classification of planned workouts."""
    RECOVERY = "recovery"
    EASY = "easy"
    STEADY = "steady"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    SPEED = "speed"
    HILL_REPEATS = "hill_repeats"
    FARTLEK = "fartlek"
    PROGRESSION = "progression"
    LONG_RUN = "long_run"
    RACE_PACE = "race_pace"
    TIME_TRIAL = "time_trial"
    CROSS_TRAINING = "cross_training"
    STRENGTH = "strength"


class Zone(Enum):
    """Training zones a segment can target."""
    RECOVERY = "recovery"
    EASY = "easy"
    STEADY = "steady"
    MARATHON = "marathon"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    VO2_MAX = "vo2max"
    NEUROMUSCULAR = "neuromuscular"


def zone_for_intensity(intensity: float) -> Zone:
    """Zone that a 0-100 intensity falls in."""
    if intensity < 60:
        return Zone.RECOVERY
    if intensity < 70:
        return Zone.EASY
    if intensity < 80:
        return Zone.STEADY
    if intensity < 87:
        return Zone.TEMPO
    if intensity < 92:
        return Zone.THRESHOLD
    if intensity < 97:
        return Zone.VO2_MAX
    return Zone.NEUROMUSCULAR


@dataclass(frozen=True)
class PaceRange:
    """Pace band in min/km; min is the faster end."""
    min: float
    max: float
    target: float

    def to_dict(self) -> Dict[str, float]:
        return {'min': self.min, 'max': self.max, 'target': self.target}


@dataclass(frozen=True)
class HeartRateRange:
    """Heart rate band in bpm."""
    min: int
    max: int

    def to_dict(self) -> Dict[str, int]:
        return {'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class Segment:
    """
    A contiguous part of a workout.

    intensity is 0-100 (roughly % of threshold effort); <=75 counts as
    easy time, <=85 as moderate, above that as hard.
    """
    duration: float
    intensity: float
    zone: Zone
    description: str = ""
    pace_target: Optional[PaceRange] = None
    heart_rate_target: Optional[HeartRateRange] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'duration': self.duration,
            'intensity': self.intensity,
            'zone': self.zone.value,
            'description': self.description,
            'pace_target': self.pace_target.to_dict() if self.pace_target else None,
            'heart_rate_target': (
                self.heart_rate_target.to_dict() if self.heart_rate_target else None
            ),
        }


@dataclass(frozen=True)
class Workout:
    """A planned session on one day."""
    id: str
    date: date
    type: WorkoutType
    name: str
    segments: Tuple[Segment, ...] = field(default_factory=tuple)
    description: str = ""
    adaptation_target: str = ""

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.segments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'type': self.type.value,
            'name': self.name,
            'description': self.description,
            'adaptation_target': self.adaptation_target,
            'total_duration': self.total_duration,
            'segments': [s.to_dict() for s in self.segments],
        }


@dataclass(frozen=True)
class Microcycle:
    """One week of workouts."""
    week_number: int
    workouts: Tuple[Workout, ...] = field(default_factory=tuple)
    pattern: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'week_number': self.week_number,
            'pattern': self.pattern,
            'workouts': [w.to_dict() for w in self.workouts],
        }


@dataclass(frozen=True)
class Block:
    """Consecutive weeks sharing one training phase."""
    phase: TrainingPhase
    start_date: date
    end_date: date
    microcycles: Tuple[Microcycle, ...] = field(default_factory=tuple)
    focus_areas: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def key(self) -> str:
        """Identifier used in validation reports, e.g. 'base-2024-01-01'."""
        return f"{self.phase.value}-{self.start_date.isoformat()}"

    @property
    def workouts(self) -> Tuple[Workout, ...]:
        return tuple(w for m in self.microcycles for w in m.workouts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phase': self.phase.value,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'focus_areas': list(self.focus_areas),
            'microcycles': [m.to_dict() for m in self.microcycles],
        }


@dataclass(frozen=True)
class Plan:
    """A complete periodized plan."""
    blocks: Tuple[Block, ...] = field(default_factory=tuple)
    name: str = ""

    @property
    def workouts(self) -> Tuple[Workout, ...]:
        return tuple(w for b in self.blocks for w in b.workouts)

    def iter_workouts(self) -> Iterator[Tuple[Block, Microcycle, Workout]]:
        for block in self.blocks:
            for micro in block.microcycles:
                for workout in micro.workouts:
                    yield block, micro, workout

    def map_workouts(
        self,
        fn: Callable[[Block, Workout], Workout],
        block_keys: Optional[set] = None
    ) -> 'Plan':
        """
        Apply fn to workouts and rebuild only the changed branches.

        Args:
            fn: Returns the same object to leave a workout unchanged
            block_keys: Restrict to blocks with these keys (None: all)

        Returns:
            self if nothing changed, else a new Plan
        """
        new_blocks = []
        changed = False
        for block in self.blocks:
            if block_keys is not None and block.key not in block_keys:
                new_blocks.append(block)
                continue

            new_micros = []
            block_changed = False
            for micro in block.microcycles:
                new_workouts = tuple(fn(block, w) for w in micro.workouts)
                if any(n is not o for n, o in zip(new_workouts, micro.workouts)):
                    new_micros.append(replace(micro, workouts=new_workouts))
                    block_changed = True
                else:
                    new_micros.append(micro)

            if block_changed:
                new_blocks.append(replace(block, microcycles=tuple(new_micros)))
                changed = True
            else:
                new_blocks.append(block)

        if not changed:
            return self
        return replace(self, blocks=tuple(new_blocks))

    def map_microcycles(self, fn: Callable[[Block, Microcycle], Microcycle]) -> 'Plan':
        """Apply fn to every microcycle, sharing unchanged branches."""
        new_blocks = []
        changed = False
        for block in self.blocks:
            new_micros = tuple(fn(block, m) for m in block.microcycles)
            if any(n is not o for n, o in zip(new_micros, block.microcycles)):
                new_blocks.append(replace(block, microcycles=new_micros))
                changed = True
            else:
                new_blocks.append(block)

        if not changed:
            return self
        return replace(self, blocks=tuple(new_blocks))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'blocks': [b.to_dict() for b in self.blocks],
        }


@dataclass(frozen=True)
class IntensityDistribution:
    """Percent of training time by intensity bucket; sums to about 100."""
    easy: float
    moderate: float
    hard: float
    very_hard: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'easy': self.easy,
            'moderate': self.moderate,
            'hard': self.hard,
            'very_hard': self.very_hard,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'IntensityDistribution':
        return cls(
            easy=d['easy'],
            moderate=d['moderate'],
            hard=d['hard'],
            very_hard=d.get('very_hard', 0.0),
        )
