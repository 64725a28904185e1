"""
Run history and fitness estimate records.

RunRecord is owned by the caller and never mutated here. Every other
record is produced fresh by a computation; recomputation yields a new value.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple


class LoadTrend(Enum):
    """Direction of acute training load over the last week of samples."""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class DayOfWeek(Enum):
    """Days of the week (matches datetime.weekday())."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


@dataclass(frozen=True)
class RunRecord:
    """
    A single recorded run.

    Units:
        distance_km: kilometres
        duration_min: minutes
        avg_pace: minutes per km
        effort_level: 1-10 RPE
    """
    date: datetime
    distance_km: float
    duration_min: float
    avg_pace: Optional[float] = None
    avg_heart_rate: Optional[float] = None
    effort_level: Optional[int] = None
    is_race: bool = False

    @property
    def effective_pace(self) -> Optional[float]:
        """Recorded pace, or pace derived from duration/distance."""
        if self.avg_pace is not None:
            return self.avg_pace
        if self.distance_km > 0:
            return self.duration_min / self.distance_km
        return None

    def signature(self) -> str:
        """Stable per-run signature used for cache keys."""
        return (
            f"{self.date.isoformat()}-{self.distance_km!r}-"
            f"{self.duration_min!r}-{self.avg_pace or 0!r}"
        )


@dataclass(frozen=True)
class TrainingLoadSample:
    """
    EWMA training load after one run.

    ratio is acute/chronic, or 1.0 when chronic load is zero.
    """
    acute: float
    chronic: float
    ratio: float
    trend: LoadTrend
    recommendation: str
    date: Optional[datetime] = None
    tss: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'date': self.date.isoformat() if self.date else None,
            'tss': self.tss,
            'acute': self.acute,
            'chronic': self.chronic,
            'ratio': self.ratio,
            'trend': self.trend.value,
            'recommendation': self.recommendation,
        }


@dataclass(frozen=True)
class WeeklyPatterns:
    """Summary of how a runner spreads running across calendar weeks."""
    avg_weekly_distance: float
    max_weekly_distance: float
    avg_runs_per_week: float
    consistency_score: float
    optimal_days: Tuple[DayOfWeek, ...] = field(default_factory=tuple)
    typical_long_run_day: Optional[DayOfWeek] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'avg_weekly_distance': self.avg_weekly_distance,
            'max_weekly_distance': self.max_weekly_distance,
            'avg_runs_per_week': self.avg_runs_per_week,
            'consistency_score': self.consistency_score,
            'optimal_days': [d.name for d in self.optimal_days],
            'typical_long_run_day': (
                self.typical_long_run_day.name if self.typical_long_run_day else None
            ),
        }


@dataclass(frozen=True)
class FitnessMetrics:
    """
    Physiological estimates derived from a run history.

    Units:
        critical_speed: km/h
        running_economy: ml/kg/km (lower is better)
        lactate_threshold: km/h
        injury_risk, recovery_score: 0-100
    """
    vdot: float
    critical_speed: float
    running_economy: float
    lactate_threshold: float
    training_load: TrainingLoadSample
    injury_risk: float
    recovery_score: float

    @property
    def threshold_pace(self) -> float:
        """Lactate threshold pace in min/km."""
        return 60.0 / self.lactate_threshold

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        d = asdict(self)
        d['training_load'] = self.training_load.to_dict()
        return d


def sort_runs(runs: List[RunRecord]) -> List[RunRecord]:
    """Return runs in chronological order (stable for equal dates)."""
    return sorted(runs, key=lambda r: r.date)
