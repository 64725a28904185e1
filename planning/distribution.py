"""
Intensity distribution validation.

Based on:
- Seiler, S. (2010). Polarized training model
- Fitzgerald, M. (2014). 80/20 Running

Segment minutes are bucketed by intensity (<=75 easy, <=85 moderate,
above that hard) per block and across the whole plan, then compared
with target distributions inside a tolerance band.
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, Iterable, Mapping, Optional, Tuple, Union

from .plan import Plan, Workout, TrainingPhase, IntensityDistribution
from .methodology import Methodology, MethodologyStrategy, get_methodology_strategy

PhaseTargets = Union[
    Mapping[TrainingPhase, IntensityDistribution], str, Methodology, MethodologyStrategy
]

# Used when a set of workouts has no segment time
DEFAULT_DISTRIBUTION = IntensityDistribution(easy=80, moderate=5, hard=15)

# Polarized model applied to the plan as a whole
POLARIZED_TARGET = IntensityDistribution(easy=80, moderate=5, hard=15, very_hard=0)

OVERALL = "overall"


class ViolationType(Enum):
    INSUFFICIENT_EASY = "insufficient_easy"
    EXCESSIVE_HARD = "excessive_hard"


class Severity(Enum):
    """Violation severity, banded by percentage-point gap."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


def classify_severity(difference: float) -> Severity:
    """<=5 low, <=10 medium, <=15 high, else critical."""
    gap = abs(difference)
    if gap <= 5:
        return Severity.LOW
    elif gap <= 10:
        return Severity.MEDIUM
    elif gap <= 15:
        return Severity.HIGH
    return Severity.CRITICAL


@dataclass
class DistributionParams:
    """Bucket boundaries and tolerance for distribution checks."""
    tolerance: float = 5.0
    easy_ceiling: float = 75.0
    moderate_ceiling: float = 85.0
    overall_target: IntensityDistribution = field(default_factory=lambda: POLARIZED_TARGET)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['overall_target'] = self.overall_target.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'DistributionParams':
        d = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        if isinstance(d.get('overall_target'), dict):
            d['overall_target'] = IntensityDistribution.from_dict(d['overall_target'])
        return cls(**d)

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter ranges."""
        if self.tolerance < 0:
            return False, f"tolerance must be >= 0, got {self.tolerance}"
        if not 0 < self.easy_ceiling < self.moderate_ceiling < 100:
            return False, (
                f"need 0 < easy_ceiling < moderate_ceiling < 100, got "
                f"{self.easy_ceiling}, {self.moderate_ceiling}"
            )
        t = self.overall_target
        total = t.easy + t.moderate + t.hard + t.very_hard
        if abs(total - 100) > 1e-6:
            return False, f"overall_target must sum to 100, got {total}"
        return True, ""


@dataclass(frozen=True)
class Violation:
    """A distribution check that fell outside tolerance."""
    type: ViolationType
    phase: str                  # phase value, or "overall"
    actual: float
    target: float
    difference: float
    severity: Severity
    block_key: Optional[str] = None

    @property
    def is_overall(self) -> bool:
        return self.phase == OVERALL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'phase': self.phase,
            'block_key': self.block_key,
            'actual': self.actual,
            'target': self.target,
            'difference': self.difference,
            'severity': self.severity.value,
        }


@dataclass(frozen=True)
class DistributionValidation:
    """Result of validating a plan."""
    is_valid: bool
    violations: Tuple[Violation, ...]
    overall: IntensityDistribution
    phases: Dict[str, IntensityDistribution]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'violations': [v.to_dict() for v in self.violations],
            'overall': self.overall.to_dict(),
            'phases': {k: v.to_dict() for k, v in self.phases.items()},
        }


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def bucket_minutes(
    workouts: Iterable[Workout],
    params: Optional[DistributionParams] = None
) -> Tuple[float, float, float]:
    """Easy, moderate and hard segment minutes."""
    params = params or DistributionParams()
    easy = moderate = hard = 0.0

    for workout in workouts:
        for segment in workout.segments:
            if segment.intensity <= params.easy_ceiling:
                easy += segment.duration
            elif segment.intensity <= params.moderate_ceiling:
                moderate += segment.duration
            else:
                hard += segment.duration

    return easy, moderate, hard


def calculate_intensity_distribution(
    workouts: Iterable[Workout],
    params: Optional[DistributionParams] = None
) -> IntensityDistribution:
    """
    Realized distribution as whole percentages.

    Returns DEFAULT_DISTRIBUTION when there is no segment time.
    """
    easy, moderate, hard = bucket_minutes(workouts, params)
    total = easy + moderate + hard

    if total <= 0:
        return DEFAULT_DISTRIBUTION

    return IntensityDistribution(
        easy=_round_half_up(easy / total * 100),
        moderate=_round_half_up(moderate / total * 100),
        hard=_round_half_up(hard / total * 100),
    )


def check_distribution(
    actual: IntensityDistribution,
    target: IntensityDistribution,
    phase: str,
    block_key: Optional[str] = None,
    tolerance: float = 5.0
) -> Tuple[Violation, ...]:
    """Compare one realized distribution against its target."""
    violations = []

    if actual.easy < target.easy - tolerance:
        diff = target.easy - actual.easy
        violations.append(Violation(
            type=ViolationType.INSUFFICIENT_EASY,
            phase=phase,
            block_key=block_key,
            actual=actual.easy,
            target=target.easy,
            difference=diff,
            severity=classify_severity(diff),
        ))

    if actual.hard > target.hard + tolerance:
        diff = actual.hard - target.hard
        violations.append(Violation(
            type=ViolationType.EXCESSIVE_HARD,
            phase=phase,
            block_key=block_key,
            actual=actual.hard,
            target=target.hard,
            difference=diff,
            severity=classify_severity(diff),
        ))

    return tuple(violations)


def validate_intensity_distribution(
    plan: Plan,
    phase_targets: PhaseTargets,
    params: Optional[DistributionParams] = None
) -> DistributionValidation:
    """
    Validate each block against its phase target and the plan against
    the polarized target.

    Blocks whose phase has no target, or that hold no segment time, are
    reported but never raise violations.

    Args:
        plan: Plan to audit
        phase_targets: Target distribution per phase, or a methodology
            (name, enum or strategy) whose phase table is used
        params: Buckets and tolerance

    Returns:
        DistributionValidation with phases keyed by block key

    Raises:
        UnknownMethodologyError: phase_targets names no methodology
    """
    params = params or DistributionParams()
    if not isinstance(phase_targets, Mapping):
        phase_targets = get_methodology_strategy(phase_targets).phase_targets
    violations = []
    phases: Dict[str, IntensityDistribution] = {}

    for block in plan.blocks:
        workouts = block.workouts
        actual = calculate_intensity_distribution(workouts, params)
        phases[block.key] = actual

        target = phase_targets.get(block.phase)
        if target is None or sum(bucket_minutes(workouts, params)) <= 0:
            continue

        violations.extend(check_distribution(
            actual, target, block.phase.value, block.key, params.tolerance
        ))

    all_workouts = plan.workouts
    overall = calculate_intensity_distribution(all_workouts, params)
    if sum(bucket_minutes(all_workouts, params)) > 0:
        violations.extend(check_distribution(
            overall, params.overall_target, OVERALL, None, params.tolerance
        ))

    return DistributionValidation(
        is_valid=not violations,
        violations=tuple(violations),
        overall=overall,
        phases=phases,
    )
