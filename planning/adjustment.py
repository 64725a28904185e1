"""
Auto-adjustment of plans toward their intensity targets.

The engine audits a plan, rewrites offending workouts, and re-audits.
It repeats while the violation count keeps falling, up to a fixed
number of iterations, and returns the best plan it saw. A plan may
still carry violations at that point; they are logged and returned.

Every rewrite produces new Workout/Segment values. Unchanged workouts,
microcycles and blocks are shared with the input plan.
"""

import logging
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence, Tuple, Union

from .plan import (
    Plan,
    Block,
    Microcycle,
    Workout,
    Segment,
    WorkoutType,
    TrainingPhase,
    Zone,
)
from .distribution import (
    DistributionParams,
    DistributionValidation,
    Violation,
    ViolationType,
    Severity,
    bucket_minutes,
    calculate_intensity_distribution,
    validate_intensity_distribution,
)
from .methodology import MethodologyStrategy, Methodology, get_methodology_strategy

logger = logging.getLogger(__name__)

COMPLIANCE_NOTE = "(80/20 compliance)"

# Only softened or reduced when a violation is critical
PROTECTED_TYPES = (WorkoutType.RACE_PACE, WorkoutType.TIME_TRIAL)

# Adjustable for low/medium violations
EASY_TYPES = (WorkoutType.EASY, WorkoutType.STEADY, WorkoutType.RECOVERY)

# Never softened: the hard work is the point of the session
UNSOFTENABLE_TYPES = (WorkoutType.THRESHOLD, WorkoutType.VO2MAX)


@dataclass
class AdjustmentParams:
    """Intensity rewrites and loop bounds for auto-adjustment."""
    max_iterations: int = 10
    softened_intensity: float = 70.0
    reduced_intensity: float = 80.0
    critical_reduced_intensity: float = 70.0
    quality_min_duration: float = 45.0
    quality_intensity: float = 85.0
    max_quality_per_week: int = 2
    phase_target_tolerance: float = 2.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'AdjustmentParams':
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter ranges."""
        if self.max_iterations < 1:
            return False, f"max_iterations must be >= 1, got {self.max_iterations}"
        for name in ('softened_intensity', 'reduced_intensity', 'critical_reduced_intensity'):
            value = getattr(self, name)
            if not 0 < value <= 85:
                return False, f"{name} must be in (0, 85], got {value}"
        if self.max_quality_per_week < 0:
            return False, f"max_quality_per_week must be >= 0, got {self.max_quality_per_week}"
        return True, ""


class AdjustmentState(Enum):
    AUDITING = "auditing"
    CONVERGED = "converged"


@dataclass(frozen=True)
class AdjustmentResult:
    """
    Outcome of an adjustment run.

    history holds the violation count before the first pass and after
    each pass.
    """
    plan: Plan
    state: AdjustmentState
    iterations: int
    residual_violations: Tuple[Violation, ...]
    history: Tuple[int, ...]

    @property
    def is_compliant(self) -> bool:
        return not self.residual_violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'iterations': self.iterations,
            'residual_violations': [v.to_dict() for v in self.residual_violations],
            'history': list(self.history),
        }


# =============================================================================
# Workout rewrites
# =============================================================================

def _annotated(description: str, prefix: str) -> str:
    return f"{prefix}{description.lower()} {COMPLIANCE_NOTE}"


def is_moderate(segment: Segment) -> bool:
    """Intensity strictly between 75 and 90."""
    return 75 < segment.intensity < 90


def can_soften(workout: Workout) -> bool:
    return (
        workout.type not in UNSOFTENABLE_TYPES
        and any(is_moderate(s) for s in workout.segments)
    )


def can_add_quality(workout: Workout, params: Optional[AdjustmentParams] = None) -> bool:
    params = params or AdjustmentParams()
    return (
        workout.type == WorkoutType.EASY
        and workout.total_duration >= params.quality_min_duration
    )


def should_adjust_workout(workout: Workout, violation: Violation) -> bool:
    """
    Race-pace and time-trial sessions move only for critical violations;
    any workout moves for high or critical; otherwise only easy types.
    """
    if workout.type in PROTECTED_TYPES:
        return violation.severity == Severity.CRITICAL

    if violation.severity in (Severity.HIGH, Severity.CRITICAL):
        return True

    return workout.type in EASY_TYPES


def soften_segments(
    workout: Workout,
    params: Optional[AdjustmentParams] = None,
    prefix: str = "Easy "
) -> Workout:
    """Lower every moderate segment to easy; returns workout if none."""
    params = params or AdjustmentParams()
    if not any(is_moderate(s) for s in workout.segments):
        return workout

    segments = tuple(
        replace(
            s,
            intensity=params.softened_intensity,
            zone=Zone.EASY,
            description=_annotated(s.description, prefix),
        ) if is_moderate(s) else s
        for s in workout.segments
    )
    return replace(workout, segments=segments)


def soften_workout(
    workout: Workout,
    violation: Violation,
    params: Optional[AdjustmentParams] = None
) -> Workout:
    """
    Fix for insufficient easy time.

    The workout is retyped as easy only when no segment above 75 remains.
    """
    params = params or AdjustmentParams()
    if not can_soften(workout) or not should_adjust_workout(workout, violation):
        return workout

    softened = soften_segments(workout, params)
    if all(s.intensity <= 75 for s in softened.segments):
        softened = replace(
            softened,
            type=WorkoutType.EASY,
            adaptation_target="Aerobic base building, 80/20 compliance",
        )
    return softened


def reduce_workout_intensity(
    workout: Workout,
    violation: Violation,
    params: Optional[AdjustmentParams] = None
) -> Workout:
    """Fix for excessive hard time; low-severity violations are ignored."""
    params = params or AdjustmentParams()
    if violation.severity == Severity.LOW or not should_adjust_workout(workout, violation):
        return workout

    if not any(s.intensity > 85 for s in workout.segments):
        return workout

    if violation.severity == Severity.CRITICAL:
        new_intensity = params.critical_reduced_intensity
    else:
        new_intensity = params.reduced_intensity
    zone = Zone.EASY if new_intensity <= 75 else Zone.STEADY

    segments = tuple(
        replace(
            s,
            intensity=new_intensity,
            zone=zone,
            description=_annotated(s.description, "Reduced intensity "),
        ) if s.intensity > 85 else s
        for s in workout.segments
    )

    note = "(intensity reduced for 80/20 compliance)"
    target = workout.adaptation_target
    if note not in target:
        target = f"{target} {note}".strip()

    return replace(workout, segments=segments, adaptation_target=target)


def add_quality_to_workout(
    workout: Workout,
    params: Optional[AdjustmentParams] = None
) -> Workout:
    """
    Turn a long-enough easy run into a tempo run.

    Layout: 40% easy warm-up, 20% tempo, 40% easy cool-down.
    """
    params = params or AdjustmentParams()
    if not can_add_quality(workout, params) or not workout.segments:
        return workout

    total = workout.total_duration
    base = workout.segments[0]
    segments = (
        replace(base, duration=total * 0.4, description="Easy warm-up"),
        Segment(
            duration=total * 0.2,
            intensity=params.quality_intensity,
            zone=Zone.TEMPO,
            description="Tempo segment",
        ),
        replace(base, duration=total * 0.4, description="Easy cool-down"),
    )
    return replace(workout, type=WorkoutType.TEMPO, segments=segments)


def fix_violation(
    plan: Plan,
    violation: Violation,
    params: Optional[AdjustmentParams] = None
) -> Plan:
    """
    Rewrite the workouts a violation applies to.

    Phase violations touch only their own block; overall violations
    touch every workout.
    """
    params = params or AdjustmentParams()

    if violation.type == ViolationType.INSUFFICIENT_EASY:
        def fix(block: Block, workout: Workout) -> Workout:
            return soften_workout(workout, violation, params)
    elif violation.type == ViolationType.EXCESSIVE_HARD:
        def fix(block: Block, workout: Workout) -> Workout:
            return reduce_workout_intensity(workout, violation, params)
    else:
        return plan

    block_keys = None if violation.is_overall or violation.block_key is None else {violation.block_key}
    return plan.map_workouts(fix, block_keys)


def sort_violations(violations: Sequence[Violation]) -> List[Violation]:
    """Most severe first; stable within a severity."""
    return sorted(violations, key=lambda v: -v.severity.rank)


# =============================================================================
# Phase-target pre-pass
# =============================================================================

def adjust_microcycle(
    microcycle: Microcycle,
    phase: TrainingPhase,
    target,
    params: Optional[AdjustmentParams] = None,
    distribution_params: Optional[DistributionParams] = None
) -> Microcycle:
    """Nudge one week toward its phase target."""
    params = params or AdjustmentParams()
    workouts = microcycle.workouts
    if sum(bucket_minutes(workouts, distribution_params)) <= 0:
        return microcycle

    current = calculate_intensity_distribution(workouts, distribution_params)
    easy_gap = target.easy - current.easy
    hard_gap = target.hard - current.hard

    if abs(easy_gap) <= params.phase_target_tolerance:
        return microcycle

    adjusted = list(workouts)

    if easy_gap > 0:
        adjusted = [
            soften_segments(w, params) if can_soften(w) else w
            for w in adjusted
        ]

    if hard_gap > 0 and phase != TrainingPhase.BASE:
        added = 0
        for i, workout in enumerate(adjusted):
            if added >= params.max_quality_per_week:
                break
            if can_add_quality(workout, params):
                adjusted[i] = add_quality_to_workout(workout, params)
                added += 1

    if all(n is o for n, o in zip(adjusted, workouts)):
        return microcycle
    return replace(microcycle, workouts=tuple(adjusted))


def apply_phase_targets(
    plan: Plan,
    methodology: Union[str, Methodology, MethodologyStrategy],
    params: Optional[AdjustmentParams] = None,
    distribution_params: Optional[DistributionParams] = None
) -> Plan:
    """Weekly pre-pass toward each block's phase target."""
    strategy = get_methodology_strategy(methodology)

    def adjust(block: Block, micro: Microcycle) -> Microcycle:
        return adjust_microcycle(
            micro, block.phase, strategy.phase_target(block.phase),
            params, distribution_params,
        )

    return plan.map_microcycles(adjust)


# =============================================================================
# Engine
# =============================================================================

class AutoAdjustmentEngine:
    """
    Bounded audit-and-rewrite loop.

    Example:
        engine = AutoAdjustmentEngine('daniels')
        result = engine.adjust(plan)
        if not result.is_compliant:
            ...
    """

    def __init__(
        self,
        methodology: Union[str, Methodology, MethodologyStrategy],
        params: Optional[AdjustmentParams] = None,
        distribution_params: Optional[DistributionParams] = None
    ):
        self.strategy = get_methodology_strategy(methodology)
        self.params = params or AdjustmentParams()
        valid, msg = self.params.validate()
        if not valid:
            raise ValueError(msg)
        self.distribution_params = distribution_params or DistributionParams()
        self.state = AdjustmentState.CONVERGED

    def validate(self, plan: Plan) -> DistributionValidation:
        return validate_intensity_distribution(
            plan, self.strategy.phase_targets, self.distribution_params
        )

    def apply_fixes(self, plan: Plan, violations: Sequence[Violation]) -> Plan:
        """One pass: every violation fixed in severity order."""
        adjusted = plan
        for violation in sort_violations(violations):
            adjusted = fix_violation(adjusted, violation, self.params)
        return adjusted

    def adjust(
        self,
        plan: Plan,
        violations: Optional[Sequence[Violation]] = None
    ) -> AdjustmentResult:
        """
        Run passes until no violations remain, the count stops falling,
        the plan stops changing, or max_iterations is reached.

        Args:
            plan: Plan to adjust
            violations: Starting violations (default: validate the plan)

        Returns:
            AdjustmentResult holding the plan with the fewest violations
        """
        if violations is None:
            violations = self.validate(plan).violations
        violations = tuple(violations)

        history = [len(violations)]
        if not violations:
            return AdjustmentResult(plan, AdjustmentState.CONVERGED, 0, (), tuple(history))

        self.state = AdjustmentState.AUDITING
        best_plan, best_violations = plan, violations
        current, current_violations = plan, violations
        iterations = 0

        while iterations < self.params.max_iterations:
            iterations += 1
            adjusted = self.apply_fixes(current, current_violations)
            revalidated = self.validate(adjusted).violations
            history.append(len(revalidated))

            logger.info(
                "Adjustment pass %d: %d -> %d violations",
                iterations, len(current_violations), len(revalidated),
            )

            if len(revalidated) < len(best_violations):
                best_plan, best_violations = adjusted, revalidated

            if (not revalidated
                    or adjusted is current
                    or len(revalidated) >= len(current_violations)):
                break

            current, current_violations = adjusted, revalidated

        self.state = AdjustmentState.CONVERGED

        if best_violations:
            logger.warning(
                "Adjustment stopped after %d passes with %d residual violations: %s",
                iterations, len(best_violations),
                ", ".join(f"{v.type.value}@{v.phase}({v.severity.value})" for v in best_violations),
            )

        return AdjustmentResult(
            plan=best_plan,
            state=self.state,
            iterations=iterations,
            residual_violations=tuple(best_violations),
            history=tuple(history),
        )


def auto_adjust_intensity_distribution(
    plan: Plan,
    methodology: Union[str, Methodology, MethodologyStrategy],
    violations: Optional[Sequence[Violation]] = None,
    params: Optional[AdjustmentParams] = None
) -> Plan:
    """
    Best-effort compliant plan (see AutoAdjustmentEngine.adjust).

    Violations carry no methodology, so the one they were validated
    against must be passed again for revalidation.
    """
    return AutoAdjustmentEngine(methodology, params).adjust(plan, violations).plan


def validate_and_enforce(
    plan: Plan,
    methodology: Union[str, Methodology, MethodologyStrategy],
    params: Optional[AdjustmentParams] = None,
    distribution_params: Optional[DistributionParams] = None
) -> AdjustmentResult:
    """Phase-target pre-pass, then validation, then adjustment if needed."""
    engine = AutoAdjustmentEngine(methodology, params, distribution_params)
    prepared = apply_phase_targets(plan, engine.strategy, engine.params, engine.distribution_params)
    validation = engine.validate(prepared)

    if validation.is_valid:
        return AdjustmentResult(prepared, AdjustmentState.CONVERGED, 0, (), (0,))

    return engine.adjust(prepared, validation.violations)
