"""
Methodology strategies: phase targets, pace derivation, workout selection.

Based on:
- Daniels, J. (2014). Daniels' Running Formula, 3rd ed. (VDOT paces)
- Pfitzinger, P. & Douglas, S. (2009). Advanced Marathoning (LT-based paces)
- Lydiard, A. & Gilmour, G. (1962). Run to the Top
- Hudson, B. & Fitzgerald, M. (2008). Run Faster

A methodology is data: one MethodologyStrategy record per methodology
holds its tables. The only algorithmic divergence, how paces are derived
from the foundation metric, is the PaceSystem enum.
"""

import functools
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

import numpy as np

from fitness.metrics import DEFAULT_VDOT

from .plan import (
    Plan,
    Block,
    Workout,
    TrainingPhase,
    WorkoutType,
    Zone,
    PaceRange,
    HeartRateRange,
    IntensityDistribution,
)
from .templates import templates_for_type

logger = logging.getLogger(__name__)


class Methodology(Enum):
    DANIELS = "daniels"
    LYDIARD = "lydiard"
    PFITZINGER = "pfitzinger"
    HUDSON = "hudson"
    CUSTOM = "custom"


class PaceSystem(Enum):
    """Foundation metric used to derive paces."""
    VDOT = "vdot"
    LACTATE_THRESHOLD = "lactate_threshold"


class UnknownMethodologyError(ValueError):
    """Raised for a methodology name with no strategy."""


class FoundationMetricError(ValueError):
    """Raised when a foundation metric is outside the supported range."""


# Supported foundation ranges
VDOT_RANGE = (30, 85)
LT_PACE_RANGE = (2.5, 10.0)     # min/km

DEFAULT_LT_PACE = 5.0

# Width of a VDOT pace band around its target
VDOT_PACE_BAND = 0.025

FALLBACK_TEMPLATE = 'EASY_AEROBIC'

PHASE_INTENSITY_FACTORS = {
    TrainingPhase.BASE: 0.95,
    TrainingPhase.BUILD: 1.0,
    TrainingPhase.PEAK: 1.05,
    TrainingPhase.TAPER: 0.90,
    TrainingPhase.RECOVERY: 0.85,
}


# =============================================================================
# Pace derivation
# =============================================================================

def validate_vdot(vdot: float) -> None:
    lo, hi = VDOT_RANGE
    if not lo <= vdot <= hi:
        raise FoundationMetricError(f"VDOT must be between {lo} and {hi}, got {vdot}")


def validate_lt_pace(lt_pace: float) -> None:
    lo, hi = LT_PACE_RANGE
    if not lo <= lt_pace <= hi:
        raise FoundationMetricError(
            f"Lactate threshold pace must be between {lo} and {hi} min/km, got {lt_pace}"
        )


def calculate_vdot_paces(vdot: float) -> Dict[str, PaceRange]:
    """
    Daniels pace bands (min/km) for a VDOT.

    vo2max_pace = 5.5 - (VDOT - 30) * 0.05
    pace = vo2max_pace / fraction, fraction per zone:
        easy 0.70, marathon 0.84, threshold 0.88, interval 0.98, repetition 1.05

    Raises:
        FoundationMetricError: VDOT outside 30-85
    """
    validate_vdot(vdot)

    vo2max_pace = 5.5 - (vdot - 30) * 0.05
    fractions = {
        'easy': 0.70,
        'marathon': 0.84,
        'threshold': 0.88,
        'interval': 0.98,
        'repetition': 1.05,
    }

    paces = {}
    for name, fraction in fractions.items():
        target = vo2max_pace / fraction
        paces[name] = PaceRange(
            min=target * (1 - VDOT_PACE_BAND),
            max=target * (1 + VDOT_PACE_BAND),
            target=target,
        )
    return paces


def calculate_lt_paces(lt_pace: float) -> Dict[str, PaceRange]:
    """
    Pfitzinger pace bands (min/km) as offsets from lactate threshold pace.

    Raises:
        FoundationMetricError: LT pace outside 2.5-10.0 min/km
    """
    validate_lt_pace(lt_pace)

    def band(lo: float, hi: float, target: float) -> PaceRange:
        return PaceRange(min=lt_pace + lo, max=lt_pace + hi, target=lt_pace + target)

    return {
        'recovery': band(0.5, 0.75, 0.625),
        'general_aerobic': band(0.25, 0.5, 0.375),
        'marathon': band(0.167, 0.25, 0.208),
        'lactate_threshold': band(-0.05, 0.05, 0.0),
        'vo2max': band(-0.25, -0.167, -0.208),
        'neuromuscular': band(-0.5, -0.333, -0.417),
    }


def vdot_pace_for_zone(zone: Zone, paces: Mapping[str, PaceRange]) -> PaceRange:
    """Map a zone onto the Daniels pace table."""
    easy = paces['easy']
    marathon = paces['marathon']

    if zone == Zone.RECOVERY:
        return PaceRange(min=easy.max * 1.1, max=easy.max * 1.25, target=easy.max * 1.15)
    if zone == Zone.EASY:
        return easy
    if zone == Zone.STEADY:
        return PaceRange(
            min=marathon.max,
            max=easy.min,
            target=(easy.target + marathon.target) / 2,
        )
    if zone == Zone.TEMPO:
        return PaceRange(
            min=marathon.max,
            max=marathon.max * 1.05,
            target=marathon.max * 1.02,
        )
    if zone == Zone.THRESHOLD:
        return paces['threshold']
    if zone == Zone.VO2_MAX:
        return paces['interval']
    if zone == Zone.NEUROMUSCULAR:
        return paces['repetition']
    return marathon


_LT_ZONE_KEYS = {
    Zone.RECOVERY: 'recovery',
    Zone.EASY: 'general_aerobic',
    Zone.MARATHON: 'marathon',
    Zone.TEMPO: 'lactate_threshold',
    Zone.THRESHOLD: 'lactate_threshold',
    Zone.VO2_MAX: 'vo2max',
    Zone.NEUROMUSCULAR: 'neuromuscular',
}


def lt_pace_for_zone(zone: Zone, paces: Mapping[str, PaceRange]) -> PaceRange:
    """Map a zone onto the LT pace table; unmapped zones are general aerobic."""
    return paces[_LT_ZONE_KEYS.get(zone, 'general_aerobic')]


_HR_FRACTIONS = {
    Zone.RECOVERY: (0.50, 0.60),
    Zone.EASY: (0.65, 0.75),
    Zone.STEADY: (0.75, 0.82),
    Zone.TEMPO: (0.82, 0.87),
    Zone.THRESHOLD: (0.87, 0.92),
    Zone.VO2_MAX: (0.92, 0.97),
    Zone.NEUROMUSCULAR: (0.95, 1.00),
}


def estimate_max_hr(vdot: float) -> float:
    """Rough max HR from VDOT (fitter runners skew younger)."""
    if vdot < 45:
        return 220 - 35
    elif vdot < 55:
        return 220 - 30
    return 220 - 25


def heart_rate_for_zone(zone: Zone, vdot: float) -> HeartRateRange:
    """Heart rate band for a zone from the VDOT-estimated max HR."""
    max_hr = estimate_max_hr(vdot)
    lo, hi = _HR_FRACTIONS.get(zone, (0.70, 0.80))
    return HeartRateRange(min=int(round(max_hr * lo)), max=int(round(max_hr * hi)))


# =============================================================================
# Workout selection
# =============================================================================

@dataclass(frozen=True)
class SelectionRule:
    """
    One row of a selection table; the first matching row wins.

    workout_type None matches every type. An empty phase set matches
    every phase. With several templates the week number picks one
    (week % len(templates)).
    """
    workout_type: Optional[WorkoutType]
    templates: Tuple[str, ...]
    phases: FrozenSet[TrainingPhase] = frozenset()
    max_week: Optional[int] = None

    def matches(self, workout_type: WorkoutType, phase: TrainingPhase, week_in_phase: int) -> bool:
        if self.workout_type is not None and self.workout_type != workout_type:
            return False
        if self.phases and phase not in self.phases:
            return False
        if self.max_week is not None and week_in_phase > self.max_week:
            return False
        return True

    def choose(self, week_in_phase: int) -> str:
        return self.templates[week_in_phase % len(self.templates)]


def _rule(workout_type, *templates, phases=(), max_week=None) -> SelectionRule:
    return SelectionRule(workout_type, tuple(templates), frozenset(phases), max_week)


_BASE = TrainingPhase.BASE
_BUILD = TrainingPhase.BUILD
_PEAK = TrainingPhase.PEAK
_TAPER = TrainingPhase.TAPER
_RECOVERY = TrainingPhase.RECOVERY
_VO2_ALTERNATING = ('VO2MAX_4X4', 'VO2MAX_5X3')   # even weeks 4x4, odd 5x3

DANIELS_RULES = (
    _rule(WorkoutType.RECOVERY, 'RECOVERY_JOG', phases=[_RECOVERY]),
    _rule(None, 'EASY_AEROBIC', phases=[_RECOVERY]),
    _rule(WorkoutType.EASY, 'EASY_AEROBIC'),
    _rule(WorkoutType.LONG_RUN, 'LONG_RUN'),
    _rule(WorkoutType.SPEED, 'SPEED_200M_REPS'),
    # Base: quality introduced gradually
    _rule(WorkoutType.TEMPO, 'EASY_AEROBIC', phases=[_BASE], max_week=2),
    _rule(WorkoutType.THRESHOLD, 'TEMPO_CONTINUOUS', phases=[_BASE], max_week=4),
    _rule(WorkoutType.THRESHOLD, 'LACTATE_THRESHOLD_2X20', phases=[_BASE]),
    _rule(WorkoutType.VO2MAX, 'TEMPO_CONTINUOUS', phases=[_BASE]),
    # Build
    _rule(WorkoutType.THRESHOLD, 'LACTATE_THRESHOLD_2X20', phases=[_BUILD]),
    _rule(WorkoutType.VO2MAX, 'VO2MAX_5X3', phases=[_BUILD], max_week=2),
    _rule(WorkoutType.VO2MAX, *_VO2_ALTERNATING, phases=[_BUILD, _PEAK]),
    _rule(WorkoutType.PROGRESSION, 'PROGRESSION_3_STAGE', phases=[_BUILD]),
    # Peak and taper
    _rule(WorkoutType.THRESHOLD, 'THRESHOLD_PROGRESSION', phases=[_PEAK, _TAPER]),
    _rule(WorkoutType.RACE_PACE, 'TEMPO_CONTINUOUS', phases=[_PEAK]),
    _rule(WorkoutType.VO2MAX, 'VO2MAX_5X3', phases=[_TAPER]),
    _rule(WorkoutType.FARTLEK, 'FARTLEK_VARIED', phases=[_BUILD, _PEAK]),
    _rule(WorkoutType.TEMPO, 'TEMPO_CONTINUOUS'),
)

LYDIARD_RULES = (
    _rule(WorkoutType.EASY, 'EASY_AEROBIC'),
    _rule(WorkoutType.LONG_RUN, 'LONG_RUN'),
    _rule(WorkoutType.HILL_REPEATS, 'HILL_REPEATS_6X2'),
    _rule(WorkoutType.TEMPO, 'TEMPO_CONTINUOUS'),
    _rule(WorkoutType.THRESHOLD, 'TEMPO_CONTINUOUS', phases=[_BASE]),
    _rule(WorkoutType.THRESHOLD, 'THRESHOLD_PROGRESSION'),
    # Hills stand in for speed and VO2max work until the peak
    _rule(WorkoutType.VO2MAX, 'HILL_REPEATS_6X2', phases=[_BASE, _BUILD]),
    _rule(WorkoutType.SPEED, 'HILL_REPEATS_6X2', phases=[_BASE, _BUILD]),
)

PFITZINGER_RULES = (
    _rule(WorkoutType.THRESHOLD, 'LACTATE_THRESHOLD_2X20', phases=[_BUILD, _PEAK]),
    _rule(WorkoutType.THRESHOLD, 'THRESHOLD_PROGRESSION'),
    _rule(WorkoutType.TEMPO, 'TEMPO_CONTINUOUS'),
    _rule(WorkoutType.PROGRESSION, 'PROGRESSION_3_STAGE'),
    _rule(WorkoutType.LONG_RUN, 'LONG_RUN'),
    _rule(WorkoutType.VO2MAX, 'VO2MAX_5X3', phases=[_PEAK]),
    _rule(WorkoutType.VO2MAX, 'THRESHOLD_PROGRESSION'),
    _rule(WorkoutType.EASY, 'EASY_AEROBIC'),
    _rule(WorkoutType.RECOVERY, 'RECOVERY_JOG'),
)


# =============================================================================
# Methodology tables
# =============================================================================

def _dist(easy, moderate, hard, very_hard=0) -> IntensityDistribution:
    return IntensityDistribution(easy=easy, moderate=moderate, hard=hard, very_hard=very_hard)


def _phases(base, build, peak, taper, recovery) -> Dict[TrainingPhase, IntensityDistribution]:
    return {
        TrainingPhase.BASE: _dist(*base),
        TrainingPhase.BUILD: _dist(*build),
        TrainingPhase.PEAK: _dist(*peak),
        TrainingPhase.TAPER: _dist(*taper),
        TrainingPhase.RECOVERY: _dist(*recovery),
    }


_EMPHASIS_ORDER = (
    WorkoutType.RECOVERY, WorkoutType.EASY, WorkoutType.STEADY, WorkoutType.TEMPO,
    WorkoutType.THRESHOLD, WorkoutType.VO2MAX, WorkoutType.SPEED, WorkoutType.HILL_REPEATS,
    WorkoutType.FARTLEK, WorkoutType.PROGRESSION, WorkoutType.LONG_RUN, WorkoutType.RACE_PACE,
    WorkoutType.TIME_TRIAL, WorkoutType.CROSS_TRAINING, WorkoutType.STRENGTH,
)


def _emphasis(*values) -> Dict[WorkoutType, float]:
    return dict(zip(_EMPHASIS_ORDER, values))


def _targets(base, build, peak, taper) -> Dict[TrainingPhase, Tuple[str, ...]]:
    return {
        TrainingPhase.BASE: tuple(base),
        TrainingPhase.BUILD: tuple(build),
        TrainingPhase.PEAK: tuple(peak),
        TrainingPhase.TAPER: tuple(taper),
    }


_W = WorkoutType


@dataclass(frozen=True)
class MethodologyStrategy:
    """
    Everything the validator, adjuster and plan builders need to know
    about one methodology.
    """
    methodology: Methodology
    name: str
    intensity_distribution: IntensityDistribution
    phase_targets: Dict[TrainingPhase, IntensityDistribution]
    workout_priorities: Tuple[WorkoutType, ...]
    recovery_emphasis: float
    pace_system: PaceSystem
    workout_emphasis: Dict[WorkoutType, float] = field(default_factory=dict)
    adaptation_targets: Dict[TrainingPhase, Tuple[str, ...]] = field(default_factory=dict)
    selection_rules: Tuple[SelectionRule, ...] = ()

    def phase_target(self, phase: TrainingPhase) -> IntensityDistribution:
        """Target distribution for a phase, else the methodology default."""
        return self.phase_targets.get(phase, self.intensity_distribution)

    def emphasis(self, workout_type: WorkoutType) -> float:
        return self.workout_emphasis.get(workout_type, 1.0)

    def default_foundation(self) -> float:
        if self.pace_system == PaceSystem.LACTATE_THRESHOLD:
            return DEFAULT_LT_PACE
        return DEFAULT_VDOT

    def foundation_from_metrics(self, metrics) -> float:
        """
        Foundation metric for this pace system from FitnessMetrics.

        VDOT systems use metrics.vdot; LT systems use the threshold pace.
        """
        if metrics is None:
            return self.default_foundation()
        if self.pace_system == PaceSystem.LACTATE_THRESHOLD:
            if metrics.lactate_threshold and metrics.lactate_threshold > 0:
                return metrics.threshold_pace
            return DEFAULT_LT_PACE
        return metrics.vdot

    def pace_table(self, foundation: float) -> Dict[str, PaceRange]:
        if self.pace_system == PaceSystem.LACTATE_THRESHOLD:
            return calculate_lt_paces(foundation)
        return calculate_vdot_paces(foundation)

    def pace_for_zone(self, zone: Zone, paces: Mapping[str, PaceRange]) -> PaceRange:
        if self.pace_system == PaceSystem.LACTATE_THRESHOLD:
            return lt_pace_for_zone(zone, paces)
        return vdot_pace_for_zone(zone, paces)

    def select_workout(self, workout_type: WorkoutType, phase: TrainingPhase, week_in_phase: int) -> str:
        """
        Template name for a workout slot.

        Falls back to the first template of the type, then EASY_AEROBIC.
        """
        for rule in self.selection_rules:
            if rule.matches(workout_type, phase, week_in_phase):
                return rule.choose(week_in_phase)

        available = templates_for_type(workout_type)
        if available:
            return available[0]
        logger.debug("No template for %s, using %s", workout_type.value, FALLBACK_TEMPLATE)
        return FALLBACK_TEMPLATE

    def to_dict(self):
        return {
            'methodology': self.methodology.value,
            'name': self.name,
            'intensity_distribution': self.intensity_distribution.to_dict(),
            'phase_targets': {p.value: d.to_dict() for p, d in self.phase_targets.items()},
            'workout_priorities': [w.value for w in self.workout_priorities],
            'recovery_emphasis': self.recovery_emphasis,
            'pace_system': self.pace_system.value,
        }


_STRATEGY_TABLES = {
    Methodology.DANIELS: dict(
        name="Jack Daniels' Running Formula",
        intensity_distribution=_dist(80, 10, 10),
        phase_targets=_phases((85, 10, 5), (80, 15, 5), (75, 15, 10), (80, 15, 5), (95, 5, 0)),
        workout_priorities=(_W.TEMPO, _W.VO2MAX, _W.THRESHOLD, _W.EASY, _W.LONG_RUN),
        recovery_emphasis=0.7,
        pace_system=PaceSystem.VDOT,
        workout_emphasis=_emphasis(1.0, 1.2, 1.1, 1.5, 1.4, 1.3, 1.1, 1.2, 1.2, 1.2, 1.2, 1.3, 1.1, 0.8, 0.9),
        adaptation_targets=_targets(
            ('aerobic_capacity', 'mitochondrial'),
            ('lactate_threshold', 'aerobic_power'),
            ('vo2max', 'neuromuscular'),
            ('maintenance', 'freshness'),
        ),
        selection_rules=DANIELS_RULES,
    ),
    Methodology.LYDIARD: dict(
        name="Arthur Lydiard Method",
        intensity_distribution=_dist(85, 10, 5),
        phase_targets=_phases((90, 8, 2), (85, 12, 3), (80, 15, 5), (85, 12, 3), (100, 0, 0)),
        workout_priorities=(_W.EASY, _W.STEADY, _W.LONG_RUN, _W.HILL_REPEATS, _W.TEMPO),
        recovery_emphasis=0.9,
        pace_system=PaceSystem.VDOT,
        workout_emphasis=_emphasis(1.0, 1.5, 1.3, 1.1, 1.0, 0.8, 0.9, 1.3, 1.0, 1.2, 1.4, 1.0, 0.9, 0.7, 0.8),
        adaptation_targets=_targets(
            ('aerobic_capacity', 'capillarization'),
            ('hill_strength', 'aerobic_power'),
            ('speed', 'neuromuscular'),
            ('maintenance', 'freshness'),
        ),
        selection_rules=LYDIARD_RULES,
    ),
    Methodology.PFITZINGER: dict(
        name="Pete Pfitzinger Advanced Marathoning",
        intensity_distribution=_dist(75, 15, 10),
        phase_targets=_phases((75, 20, 5), (70, 25, 5), (70, 20, 10), (75, 20, 5), (90, 10, 0)),
        workout_priorities=(_W.THRESHOLD, _W.LONG_RUN, _W.TEMPO, _W.VO2MAX, _W.EASY),
        recovery_emphasis=0.8,
        pace_system=PaceSystem.LACTATE_THRESHOLD,
        workout_emphasis=_emphasis(1.0, 1.3, 1.2, 1.2, 1.5, 1.1, 1.0, 1.1, 1.0, 1.2, 1.3, 1.4, 1.2, 0.8, 0.9),
        adaptation_targets=_targets(
            ('aerobic_capacity', 'mitochondrial'),
            ('lactate_threshold', 'marathon_pace'),
            ('race_pace', 'aerobic_power'),
            ('maintenance', 'race_readiness'),
        ),
        selection_rules=PFITZINGER_RULES,
    ),
    Methodology.HUDSON: dict(
        name="Brad Hudson Adaptive Training",
        intensity_distribution=_dist(70, 20, 10),
        phase_targets=_phases((80, 15, 5), (75, 20, 5), (70, 20, 10), (80, 15, 5), (90, 10, 0)),
        workout_priorities=(_W.TEMPO, _W.FARTLEK, _W.LONG_RUN, _W.VO2MAX, _W.EASY),
        recovery_emphasis=0.75,
        pace_system=PaceSystem.VDOT,
        workout_emphasis=_emphasis(1.0, 1.2, 1.1, 1.4, 1.2, 1.1, 1.0, 1.1, 1.3, 1.2, 1.2, 1.2, 1.1, 0.9, 1.0),
        adaptation_targets=_targets(
            ('aerobic_capacity', 'mitochondrial'),
            ('tempo_endurance', 'lactate_buffering'),
            ('race_pace', 'neuromuscular'),
            ('maintenance', 'freshness'),
        ),
    ),
    Methodology.CUSTOM: dict(
        name="Custom Methodology",
        intensity_distribution=_dist(75, 15, 10),
        phase_targets=_phases((80, 15, 5), (75, 20, 5), (70, 20, 10), (80, 15, 5), (90, 10, 0)),
        workout_priorities=(_W.EASY, _W.TEMPO, _W.LONG_RUN, _W.VO2MAX, _W.THRESHOLD),
        recovery_emphasis=0.8,
        pace_system=PaceSystem.VDOT,
        workout_emphasis=_emphasis(1.0, 1.2, 1.1, 1.2, 1.2, 1.1, 1.0, 1.1, 1.2, 1.1, 1.2, 1.2, 1.1, 0.8, 0.9),
        adaptation_targets=_targets(
            ('aerobic_capacity', 'mitochondrial'),
            ('lactate_threshold', 'aerobic_power'),
            ('vo2max', 'race_pace'),
            ('maintenance', 'freshness'),
        ),
    ),
}


def resolve_methodology(name: Union[str, Methodology]) -> Methodology:
    """
    Raises:
        UnknownMethodologyError: name is not a known methodology
    """
    if isinstance(name, Methodology):
        return name
    try:
        return Methodology(str(name).strip().lower())
    except ValueError:
        known = ", ".join(m.value for m in Methodology)
        raise UnknownMethodologyError(
            f"Unknown methodology '{name}' (expected one of: {known})"
        ) from None


@functools.lru_cache(maxsize=None)
def _build_strategy(methodology: Methodology) -> MethodologyStrategy:
    return MethodologyStrategy(methodology=methodology, **_STRATEGY_TABLES[methodology])


def get_methodology_strategy(
    name: Union[str, Methodology, MethodologyStrategy]
) -> MethodologyStrategy:
    """
    Strategy for a methodology name; repeated calls return the same object.

    Raises:
        UnknownMethodologyError: name is not a known methodology
    """
    if isinstance(name, MethodologyStrategy):
        return name
    return _build_strategy(resolve_methodology(name))


def available_methodologies() -> List[str]:
    return [m.value for m in Methodology]


# =============================================================================
# Applying a strategy to workouts and plans
# =============================================================================

def customize_workout(
    strategy: MethodologyStrategy,
    workout: Workout,
    phase: TrainingPhase
) -> Workout:
    """
    Scale segment intensities by phase factor and workout-type emphasis.

    intensity' = clip(round(intensity * phase_factor * emphasis), 40, 100)
    """
    factor = PHASE_INTENSITY_FACTORS.get(phase, 1.0) * strategy.emphasis(workout.type)

    intensities = np.array([s.intensity for s in workout.segments], dtype=float)
    scaled = np.clip(np.round(intensities * factor), 40, 100)

    segments = tuple(
        replace(s, intensity=float(v)) for s, v in zip(workout.segments, scaled)
    )
    return replace(workout, segments=segments)


def annotate_workout_paces(
    strategy: MethodologyStrategy,
    workout: Workout,
    paces: Mapping[str, PaceRange],
    foundation: float
) -> Workout:
    """Attach pace (and, for VDOT systems, heart rate) targets to segments."""
    segments = []
    for segment in workout.segments:
        hr = None
        if strategy.pace_system == PaceSystem.VDOT:
            hr = heart_rate_for_zone(segment.zone, foundation)
        segments.append(replace(
            segment,
            pace_target=strategy.pace_for_zone(segment.zone, paces),
            heart_rate_target=hr,
        ))
    return replace(workout, segments=tuple(segments))


def annotate_plan_paces(
    plan: Plan,
    strategy: MethodologyStrategy,
    foundation: float,
    context=None
) -> Plan:
    """
    Write pace targets onto every segment of a plan.

    Args:
        plan: Plan to annotate
        strategy: Supplies the pace system
        foundation: VDOT or LT pace (min/km), matching strategy.pace_system
        context: Optional CalculationContext whose paces cache is used

    Raises:
        FoundationMetricError: foundation outside the supported range
    """
    if context is not None:
        paces = context.training_paces(
            strategy.methodology.value, foundation,
            lambda: strategy.pace_table(foundation),
        )
    else:
        paces = strategy.pace_table(foundation)

    def annotate(block: Block, workout: Workout) -> Workout:
        return annotate_workout_paces(strategy, workout, paces, foundation)

    return plan.map_workouts(annotate)


def format_pace(pace_min_per_km: float) -> str:
    """4.5 -> '4:30'"""
    minutes = int(pace_min_per_km)
    seconds = int(round((pace_min_per_km - minutes) * 60))
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}"
