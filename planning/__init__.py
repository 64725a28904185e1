"""
Training plan auditing and adjustment.

This package provides:
- An immutable plan tree (blocks, microcycles, workouts, segments)
- Intensity distribution validation against phase targets
- Bounded auto-adjustment toward compliance
- Methodology strategies (phase targets, paces, workout selection)
"""

# Plan tree
from .plan import (
    Plan,
    Block,
    Microcycle,
    Workout,
    Segment,
    PaceRange,
    HeartRateRange,
    IntensityDistribution,
    TrainingPhase,
    WorkoutType,
    Zone,
    zone_for_intensity,
)

# Templates
from .templates import (
    WorkoutTemplate,
    WORKOUT_TEMPLATES,
    templates_for_type,
    workout_from_template,
)

# Methodologies
from .methodology import (
    Methodology,
    MethodologyStrategy,
    PaceSystem,
    UnknownMethodologyError,
    FoundationMetricError,
    get_methodology_strategy,
    available_methodologies,
    calculate_vdot_paces,
    calculate_lt_paces,
    heart_rate_for_zone,
    customize_workout,
    annotate_plan_paces,
    format_pace,
)

# Validation
from .distribution import (
    DistributionParams,
    DistributionValidation,
    Violation,
    ViolationType,
    Severity,
    POLARIZED_TARGET,
    calculate_intensity_distribution,
    validate_intensity_distribution,
)

# Adjustment
from .adjustment import (
    AdjustmentParams,
    AdjustmentResult,
    AdjustmentState,
    AutoAdjustmentEngine,
    add_quality_to_workout,
    apply_phase_targets,
    auto_adjust_intensity_distribution,
    validate_and_enforce,
)

__all__ = [
    # Plan tree
    'Plan',
    'Block',
    'Microcycle',
    'Workout',
    'Segment',
    'PaceRange',
    'HeartRateRange',
    'IntensityDistribution',
    'TrainingPhase',
    'WorkoutType',
    'Zone',
    'zone_for_intensity',
    # Templates
    'WorkoutTemplate',
    'WORKOUT_TEMPLATES',
    'templates_for_type',
    'workout_from_template',
    # Methodologies
    'Methodology',
    'MethodologyStrategy',
    'PaceSystem',
    'UnknownMethodologyError',
    'FoundationMetricError',
    'get_methodology_strategy',
    'available_methodologies',
    'calculate_vdot_paces',
    'calculate_lt_paces',
    'heart_rate_for_zone',
    'customize_workout',
    'annotate_plan_paces',
    'format_pace',
    # Validation
    'DistributionParams',
    'DistributionValidation',
    'Violation',
    'ViolationType',
    'Severity',
    'POLARIZED_TARGET',
    'calculate_intensity_distribution',
    'validate_intensity_distribution',
    # Adjustment
    'AdjustmentParams',
    'AdjustmentResult',
    'AdjustmentState',
    'AutoAdjustmentEngine',
    'add_quality_to_workout',
    'apply_phase_targets',
    'auto_adjust_intensity_distribution',
    'validate_and_enforce',
]
