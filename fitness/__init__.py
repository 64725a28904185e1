"""
Fitness estimation from run history.

This package provides:
- Aerobic capacity estimates (VDOT, critical speed, economy, threshold)
- EWMA training load (acute, chronic, ratio, trend)
- Recovery and injury risk scores
- Weekly pattern analysis
- Memoized calculation contexts
"""

# Records
from .records import (
    RunRecord,
    TrainingLoadSample,
    WeeklyPatterns,
    FitnessMetrics,
    LoadTrend,
    DayOfWeek,
    sort_runs,
)

# Estimators
from .metrics import (
    calculate_vdot,
    vdot_from_performance,
    calculate_critical_speed,
    estimate_running_economy,
    calculate_lactate_threshold,
    calculate_tss,
    calculate_ewma,
    calculate_training_load,
    calculate_training_load_series,
    calculate_recovery_score,
    calculate_injury_risk,
    analyze_weekly_patterns,
    calculate_weekly_distance_increase,
    weekly_distance,
    compute_fitness_metrics,
)

# Caching
from .cache import (
    CacheParams,
    CacheStats,
    MemoizationCache,
    CalculationContext,
    hash_runs,
)

__all__ = [
    # Records
    'RunRecord',
    'TrainingLoadSample',
    'WeeklyPatterns',
    'FitnessMetrics',
    'LoadTrend',
    'DayOfWeek',
    'sort_runs',
    # Estimators
    'calculate_vdot',
    'vdot_from_performance',
    'calculate_critical_speed',
    'estimate_running_economy',
    'calculate_lactate_threshold',
    'calculate_tss',
    'calculate_ewma',
    'calculate_training_load',
    'calculate_training_load_series',
    'calculate_recovery_score',
    'calculate_injury_risk',
    'analyze_weekly_patterns',
    'calculate_weekly_distance_increase',
    'weekly_distance',
    'compute_fitness_metrics',
    # Caching
    'CacheParams',
    'CacheStats',
    'MemoizationCache',
    'CalculationContext',
    'hash_runs',
]
