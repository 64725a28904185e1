"""
Fitness metrics: VDOT, critical speed, economy, threshold, EWMA load,
recovery, injury risk and weekly pattern analysis.

Based on:
- Daniels & Gilbert (1979): oxygen cost and %VO2max regression (VDOT)
- Jones & Vanhatalo (2017): critical speed two-parameter model
- Coggan (2003): intensity-factor-squared training stress score
- Williams et al. (2017): EWMA-based acute:chronic workload ratio

Every estimator is a pure function of the run history. When the history
holds nothing usable the estimator returns a documented conservative
default instead of raising.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .records import (
    RunRecord,
    TrainingLoadSample,
    WeeklyPatterns,
    FitnessMetrics,
    LoadTrend,
    DayOfWeek,
    sort_runs,
)

logger = logging.getLogger(__name__)


# Fallbacks when the history has no qualifying runs
DEFAULT_VDOT = 35
DEFAULT_CRITICAL_SPEED = 10.0   # km/h
DEFAULT_RUNNING_ECONOMY = 200

# Heart rate anchors for the economy estimate
ECONOMY_REST_HR = 60.0
ECONOMY_MAX_HR = 190.0
ECONOMY_VO2_SCALE = 50.0

# EWMA decay constants (per sample)
ACUTE_DECAY = math.exp(-1 / 7)
CHRONIC_DECAY = math.exp(-1 / 28)

LONG_RUN_KM = 15.0
MIN_ESTIMATE_DISTANCE_KM = 3.0

RECOMMENDATION_LOW = "Training load is low. Consider increasing volume gradually."
RECOMMENDATION_VERY_HIGH = (
    "Training load is very high. Risk of overtraining. Consider recovery."
)
RECOMMENDATION_HIGH = "Training load is high. Monitor fatigue carefully."
RECOMMENDATION_OPTIMAL = "Training load is in optimal range for adaptation."


# =============================================================================
# Aerobic capacity
# =============================================================================

def oxygen_cost(velocity_m_per_min: float) -> float:
    """VO2 (ml/kg/min) required to run at the given velocity."""
    v = velocity_m_per_min
    return -4.6 + 0.182258 * v + 0.000104 * v ** 2


def percent_vo2max_sustainable(duration_min: float) -> float:
    """Fraction of VO2max sustainable for an effort of this duration."""
    t = duration_min
    return (
        0.8
        + 0.1894393 * math.exp(-0.012778 * t)
        + 0.2989558 * math.exp(-0.1932605 * t)
    )


def vdot_from_performance(distance_km: float, duration_min: float) -> int:
    """
    VDOT for a single performance.

    Args:
        distance_km: Distance covered
        duration_min: Time taken in minutes

    Returns:
        Rounded VDOT index
    """
    velocity = distance_km * 1000.0 / duration_min
    return int(round(oxygen_cost(velocity) / percent_vo2max_sustainable(duration_min)))


def calculate_vdot(runs: List[RunRecord]) -> int:
    """
    Estimate VDOT from a run history.

    Races and efforts of 9+ are preferred; the fastest of them is used.
    Otherwise the fastest of the three quickest runs of 3 km or more
    (by average pace) stands in for a performance.

    Returns:
        VDOT, or DEFAULT_VDOT when nothing qualifies
    """
    performances = [
        r for r in runs
        if (r.is_race or (r.effort_level is not None and r.effort_level >= 9))
        and r.distance_km > 0 and r.duration_min > 0
    ]

    if performances:
        best = min(performances, key=lambda r: r.effective_pace)
    else:
        fast_runs = sorted(
            (r for r in runs
             if r.distance_km >= MIN_ESTIMATE_DISTANCE_KM
             and r.avg_pace and r.duration_min > 0),
            key=lambda r: r.avg_pace,
        )[:3]
        if not fast_runs:
            logger.debug("No qualifying runs for VDOT, using default %s", DEFAULT_VDOT)
            return DEFAULT_VDOT
        best = fast_runs[0]

    vdot = vdot_from_performance(best.distance_km, best.duration_min)
    if vdot <= 0:
        logger.debug("Implausible VDOT %s from %s, using default", vdot, best.date)
        return DEFAULT_VDOT
    return vdot


def calculate_critical_speed(runs: List[RunRecord]) -> float:
    """
    Critical speed from the shortest and longest hard time trials.

    CS = (d2 - d1) / (t2 - t1)

    Returns:
        Critical speed in km/h, or DEFAULT_CRITICAL_SPEED with fewer than
        two usable trials
    """
    trials = sorted(
        (
            (r.distance_km * 1000.0, r.duration_min * 60.0)
            for r in runs
            if r.distance_km >= MIN_ESTIMATE_DISTANCE_KM
            and r.effort_level is not None and r.effort_level >= 8
        ),
        key=lambda t: t[0],
    )

    if len(trials) < 2:
        return DEFAULT_CRITICAL_SPEED

    d1, t1 = trials[0]
    d2, t2 = trials[-1]
    if d2 <= d1 or t2 <= t1:
        logger.debug("Degenerate time trials for critical speed, using default")
        return DEFAULT_CRITICAL_SPEED

    cs = (d2 - d1) / (t2 - t1)  # m/s
    return cs * 3.6


def estimate_running_economy(runs: List[RunRecord]) -> int:
    """
    Oxygen cost per km from sub-threshold runs with heart rate data.

    Heart rate reserve stands in for fractional VO2:
        HRR = (HR - 60) / (190 - 60)
        VO2 ~ HRR * 50
        economy = VO2 / speed

    Returns:
        Mean economy in ml/kg/km, or DEFAULT_RUNNING_ECONOMY
    """
    economy_runs = [
        r for r in runs
        if r.avg_heart_rate and r.avg_pace and r.duration_min > 20
        and r.effort_level is not None and r.effort_level <= 6
    ]

    if not economy_runs:
        return DEFAULT_RUNNING_ECONOMY

    economies = []
    for run in economy_runs:
        hr_reserve = (run.avg_heart_rate - ECONOMY_REST_HR) / (ECONOMY_MAX_HR - ECONOMY_REST_HR)
        estimated_vo2 = hr_reserve * ECONOMY_VO2_SCALE
        speed = 60.0 / run.avg_pace  # km/h
        economies.append(estimated_vo2 / speed)

    return int(round(float(np.mean(economies))))


def calculate_lactate_threshold(vdot: float) -> float:
    """Lactate threshold velocity (km/h) at 88% of VDOT."""
    return vdot * 0.88 / 3.5


# =============================================================================
# Training load
# =============================================================================

def calculate_tss(run: RunRecord, threshold_pace: float) -> float:
    """
    Training stress score for one run.

    TSS = duration * IF^2 * 100 / 60, IF = threshold_pace / avg_pace

    Args:
        run: The run
        threshold_pace: Threshold pace in min/km

    Returns:
        Rounded TSS, 0 when the run has no pace
    """
    if not run.avg_pace or run.avg_pace <= 0 or threshold_pace <= 0:
        return 0.0

    intensity_factor = threshold_pace / run.avg_pace
    return float(round(run.duration_min * intensity_factor ** 2 * 100 / 60))


def calculate_ewma(values: np.ndarray, decay: float) -> np.ndarray:
    """
    Exponentially weighted moving average seeded at zero.

    EWMA_t = EWMA_{t-1} * decay + value_t * (1 - decay)

    Args:
        values: Per-sample values (e.g., TSS per run)
        decay: Retention factor in (0, 1); higher forgets more slowly

    Returns:
        Array of EWMA values, one per input sample
    """
    values = np.asarray(values, dtype=float)
    n = len(values)

    if n == 0:
        return np.array([])

    ewma = np.zeros(n)
    previous = 0.0
    for i in range(n):
        previous = previous * decay + values[i] * (1 - decay)
        ewma[i] = previous

    return ewma


def classify_load_trend(current_acute: float, week_ago_acute: Optional[float]) -> LoadTrend:
    """Compare acute load with the sample seven runs earlier (10% band)."""
    if week_ago_acute is None:
        return LoadTrend.STABLE
    if current_acute > week_ago_acute * 1.1:
        return LoadTrend.INCREASING
    if current_acute < week_ago_acute * 0.9:
        return LoadTrend.DECREASING
    return LoadTrend.STABLE


def load_recommendation(ratio: float) -> str:
    """Narrative recommendation for an acute:chronic ratio."""
    if ratio < 0.8:
        return RECOMMENDATION_LOW
    elif ratio > 1.5:
        return RECOMMENDATION_VERY_HIGH
    elif ratio > 1.3:
        return RECOMMENDATION_HIGH
    else:
        return RECOMMENDATION_OPTIMAL


def calculate_training_load_series(
    runs: List[RunRecord],
    threshold_pace: float
) -> List[TrainingLoadSample]:
    """
    Acute (7) and chronic (28) EWMA load after every run, oldest first.

    Args:
        runs: Run history in any order
        threshold_pace: Threshold pace in min/km

    Returns:
        One unrounded TrainingLoadSample per run
    """
    ordered = sort_runs(runs)
    tss = np.array([calculate_tss(r, threshold_pace) for r in ordered])
    acute = calculate_ewma(tss, ACUTE_DECAY)
    chronic = calculate_ewma(tss, CHRONIC_DECAY)

    samples = []
    for i, run in enumerate(ordered):
        ratio = acute[i] / chronic[i] if chronic[i] > 0 else 1.0
        week_ago = float(acute[i - 7]) if i >= 7 else None
        samples.append(TrainingLoadSample(
            acute=float(acute[i]),
            chronic=float(chronic[i]),
            ratio=float(ratio),
            trend=classify_load_trend(float(acute[i]), week_ago),
            recommendation=load_recommendation(float(ratio)),
            date=run.date,
            tss=float(tss[i]),
        ))

    return samples


def calculate_training_load(
    runs: List[RunRecord],
    threshold_pace: float
) -> TrainingLoadSample:
    """
    Latest training load summary.

    Acute and chronic are rounded to whole units, the ratio to two
    decimals. An empty history yields zero loads with ratio 1.
    """
    samples = calculate_training_load_series(runs, threshold_pace)

    if not samples:
        return TrainingLoadSample(
            acute=0.0,
            chronic=0.0,
            ratio=1.0,
            trend=LoadTrend.STABLE,
            recommendation=load_recommendation(1.0),
        )

    current = samples[-1]
    return TrainingLoadSample(
        acute=float(round(current.acute)),
        chronic=float(round(current.chronic)),
        ratio=round(current.ratio, 2),
        trend=current.trend,
        recommendation=current.recommendation,
        date=current.date,
        tss=current.tss,
    )


# =============================================================================
# Recovery and risk
# =============================================================================

def _recent_runs(runs: List[RunRecord], as_of: datetime, days: int = 7) -> List[RunRecord]:
    cutoff = as_of - timedelta(days=days)
    return [r for r in runs if cutoff < r.date <= as_of]


def resolve_as_of(runs: List[RunRecord], as_of: Optional[datetime] = None) -> Optional[datetime]:
    """Reference instant for rolling windows: explicit, else the latest run."""
    if as_of is not None:
        return as_of
    if not runs:
        return None
    return max(r.date for r in runs)


def calculate_recovery_score(
    runs: List[RunRecord],
    resting_hr: Optional[float] = None,
    hrv: Optional[float] = None,
    as_of: Optional[datetime] = None
) -> float:
    """
    Recovery score (0-100).

    Starts at 70, loses 5 per hard run (effort 7+) in the last 7 days,
    and moves 10 either way for HRV (>60 good, <40 poor) and resting
    HR (<50 good, >65 poor) when provided.
    """
    score = 70.0

    reference = resolve_as_of(runs, as_of)
    if reference is not None:
        hard_runs = [
            r for r in _recent_runs(runs, reference)
            if r.effort_level is not None and r.effort_level >= 7
        ]
        score -= len(hard_runs) * 5

    if hrv is not None:
        if hrv > 60:
            score += 10
        elif hrv < 40:
            score -= 10

    if resting_hr is not None:
        if resting_hr < 50:
            score += 10
        elif resting_hr > 65:
            score -= 10

    return float(np.clip(score, 0, 100))


def calculate_injury_risk(
    training_load: TrainingLoadSample,
    weekly_distance_increase: float,
    recovery_score: float
) -> float:
    """
    Additive injury risk score (0-100).

    Components:
        ACWR band: <0.8 -> 20, >1.5 -> 40, >1.3 -> 25, else 10
        Weekly distance increase (%): >20 -> 30, >10 -> 20, >5 -> 10
        Recovery deficit: (100 - recovery_score) * 0.3
    """
    risk = 0.0
    ratio = training_load.ratio

    if ratio < 0.8:
        risk += 20   # Undertraining
    elif ratio > 1.5:
        risk += 40
    elif ratio > 1.3:
        risk += 25
    else:
        risk += 10

    if weekly_distance_increase > 20:
        risk += 30
    elif weekly_distance_increase > 10:
        risk += 20
    elif weekly_distance_increase > 5:
        risk += 10

    risk += round((100 - recovery_score) * 0.3)

    return float(np.clip(risk, 0, 100))


# =============================================================================
# Weekly patterns
# =============================================================================

def _runs_frame(runs: List[RunRecord]) -> pd.DataFrame:
    df = pd.DataFrame({
        'date': pd.to_datetime([r.date for r in runs]),
        'distance': [r.distance_km for r in runs],
    })
    df['weekday'] = df['date'].dt.weekday
    df['week_start'] = (
        df['date'].dt.normalize() - pd.to_timedelta(df['weekday'], unit='D')
    )
    return df


def weekly_distance(runs: List[RunRecord]) -> pd.Series:
    """Total distance per calendar week, indexed by the Monday of each week."""
    if not runs:
        return pd.Series(dtype=float)
    return _runs_frame(runs).groupby('week_start')['distance'].sum()


def _most_frequent_days(weekdays: pd.Series) -> List[DayOfWeek]:
    """Days ordered by frequency, ties broken Monday first."""
    counts = weekdays.value_counts()
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [DayOfWeek(int(day)) for day, _ in ranked]


def analyze_weekly_patterns(runs: List[RunRecord]) -> WeeklyPatterns:
    """
    Group runs by calendar week (Monday start) and summarise.

    consistency_score compares actual runs with the runs expected if the
    average active-week frequency had held for every week spanned.
    """
    if not runs:
        return WeeklyPatterns(
            avg_weekly_distance=0.0,
            max_weekly_distance=0.0,
            avg_runs_per_week=0.0,
            consistency_score=0.0,
        )

    df = _runs_frame(runs)
    weekly = df.groupby('week_start')['distance'].agg(['sum', 'count'])

    active_weeks = len(weekly)
    avg_runs_per_week = len(runs) / active_weeks
    weeks_spanned = (weekly.index.max() - weekly.index.min()).days // 7 + 1
    expected_runs = avg_runs_per_week * weeks_spanned
    consistency = min(100.0, float(round(len(runs) / expected_runs * 100)))

    day_count = int(avg_runs_per_week + 0.5)
    optimal_days = tuple(_most_frequent_days(df['weekday'])[:day_count])

    long_runs = df[df['distance'] > LONG_RUN_KM]
    typical_long_run_day = (
        _most_frequent_days(long_runs['weekday'])[0] if len(long_runs) else None
    )

    return WeeklyPatterns(
        avg_weekly_distance=float(round(weekly['sum'].mean())),
        max_weekly_distance=float(round(weekly['sum'].max())),
        avg_runs_per_week=round(avg_runs_per_week, 1),
        consistency_score=consistency,
        optimal_days=optimal_days,
        typical_long_run_day=typical_long_run_day,
    )


def calculate_weekly_distance_increase(
    runs: List[RunRecord],
    patterns: WeeklyPatterns,
    as_of: Optional[datetime] = None
) -> float:
    """Last-7-day distance versus the average week, in percent."""
    reference = resolve_as_of(runs, as_of)
    if reference is None or patterns.avg_weekly_distance <= 0:
        return 0.0

    recent = sum(r.distance_km for r in _recent_runs(runs, reference))
    avg = patterns.avg_weekly_distance
    return (recent - avg) / avg * 100


# =============================================================================
# Aggregate
# =============================================================================

def compute_fitness_metrics(
    runs: List[RunRecord],
    as_of: Optional[datetime] = None
) -> FitnessMetrics:
    """
    Derive every fitness estimate from a run history.

    Args:
        runs: Run history in any order
        as_of: Reference instant for 7-day windows (default: latest run)

    Returns:
        New FitnessMetrics value
    """
    vdot = calculate_vdot(runs)
    critical_speed = calculate_critical_speed(runs)
    running_economy = estimate_running_economy(runs)
    lactate_threshold = calculate_lactate_threshold(vdot)
    threshold_pace = 60.0 / lactate_threshold

    training_load = calculate_training_load(runs, threshold_pace)
    recovery_score = calculate_recovery_score(runs, as_of=as_of)

    patterns = analyze_weekly_patterns(runs)
    weekly_increase = calculate_weekly_distance_increase(runs, patterns, as_of)

    injury_risk = calculate_injury_risk(training_load, weekly_increase, recovery_score)

    return FitnessMetrics(
        vdot=vdot,
        critical_speed=critical_speed,
        running_economy=running_economy,
        lactate_threshold=lactate_threshold,
        training_load=training_load,
        injury_risk=injury_risk,
        recovery_score=recovery_score,
    )


def summarize_load_series(samples: List[TrainingLoadSample]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Acute, chronic and ratio arrays for plotting or analysis."""
    acute = np.array([s.acute for s in samples])
    chronic = np.array([s.chronic for s in samples])
    ratio = np.array([s.ratio for s in samples])
    return acute, chronic, ratio
