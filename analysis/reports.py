"""
Report generation for fitness estimates and intensity audits.

Generates compliance scores, recommendations, and formatted text output.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple, Union

from fitness.records import FitnessMetrics, WeeklyPatterns
from planning.plan import Plan, IntensityDistribution
from planning.distribution import (
    DistributionParams,
    DistributionValidation,
    Violation,
    Severity,
    POLARIZED_TARGET,
    validate_intensity_distribution,
)
from planning.adjustment import AdjustmentResult
from planning.methodology import (
    Methodology,
    MethodologyStrategy,
    get_methodology_strategy,
    format_pace,
)


SEVERITY_PENALTIES = {
    Severity.LOW: 2,
    Severity.MEDIUM: 5,
    Severity.HIGH: 10,
    Severity.CRITICAL: 20,
}


@dataclass(frozen=True)
class IntensityReport:
    """Audit of a plan's intensity distribution."""
    methodology: str
    overall: IntensityDistribution
    target: IntensityDistribution
    phases: Dict[str, IntensityDistribution]
    violations: Tuple[Violation, ...]
    recommendations: Tuple[str, ...]
    compliance: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'methodology': self.methodology,
            'overall': self.overall.to_dict(),
            'target': self.target.to_dict(),
            'phases': {k: v.to_dict() for k, v in self.phases.items()},
            'violations': [v.to_dict() for v in self.violations],
            'recommendations': list(self.recommendations),
            'compliance': self.compliance,
        }


def calculate_compliance_score(
    validation: DistributionValidation,
    target: IntensityDistribution = POLARIZED_TARGET
) -> int:
    """
    Compliance score (0-100).

    easy_score = max(0, 100 - 2 * |easy - target.easy|)
    hard_score = max(0, 100 - 3 * |hard - target.hard|)
    score = mean(easy_score, hard_score) - severity penalties
    """
    actual = validation.overall

    easy_score = max(0, 100 - abs(actual.easy - target.easy) * 2)
    hard_score = max(0, 100 - abs(actual.hard - target.hard) * 3)  # Hard drift weighs more

    penalty = sum(SEVERITY_PENALTIES[v.severity] for v in validation.violations)

    base_score = (easy_score + hard_score) / 2
    return max(0, int(round(base_score - penalty)))


def generate_intensity_recommendations(validation: DistributionValidation) -> List[str]:
    """Plain-language advice for a validation result."""
    recommendations = []

    if validation.overall.easy < 75:
        recommendations.append("Increase easy running volume to build aerobic base")
        recommendations.append("Convert some moderate workouts to easy runs")

    if validation.overall.hard > 20:
        recommendations.append("Reduce high-intensity work to prevent overtraining")
        recommendations.append("Focus on quality over quantity for hard workouts")

    for violation in validation.violations:
        if violation.severity in (Severity.HIGH, Severity.CRITICAL):
            recommendations.append(
                f"Critical: {violation.type.value} in {violation.phase} phase - adjust immediately"
            )

    if not recommendations:
        recommendations.append("Intensity distribution looks good - maintain current balance")

    return recommendations


def generate_intensity_report(
    plan: Plan,
    methodology: Union[str, Methodology, MethodologyStrategy],
    params: Optional[DistributionParams] = None
) -> IntensityReport:
    """
    Validate a plan and summarise the result.

    Args:
        plan: Plan to audit
        methodology: Methodology whose phase targets apply
        params: Buckets and tolerance

    Returns:
        IntensityReport
    """
    params = params or DistributionParams()
    strategy = get_methodology_strategy(methodology)
    validation = validate_intensity_distribution(plan, strategy.phase_targets, params)

    return IntensityReport(
        methodology=strategy.methodology.value,
        overall=validation.overall,
        target=params.overall_target,
        phases=validation.phases,
        violations=validation.violations,
        recommendations=tuple(generate_intensity_recommendations(validation)),
        compliance=calculate_compliance_score(validation, params.overall_target),
    )


def _distribution_row(label: str, d: IntensityDistribution) -> str:
    return f"{label[:28]:<28} {d.easy:>6.0f}% {d.moderate:>8.0f}% {d.hard:>6.0f}%\n"


def format_intensity_report(
    report: IntensityReport,
    title: str = "Intensity Distribution Report"
) -> str:
    """
    Format an intensity report as text.

    Args:
        report: Report to render
        title: Report title

    Returns:
        Formatted report string
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    text = f"""
{'='*70}
{title}
{'='*70}
Generated: {timestamp}
Methodology: {report.methodology}
Compliance score: {report.compliance}/100

DISTRIBUTION
------------
"""
    text += f"{'Scope':<28} {'Easy':>7} {'Moderate':>9} {'Hard':>7}\n"
    text += "-" * 70 + "\n"
    text += _distribution_row("Overall", report.overall)
    text += _distribution_row("Target (polarized)", report.target)
    for key, dist in report.phases.items():
        text += _distribution_row(key, dist)

    text += """
VIOLATIONS
----------
"""
    if report.violations:
        for v in report.violations:
            text += (f"{v.severity.value.upper():<9} {v.type.value:<18} "
                     f"{v.phase:<9} actual {v.actual:>5.0f}%  "
                     f"target {v.target:>5.0f}%  diff {v.difference:>4.0f}\n")
    else:
        text += "None\n"

    text += """
RECOMMENDATIONS
---------------
"""
    for rec in report.recommendations:
        text += f"- {rec}\n"

    text += "\n" + "=" * 70 + "\n"
    return text


def format_adjustment_summary(result: AdjustmentResult) -> str:
    """One-paragraph summary of an adjustment run."""
    history = " -> ".join(str(n) for n in result.history)
    status = "compliant" if result.is_compliant else (
        f"{len(result.residual_violations)} residual violation(s)"
    )
    return (
        f"Auto-adjustment: {result.iterations} pass(es), "
        f"violations {history}, {status}"
    )


def generate_fitness_report(
    metrics: FitnessMetrics,
    patterns: Optional[WeeklyPatterns] = None,
    title: str = "Fitness Metrics Report"
) -> str:
    """
    Format fitness estimates (and optionally weekly patterns) as text.

    Args:
        metrics: Fitness estimates
        patterns: Weekly pattern analysis
        title: Report title

    Returns:
        Formatted report string
    """
    load = metrics.training_load
    threshold_pace = format_pace(metrics.threshold_pace)

    report = f"""
{'='*70}
{title}
{'='*70}

AEROBIC CAPACITY
----------------
VDOT:                      {metrics.vdot:>8.0f}
Critical speed:            {metrics.critical_speed:>8.2f} km/h
Running economy:           {metrics.running_economy:>8.0f} ml/kg/km
Lactate threshold:         {metrics.lactate_threshold:>8.2f} km/h ({threshold_pace}/km)

TRAINING LOAD
-------------
Acute (7):                 {load.acute:>8.0f}
Chronic (28):              {load.chronic:>8.0f}
Ratio:                     {load.ratio:>8.2f}
Trend:                     {load.trend.value:>8}
{load.recommendation}

READINESS
---------
Recovery score:            {metrics.recovery_score:>8.0f}/100
Injury risk:               {metrics.injury_risk:>8.0f}/100
"""

    if patterns is not None:
        days = ", ".join(d.name.title() for d in patterns.optimal_days) or "-"
        long_day = patterns.typical_long_run_day.name.title() if patterns.typical_long_run_day else "-"
        report += f"""
WEEKLY PATTERNS
---------------
Average weekly distance:   {patterns.avg_weekly_distance:>8.0f} km
Maximum weekly distance:   {patterns.max_weekly_distance:>8.0f} km
Average runs per week:     {patterns.avg_runs_per_week:>8.1f}
Consistency:               {patterns.consistency_score:>8.0f}%
Usual run days:            {days}
Long run day:              {long_day}
"""

    report += "\n" + "=" * 70 + "\n"
    return report
