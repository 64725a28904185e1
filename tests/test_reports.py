"""
Tests for intensity and fitness reports.

Run with: python -m pytest tests/test_reports.py -v
"""

from fitness.metrics import compute_fitness_metrics, analyze_weekly_patterns
from planning.plan import IntensityDistribution
from planning.distribution import (
    DistributionValidation,
    Violation,
    ViolationType,
    Severity,
)
from planning.adjustment import AutoAdjustmentEngine
from analysis.reports import (
    calculate_compliance_score,
    generate_intensity_recommendations,
    generate_intensity_report,
    format_intensity_report,
    format_adjustment_summary,
    generate_fitness_report,
)


def _validation(easy, moderate, hard, severities=()):
    violations = tuple(
        Violation(ViolationType.INSUFFICIENT_EASY, 'build', easy, 80, 80 - easy, s)
        for s in severities
    )
    return DistributionValidation(
        is_valid=not violations,
        violations=violations,
        overall=IntensityDistribution(easy, moderate, hard),
        phases={},
    )


class TestComplianceScore:
    """Tests for the 0-100 compliance score."""

    def test_perfect(self):
        assert calculate_compliance_score(_validation(80, 5, 15)) == 100

    def test_drift_weighted(self):
        # easy off by 10 -> 80, hard on target -> 100
        assert calculate_compliance_score(_validation(70, 15, 15)) == 90
        # hard off by 10 -> 70
        assert calculate_compliance_score(_validation(80, 15, 5)) == 85

    def test_severity_penalties(self):
        score = calculate_compliance_score(_validation(70, 15, 15, [Severity.MEDIUM, Severity.CRITICAL]))
        assert score == 90 - 5 - 20

    def test_floor_at_zero(self):
        assert calculate_compliance_score(_validation(0, 0, 100, [Severity.CRITICAL] * 3)) == 0


class TestRecommendations:

    def test_balanced(self):
        recs = generate_intensity_recommendations(_validation(80, 5, 15))
        assert recs == ["Intensity distribution looks good - maintain current balance"]

    def test_low_easy_and_high_hard(self):
        recs = generate_intensity_recommendations(_validation(60, 10, 30))
        assert any("easy running volume" in r for r in recs)
        assert any("Reduce high-intensity" in r for r in recs)

    def test_critical_violation_flagged(self):
        recs = generate_intensity_recommendations(_validation(78, 7, 15, [Severity.HIGH]))
        assert recs == ["Critical: insufficient_easy in build phase - adjust immediately"]


class TestIntensityReport:
    """Tests for report generation and formatting."""

    def test_moderate_heavy_plan(self, moderate_heavy_plan):
        report = generate_intensity_report(moderate_heavy_plan, 'daniels')
        assert report.methodology == 'daniels'
        assert report.overall.easy == 40
        assert len(report.violations) == 2
        assert report.compliance < 50

    def test_compliant_plan(self, compliant_plan):
        report = generate_intensity_report(compliant_plan, 'daniels')
        assert report.violations == ()
        # easy 100 (-40), hard 0 (-45)
        assert report.compliance == 58

    def test_format(self, moderate_heavy_plan):
        text = format_intensity_report(generate_intensity_report(moderate_heavy_plan, 'daniels'))
        assert "Methodology: daniels" in text
        assert "VIOLATIONS" in text
        assert "insufficient_easy" in text
        assert "base-2024-01-01" in text

    def test_to_dict(self, compliant_plan):
        d = generate_intensity_report(compliant_plan, 'lydiard').to_dict()
        assert d['methodology'] == 'lydiard'
        assert d['violations'] == []

    def test_adjustment_summary(self, moderate_heavy_plan):
        result = AutoAdjustmentEngine('daniels').adjust(moderate_heavy_plan)
        summary = format_adjustment_summary(result)
        assert "1 pass(es)" in summary
        assert "2 -> 0" in summary
        assert "compliant" in summary


class TestFitnessReport:

    def test_sections(self, steady_history):
        metrics = compute_fitness_metrics(steady_history)
        text = generate_fitness_report(metrics, analyze_weekly_patterns(steady_history))
        assert "VDOT:" in text
        assert "TRAINING LOAD" in text
        assert "WEEKLY PATTERNS" in text

    def test_without_patterns(self):
        text = generate_fitness_report(compute_fitness_metrics([]))
        assert "WEEKLY PATTERNS" not in text
        assert "Lactate threshold" in text
