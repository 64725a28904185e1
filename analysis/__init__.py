"""Reporting and visualization utilities."""

from .reports import (
    IntensityReport,
    calculate_compliance_score,
    generate_intensity_recommendations,
    generate_intensity_report,
    format_intensity_report,
    format_adjustment_summary,
    generate_fitness_report,
)
from .visualizations import (
    plot_training_load,
    plot_weekly_distance,
    plot_phase_distributions,
    plot_adjustment_history,
    create_summary_dashboard,
)

__all__ = [
    'IntensityReport',
    'calculate_compliance_score',
    'generate_intensity_recommendations',
    'generate_intensity_report',
    'format_intensity_report',
    'format_adjustment_summary',
    'generate_fitness_report',
    'plot_training_load',
    'plot_weekly_distance',
    'plot_phase_distributions',
    'plot_adjustment_history',
    'create_summary_dashboard',
]
