"""
Visualization utilities for fitness and plan analysis.

Provides charts for:
- Training load (acute, chronic, ratio zones)
- Weekly distance
- Per-phase intensity distributions against targets
- Auto-adjustment convergence
"""

from typing import List, Optional, Dict, Tuple
import numpy as np

import matplotlib.pyplot as plt

from fitness.records import RunRecord, TrainingLoadSample
from fitness.metrics import summarize_load_series, weekly_distance
from planning.plan import IntensityDistribution
from planning.adjustment import AdjustmentResult


BUCKET_COLORS = {
    'easy': 'tab:green',
    'moderate': 'tab:orange',
    'hard': 'tab:red',
}


def plot_training_load(
    samples: List[TrainingLoadSample],
    title: str = "Training Load",
    figsize: Tuple[int, int] = (12, 6),
    show_zones: bool = True,
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Plot acute and chronic load with the acute:chronic ratio.

    Args:
        samples: Load series from calculate_training_load_series
        title: Plot title
        figsize: Figure size
        show_zones: Shade ratio bands on the secondary axis
        ax: Optional existing axes

    Returns:
        Matplotlib figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    acute, chronic, ratio = summarize_load_series(samples)
    x = np.arange(1, len(samples) + 1)

    ax.plot(x, acute, 'b-', linewidth=1.5, label='Acute (7)')
    ax.plot(x, chronic, 'k-', linewidth=2, label='Chronic (28)')
    ax.set_xlabel('Run')
    ax.set_ylabel('Load (TSS)')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    ax2 = ax.twinx()
    if show_zones:
        ax2.axhspan(0, 0.8, alpha=0.08, color='blue')
        ax2.axhspan(0.8, 1.3, alpha=0.08, color='green')
        ax2.axhspan(1.3, 1.5, alpha=0.08, color='orange')
        ax2.axhspan(1.5, 2.5, alpha=0.08, color='red')
    ax2.plot(x, ratio, 'm--', linewidth=1, label='Ratio')
    ax2.set_ylabel('Acute:Chronic')
    ax2.set_ylim(0, 2.5)

    lines = ax.get_legend_handles_labels()
    lines2 = ax2.get_legend_handles_labels()
    ax.legend(lines[0] + lines2[0], lines[1] + lines2[1], loc='upper left')

    return fig


def plot_weekly_distance(
    runs: List[RunRecord],
    title: str = "Weekly Distance",
    figsize: Tuple[int, int] = (12, 5),
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """Bar chart of distance per calendar week (Monday start)."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    weekly = weekly_distance(runs)
    if len(weekly):
        ax.bar(np.arange(len(weekly)), weekly.values, color='tab:blue', alpha=0.7)
        ax.axhline(weekly.mean(), color='r', linestyle='--',
                   label=f'Mean: {weekly.mean():.0f} km')
        ax.set_xticks(np.arange(len(weekly)))
        ax.set_xticklabels([d.strftime('%m-%d') for d in weekly.index],
                           rotation=45, ha='right')
        ax.legend()

    ax.set_xlabel('Week starting')
    ax.set_ylabel('Distance (km)')
    ax.set_title(title)

    return fig


def plot_phase_distributions(
    phases: Dict[str, IntensityDistribution],
    targets: Optional[Dict[str, IntensityDistribution]] = None,
    title: str = "Intensity Distribution by Phase",
    figsize: Tuple[int, int] = (12, 6),
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Stacked bars of easy/moderate/hard share per block.

    Args:
        phases: Realized distribution per block key
        targets: Target distribution per block key; easy targets are marked
        title: Plot title
        figsize: Figure size
        ax: Optional existing axes

    Returns:
        Matplotlib figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    keys = list(phases.keys())
    x = np.arange(len(keys))
    easy = np.array([phases[k].easy for k in keys])
    moderate = np.array([phases[k].moderate for k in keys])
    hard = np.array([phases[k].hard for k in keys])

    ax.bar(x, easy, color=BUCKET_COLORS['easy'], label='Easy')
    ax.bar(x, moderate, bottom=easy, color=BUCKET_COLORS['moderate'], label='Moderate')
    ax.bar(x, hard, bottom=easy + moderate, color=BUCKET_COLORS['hard'], label='Hard')

    if targets:
        for i, key in enumerate(keys):
            if key in targets:
                ax.hlines(targets[key].easy, i - 0.4, i + 0.4,
                          colors='black', linestyles='--', linewidth=2)

    ax.set_xticks(x)
    ax.set_xticklabels(keys, rotation=30, ha='right')
    ax.set_ylabel('Percent of time')
    ax.set_ylim(0, 105)
    ax.set_title(title)
    ax.legend(loc='lower right')

    return fig


def plot_adjustment_history(
    result: AdjustmentResult,
    title: str = "Auto-Adjustment Convergence",
    figsize: Tuple[int, int] = (8, 5),
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """Violation count before and after each adjustment pass."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    passes = np.arange(len(result.history))
    ax.plot(passes, result.history, 'o-', linewidth=2)
    ax.set_xticks(passes)
    ax.set_xlabel('Pass')
    ax.set_ylabel('Violations')
    ax.set_ylim(bottom=0)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    return fig


def create_summary_dashboard(
    runs: List[RunRecord],
    samples: List[TrainingLoadSample],
    phases: Dict[str, IntensityDistribution],
    result: Optional[AdjustmentResult] = None,
    title: str = "Training Summary Dashboard",
    figsize: Tuple[int, int] = (16, 10),
) -> plt.Figure:
    """
    Create a 2x2 dashboard of load, weekly distance, phases and convergence.

    Returns:
        Matplotlib figure
    """
    fig = plt.figure(figsize=figsize)

    ax1 = fig.add_subplot(2, 2, 1)
    ax2 = fig.add_subplot(2, 2, 2)
    ax3 = fig.add_subplot(2, 2, 3)
    ax4 = fig.add_subplot(2, 2, 4)

    plot_training_load(samples, ax=ax1, title="Training Load")
    plot_weekly_distance(runs, ax=ax2, title="Weekly Distance")
    plot_phase_distributions(phases, ax=ax3, title="Phase Distributions")

    if result is not None:
        plot_adjustment_history(result, ax=ax4, title="Adjustment Passes")
    else:
        ax4.axis('off')

    plt.suptitle(title, fontsize=14, fontweight='bold')
    plt.tight_layout()
    return fig
