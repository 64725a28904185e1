#!/usr/bin/env python3
"""
Running Plan Toolkit - CLI Entry Point

Usage:
    python main.py metrics [--archetype A] [--weeks W] [--seed S] [--plot PATH]
    python main.py audit [--methodology M] [--enforce] [--no-customize] [--plot PATH]
    python main.py paces [--methodology M] [--vdot V | --lt-pace P]
"""

import argparse
import json
import logging

from fitness.cache import CalculationContext
from fitness.metrics import analyze_weekly_patterns, calculate_training_load_series
from planning.methodology import (
    FoundationMetricError,
    UnknownMethodologyError,
    PaceSystem,
    get_methodology_strategy,
    format_pace,
)
from planning.adjustment import validate_and_enforce
from data.synthetic import (
    RunnerArchetype,
    generate_runner_profiles,
    generate_run_history,
    generate_plan,
)
from analysis.reports import (
    generate_fitness_report,
    generate_intensity_report,
    format_intensity_report,
    format_adjustment_summary,
)


logger = logging.getLogger(__name__)


def run_metrics(archetype: str = 'recreational', n_weeks: int = 12, seed: int = 42,
                plot_path: str = None):
    """Estimate fitness from a synthetic run history."""
    profiles = generate_runner_profiles(8, seed=seed)
    profile = next(p for p in profiles if p.archetype.value == archetype)
    runs = generate_run_history(profile, n_weeks=n_weeks, seed=seed)
    print(f"Estimating fitness for {profile.name}: {len(runs)} runs over {n_weeks} weeks...")

    context = CalculationContext()
    metrics = context.fitness_metrics(runs)
    patterns = analyze_weekly_patterns(runs)

    print(generate_fitness_report(metrics, patterns))
    logger.debug("Cache stats: %s", json.dumps({k: s.to_dict() for k, s in context.stats().items()}))

    if plot_path:
        import matplotlib
        matplotlib.use('Agg')
        from analysis.visualizations import plot_training_load

        samples = calculate_training_load_series(runs, metrics.threshold_pace)
        fig = plot_training_load(samples, title=f"Training Load - {profile.name}")
        fig.savefig(plot_path, dpi=120, bbox_inches='tight')
        print(f"Training load chart saved to: {plot_path}")

    return metrics


def run_audit(methodology: str = 'daniels', enforce: bool = False, customize: bool = True,
              plot_path: str = None):
    """Audit (and optionally enforce) the intensity distribution of a generated plan."""
    plan = generate_plan(methodology, customize=customize)
    print(f"Auditing '{plan.name}': {len(plan.workouts)} workouts in {len(plan.blocks)} blocks")

    report = generate_intensity_report(plan, methodology)
    print(format_intensity_report(report))

    result = None
    if enforce:
        result = validate_and_enforce(plan, methodology)
        print(format_adjustment_summary(result))
        plan = result.plan
        report = generate_intensity_report(plan, methodology)
        print(format_intensity_report(report, title="Intensity Distribution Report (adjusted)"))

    if plot_path:
        import matplotlib
        matplotlib.use('Agg')
        from analysis.visualizations import plot_phase_distributions

        strategy = get_methodology_strategy(methodology)
        targets = {b.key: strategy.phase_target(b.phase) for b in plan.blocks}
        fig = plot_phase_distributions(report.phases, targets)
        fig.savefig(plot_path, dpi=120, bbox_inches='tight')
        print(f"Phase distribution chart saved to: {plot_path}")

    return report, result


def run_paces(methodology: str = 'daniels', vdot: float = None, lt_pace: float = None):
    """Print the training pace table for a methodology."""
    strategy = get_methodology_strategy(methodology)

    if strategy.pace_system == PaceSystem.LACTATE_THRESHOLD:
        foundation = lt_pace if lt_pace is not None else strategy.default_foundation()
        label = f"LT pace {format_pace(foundation)}/km"
    else:
        foundation = vdot if vdot is not None else strategy.default_foundation()
        label = f"VDOT {foundation:.0f}"

    paces = strategy.pace_table(foundation)

    print(f"\n{strategy.name} ({label})")
    print("-" * 50)
    print(f"{'Zone':<18} {'Fast':>8} {'Target':>8} {'Slow':>8}")
    for key, pace in paces.items():
        print(f"{key:<18} {format_pace(pace.min):>8} "
              f"{format_pace(pace.target):>8} {format_pace(pace.max):>8}")

    return paces


def main():
    parser = argparse.ArgumentParser(description='Running Plan Toolkit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Metrics command
    m_parser = subparsers.add_parser('metrics', help='Estimate fitness from a synthetic history')
    m_parser.add_argument('--archetype', default='recreational',
                          choices=[a.value for a in RunnerArchetype], help='Runner archetype')
    m_parser.add_argument('--weeks', type=int, default=12, help='History length in weeks')
    m_parser.add_argument('--seed', type=int, default=42, help='Random seed')
    m_parser.add_argument('--plot', default=None, help='Save training load chart to PATH')

    # Audit command
    a_parser = subparsers.add_parser('audit', help='Audit a generated plan')
    a_parser.add_argument('--methodology', default='daniels', help='Training methodology')
    a_parser.add_argument('--enforce', action='store_true', help='Auto-adjust violations')
    a_parser.add_argument('--no-customize', action='store_true',
                          help='Use raw template intensities')
    a_parser.add_argument('--plot', default=None, help='Save phase distribution chart to PATH')

    # Paces command
    p_parser = subparsers.add_parser('paces', help='Print training paces')
    p_parser.add_argument('--methodology', default='daniels', help='Training methodology')
    group = p_parser.add_mutually_exclusive_group()
    group.add_argument('--vdot', type=float, default=None, help='VDOT (30-85)')
    group.add_argument('--lt-pace', type=float, default=None, help='LT pace in min/km (2.5-10)')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        if args.command == 'metrics':
            run_metrics(args.archetype, args.weeks, args.seed, args.plot)
        elif args.command == 'audit':
            run_audit(args.methodology, args.enforce, not args.no_customize, args.plot)
        elif args.command == 'paces':
            run_paces(args.methodology, args.vdot, args.lt_pace)
        else:
            parser.print_help()
    except (UnknownMethodologyError, FoundationMetricError) as e:
        parser.error(str(e))


if __name__ == '__main__':
    main()
