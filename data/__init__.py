"""Synthetic data generation utilities."""

from .synthetic import (
    RunnerArchetype,
    RunnerProfile,
    generate_runner_profiles,
    generate_run_history,
    generate_plan,
)

__all__ = [
    'RunnerArchetype',
    'RunnerProfile',
    'generate_runner_profiles',
    'generate_run_history',
    'generate_plan',
]
