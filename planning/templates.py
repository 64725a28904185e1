"""
Workout template catalog.

Templates are named segment layouts that methodology selection rules
choose from. Each template carries its workout type so that selection
can fall back to any template of the requested type.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Tuple

from .plan import Segment, Workout, WorkoutType, Zone


@dataclass(frozen=True)
class WorkoutTemplate:
    """A reusable workout layout."""
    name: str
    type: WorkoutType
    segments: Tuple[Segment, ...]
    adaptation_target: str
    estimated_tss: int = 0
    recovery_hours: int = 0

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.segments)


def _seg(duration: float, intensity: float, zone: Zone, description: str) -> Segment:
    return Segment(duration=duration, intensity=intensity, zone=zone, description=description)


def _repeats(
    count: int,
    work: Segment,
    rest: Segment,
    warmup: Segment,
    cooldown: Segment
) -> Tuple[Segment, ...]:
    """warmup, work, rest, work, ..., work, cooldown"""
    body: List[Segment] = []
    for i in range(count):
        body.append(work)
        if i < count - 1:
            body.append(rest)
    return (warmup, *body, cooldown)


_WARMUP = _seg(10, 65, Zone.EASY, "Warm-up")
_LONG_WARMUP = _seg(15, 65, Zone.EASY, "Warm-up")
_COOLDOWN = _seg(10, 60, Zone.RECOVERY, "Cool-down")


WORKOUT_TEMPLATES: Dict[str, WorkoutTemplate] = {
    'RECOVERY_JOG': WorkoutTemplate(
        name='RECOVERY_JOG',
        type=WorkoutType.RECOVERY,
        segments=(_seg(30, 50, Zone.RECOVERY, "Very easy jog, focus on form"),),
        adaptation_target="Active recovery and blood flow",
        estimated_tss=20, recovery_hours=8,
    ),
    'EASY_AEROBIC': WorkoutTemplate(
        name='EASY_AEROBIC',
        type=WorkoutType.EASY,
        segments=(_seg(60, 65, Zone.EASY, "Conversational pace, nose breathing"),),
        adaptation_target="Aerobic base, fat oxidation, capillarization",
        estimated_tss=50, recovery_hours=12,
    ),
    'LONG_RUN': WorkoutTemplate(
        name='LONG_RUN',
        type=WorkoutType.LONG_RUN,
        segments=(_seg(120, 65, Zone.EASY, "Steady aerobic effort, maintain form"),),
        adaptation_target="Aerobic endurance, glycogen storage, mental resilience",
        estimated_tss=120, recovery_hours=24,
    ),
    'TEMPO_CONTINUOUS': WorkoutTemplate(
        name='TEMPO_CONTINUOUS',
        type=WorkoutType.TEMPO,
        segments=(
            _WARMUP,
            _seg(30, 84, Zone.TEMPO, "Steady tempo effort"),
            _COOLDOWN,
        ),
        adaptation_target="Lactate clearance, aerobic power",
        estimated_tss=65, recovery_hours=24,
    ),
    'LACTATE_THRESHOLD_2X20': WorkoutTemplate(
        name='LACTATE_THRESHOLD_2X20',
        type=WorkoutType.THRESHOLD,
        segments=_repeats(
            2,
            _seg(20, 88, Zone.THRESHOLD, "Threshold pace"),
            _seg(5, 60, Zone.RECOVERY, "Recovery"),
            _WARMUP, _COOLDOWN,
        ),
        adaptation_target="Lactate threshold improvement",
        estimated_tss=90, recovery_hours=36,
    ),
    'THRESHOLD_PROGRESSION': WorkoutTemplate(
        name='THRESHOLD_PROGRESSION',
        type=WorkoutType.THRESHOLD,
        segments=(
            _WARMUP,
            _seg(10, 80, Zone.STEADY, "Build"),
            _seg(10, 85, Zone.TEMPO, "Tempo"),
            _seg(10, 90, Zone.THRESHOLD, "Threshold"),
            _COOLDOWN,
        ),
        adaptation_target="Progressive lactate tolerance",
        estimated_tss=75, recovery_hours=24,
    ),
    'VO2MAX_4X4': WorkoutTemplate(
        name='VO2MAX_4X4',
        type=WorkoutType.VO2MAX,
        segments=_repeats(
            4,
            _seg(4, 95, Zone.VO2_MAX, "VO2max interval"),
            _seg(3, 60, Zone.RECOVERY, "Recovery"),
            _LONG_WARMUP, _COOLDOWN,
        ),
        adaptation_target="VO2max improvement, aerobic power",
        estimated_tss=100, recovery_hours=48,
    ),
    'VO2MAX_5X3': WorkoutTemplate(
        name='VO2MAX_5X3',
        type=WorkoutType.VO2MAX,
        segments=_repeats(
            5,
            _seg(3, 96, Zone.VO2_MAX, "VO2max interval"),
            _seg(2, 60, Zone.RECOVERY, "Recovery"),
            _LONG_WARMUP, _COOLDOWN,
        ),
        adaptation_target="VO2max and running economy",
        estimated_tss=95, recovery_hours=48,
    ),
    'SPEED_200M_REPS': WorkoutTemplate(
        name='SPEED_200M_REPS',
        type=WorkoutType.SPEED,
        segments=_repeats(
            6,
            _seg(0.5, 98, Zone.NEUROMUSCULAR, "200m rep"),
            _seg(2, 50, Zone.RECOVERY, "Walk recovery"),
            _LONG_WARMUP, _COOLDOWN,
        ),
        adaptation_target="Neuromuscular power, running economy",
        estimated_tss=70, recovery_hours=36,
    ),
    'HILL_REPEATS_6X2': WorkoutTemplate(
        name='HILL_REPEATS_6X2',
        type=WorkoutType.HILL_REPEATS,
        segments=_repeats(
            6,
            _seg(2, 92, Zone.VO2_MAX, "Hill repeat"),
            _seg(3, 50, Zone.RECOVERY, "Jog down"),
            _seg(15, 65, Zone.EASY, "Warm-up to hills"), _COOLDOWN,
        ),
        adaptation_target="Power, strength, VO2max",
        estimated_tss=85, recovery_hours=36,
    ),
    'FARTLEK_VARIED': WorkoutTemplate(
        name='FARTLEK_VARIED',
        type=WorkoutType.FARTLEK,
        segments=(
            _WARMUP,
            _seg(2, 90, Zone.THRESHOLD, "Hard surge"),
            _seg(3, 65, Zone.EASY, "Easy recovery"),
            _seg(1, 95, Zone.VO2_MAX, "Sprint"),
            _seg(4, 65, Zone.EASY, "Easy recovery"),
            _seg(3, 85, Zone.TEMPO, "Tempo surge"),
            _seg(2, 65, Zone.EASY, "Easy recovery"),
            _seg(0.5, 98, Zone.NEUROMUSCULAR, "Sprint"),
            _seg(4.5, 65, Zone.EASY, "Easy recovery"),
            _COOLDOWN,
        ),
        adaptation_target="Speed variation, mental adaptation",
        estimated_tss=65, recovery_hours=24,
    ),
    'PROGRESSION_3_STAGE': WorkoutTemplate(
        name='PROGRESSION_3_STAGE',
        type=WorkoutType.PROGRESSION,
        segments=(
            _seg(20, 65, Zone.EASY, "Easy start"),
            _seg(20, 78, Zone.STEADY, "Steady pace"),
            _seg(20, 85, Zone.TEMPO, "Tempo finish"),
            _seg(5, 60, Zone.RECOVERY, "Cool-down"),
        ),
        adaptation_target="Pacing, fatigue resistance",
        estimated_tss=75, recovery_hours=24,
    ),
}


def templates_for_type(workout_type: WorkoutType) -> List[str]:
    """Template names of a type, in catalog order."""
    return [name for name, t in WORKOUT_TEMPLATES.items() if t.type == workout_type]


def workout_from_template(name: str, workout_id: str, on: date) -> Workout:
    """Instantiate a template as a planned workout."""
    template = WORKOUT_TEMPLATES[name]
    return Workout(
        id=workout_id,
        date=on,
        type=template.type,
        name=template.name,
        segments=template.segments,
        description=template.adaptation_target,
        adaptation_target=template.adaptation_target,
    )
