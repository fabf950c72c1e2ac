from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from feelix.errors import NotFoundError


class BreathingPattern(str, Enum):
    BOX = "box"
    FOUR_SEVEN_EIGHT = "4-7-8"
    EQUAL_FOUR = "4-4-4-4"


@dataclass(frozen=True)
class BreathingExercise:
    id: str
    name: str
    description: str
    duration_seconds: int
    pattern: BreathingPattern


_CATALOG: tuple[BreathingExercise, ...] = (
    BreathingExercise(
        id="1",
        name="Box Breathing",
        description="Inhale for 4, hold for 4, exhale for 4, hold for 4",
        duration_seconds=120,
        pattern=BreathingPattern.BOX,
    ),
    BreathingExercise(
        id="2",
        name="4-7-8 Technique",
        description="Inhale for 4, hold for 7, exhale for 8",
        duration_seconds=90,
        pattern=BreathingPattern.FOUR_SEVEN_EIGHT,
    ),
    BreathingExercise(
        id="3",
        name="Equal Breathing",
        description="Equal inhale and exhale for 4 counts each",
        duration_seconds=60,
        pattern=BreathingPattern.EQUAL_FOUR,
    ),
)


def list_exercises() -> tuple[BreathingExercise, ...]:
    return _CATALOG


def find_exercise(
    exercise_id: str, exercises: tuple[BreathingExercise, ...] = _CATALOG
) -> BreathingExercise:
    key = str(exercise_id).strip()
    for exercise in exercises:
        if exercise.id == key:
            return exercise
    raise NotFoundError(f"Breathing exercise not found: {exercise_id!r}")


def introduction_text(exercise: BreathingExercise) -> str:
    return (
        f"Let's start {exercise.name}. {exercise.description}. "
        "I'll guide you through it step by step."
    )
