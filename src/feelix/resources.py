from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from feelix.errors import InvalidInputError, NotFoundError

ALL = "all"


class ResourceType(str, Enum):
    VIDEO = "video"
    ACTIVITY = "activity"


@dataclass(frozen=True)
class Resource:
    id: str
    title: str
    type: ResourceType
    moods: tuple[str, ...]
    description: str
    duration: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Resource":
        """Build a resource from a backend ``resources`` row."""
        return cls(
            id=str(row["id"]),
            title=str(row["title"]),
            type=ResourceType(str(row["type"]).lower()),
            moods=tuple(row.get("mood_tags") or ()),
            description=str(row.get("description") or ""),
            duration=row.get("duration"),
        )


RESOURCE_MOOD_FILTERS: tuple[str, ...] = (
    ALL,
    "anxious",
    "sad",
    "angry",
    "tired",
    "lonely",
    "confused",
    "overwhelmed",
)

RESOURCE_TYPE_FILTERS: tuple[str, ...] = (ALL, ResourceType.VIDEO.value, ResourceType.ACTIVITY.value)

DEFAULT_RESOURCES: tuple[Resource, ...] = (
    Resource(
        id="1",
        title="Guided Breathing for Anxiety",
        type=ResourceType.VIDEO,
        moods=("anxious", "stressed"),
        duration="10 min",
        description="A calming breathing exercise to help you find peace and reduce anxiety.",
    ),
    Resource(
        id="2",
        title="Gratitude Journaling",
        type=ResourceType.ACTIVITY,
        moods=("sad", "overwhelmed"),
        description="Write down three things you're grateful for today to shift your perspective.",
    ),
    Resource(
        id="3",
        title="Body Scan Meditation",
        type=ResourceType.VIDEO,
        moods=("tired", "tense"),
        duration="15 min",
        description="Release tension and connect with your body through mindful awareness.",
    ),
    Resource(
        id="4",
        title="Creative Expression",
        type=ResourceType.ACTIVITY,
        moods=("confused", "frustrated"),
        description="Draw, paint, or create something to express what you're feeling.",
    ),
    Resource(
        id="5",
        title="Loving Kindness Meditation",
        type=ResourceType.VIDEO,
        moods=("lonely", "angry"),
        duration="12 min",
        description="Cultivate compassion for yourself and others through this gentle practice.",
    ),
    Resource(
        id="6",
        title="Nature Connection",
        type=ResourceType.ACTIVITY,
        moods=("disconnected", "numb"),
        description="Step outside and spend time in nature to ground yourself.",
    ),
)


def filter_resources(
    resources: Iterable[Resource] = DEFAULT_RESOURCES,
    *,
    mood: str = ALL,
    resource_type: str = ALL,
) -> list[Resource]:
    mood = mood.strip().lower() or ALL
    resource_type = resource_type.strip().lower() or ALL
    if resource_type not in RESOURCE_TYPE_FILTERS:
        raise InvalidInputError(
            f"Unknown resource type: {resource_type!r}. Supported: {', '.join(RESOURCE_TYPE_FILTERS)}"
        )

    results: list[Resource] = []
    for resource in resources:
        mood_match = mood == ALL or mood in resource.moods
        type_match = resource_type == ALL or resource.type.value == resource_type
        if mood_match and type_match:
            results.append(resource)
    return results


def find_resource(resource_id: str, resources: Iterable[Resource] = DEFAULT_RESOURCES) -> Resource:
    for resource in resources:
        if resource.id == resource_id:
            return resource
    raise NotFoundError(f"Resource not found: {resource_id!r}")
