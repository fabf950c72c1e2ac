from __future__ import annotations

DEFAULT_EMOJI = "😊"
DEFAULT_DESCRIPTION = "Feeling good"

MOOD_EMOJI: dict[str, str] = {
    "happy": "😊",
    "calm": "😌",
    "anxious": "😰",
    "sad": "😢",
    "excited": "🤩",
    "tired": "😴",
    "angry": "😠",
    "grateful": "🙏",
    "lonely": "😔",
    "confused": "😕",
    "overwhelmed": "😵",
}

MOOD_DESCRIPTIONS: dict[str, str] = {
    "happy": "Feeling joyful and positive",
    "calm": "Peaceful and centered",
    "anxious": "Feeling worried or nervous",
    "sad": "Experiencing sadness",
    "excited": "Full of energy and anticipation",
    "tired": "Feeling low energy",
    "angry": "Feeling frustrated or mad",
    "grateful": "Appreciative and thankful",
}


def mood_emoji(mood: str) -> str:
    return MOOD_EMOJI.get(mood.strip().lower(), DEFAULT_EMOJI)


def mood_description(mood: str) -> str:
    return MOOD_DESCRIPTIONS.get(mood.strip().lower(), DEFAULT_DESCRIPTION)


def display_mood(mood: str) -> str:
    """Render a mood as ``"<emoji> <Capitalized>"``, or ``"All"`` for the catch-all filter."""
    if mood == "all":
        return "All"
    return f"{mood_emoji(mood)} {mood[:1].upper()}{mood[1:]}"
