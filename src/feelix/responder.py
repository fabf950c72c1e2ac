from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ResponseRule:
    triggers: tuple[str, ...]
    reply: str
    reveals_exercise_menu: bool = False

    def matches(self, normalized_text: str) -> bool:
        return any(trigger in normalized_text for trigger in self.triggers)


@dataclass(frozen=True)
class Reply:
    text: str
    reveals_exercise_menu: bool = False


DEFAULT_REPLY = (
    "Thank you for sharing that with me. I'm here to listen and support you. "
    "What would feel most helpful right now - talking more about how you're feeling, "
    "or trying a calming exercise?"
)

# First match wins; the order below is the tie-break between overlapping triggers.
RESPONSE_RULES: tuple[ResponseRule, ...] = (
    ResponseRule(
        triggers=("anxious", "worried"),
        reply=(
            "I hear that you're feeling anxious. That's completely valid. "
            "Would you like to try a breathing exercise together? "
            "It can help calm your nervous system."
        ),
    ),
    ResponseRule(
        triggers=("sad", "down"),
        reply=(
            "I'm sorry you're feeling sad right now. Sadness is a natural emotion, "
            "and it's okay to feel it. Would you like to talk about what's on your mind, "
            "or would you prefer to try a gentle activity?"
        ),
    ),
    ResponseRule(
        triggers=("angry", "frustrated"),
        reply=(
            "Anger can be intense to experience. Let's take a moment to breathe together "
            "and then explore what might be underneath this feeling."
        ),
    ),
    ResponseRule(
        triggers=("tired", "exhausted"),
        reply=(
            "It sounds like you're feeling drained. Rest is important for emotional "
            "well-being. Would you like to try a gentle breathing exercise or meditation?"
        ),
    ),
    ResponseRule(
        triggers=("breathing", "breathe"),
        reply=(
            "Great idea! Breathing exercises can be incredibly helpful. "
            "Let me show you some options to choose from."
        ),
        reveals_exercise_menu=True,
    ),
    ResponseRule(
        triggers=("thank",),
        reply=(
            "You're very welcome! I'm here whenever you need support. "
            "Remember, it's okay to feel your feelings fully."
        ),
    ),
)


def select_response(user_text: str, rules: tuple[ResponseRule, ...] = RESPONSE_RULES) -> Reply:
    """Pick the companion reply for ``user_text``.

    The text is lower-cased and the rules are tried in order; the first rule
    with a trigger contained in the text wins. Anything else, including an
    empty string, gets the default reply.
    """
    normalized = (user_text or "").lower()
    for rule in rules:
        if rule.matches(normalized):
            return Reply(text=rule.reply, reveals_exercise_menu=rule.reveals_exercise_menu)
    return Reply(text=DEFAULT_REPLY)
