from dataclasses import dataclass, field

from feelix.auth import AuthSession
from feelix.backend.local_store import ConversationStore
from feelix.conversation import ConversationSink
from feelix.resources import DEFAULT_RESOURCES, Resource


@dataclass
class CompanionConfig:
    reply_delay_seconds: float = 1.5
    show_typing: bool = False
    sink: ConversationSink | None = None
    store: ConversationStore | None = None
    user_id: str = "local"
    auth: AuthSession | None = None
    resources: tuple[Resource, ...] = field(default_factory=lambda: DEFAULT_RESOURCES)
