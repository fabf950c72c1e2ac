from feelix.backend.local_store import ConversationStore, LocalStore
from feelix.backend.sink import AsyncConversationSink
from feelix.backend.supabase_client import SupabaseClient

__all__ = [
    "AsyncConversationSink",
    "ConversationStore",
    "LocalStore",
    "SupabaseClient",
]
