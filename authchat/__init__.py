from .config import Settings, load_settings
from .session import AppSession
from .store import REACTION_EMOJIS, ChatStore
from .sync import ConversationPoller, PollerState

__all__ = (
    "REACTION_EMOJIS",
    "AppSession",
    "ChatStore",
    "ConversationPoller",
    "PollerState",
    "Settings",
    "load_settings",
)
