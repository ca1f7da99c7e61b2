from .poller import DEFAULT_POLL_INTERVAL, ConversationPoller, PollerState

__all__ = (
    "DEFAULT_POLL_INTERVAL",
    "ConversationPoller",
    "PollerState",
)
