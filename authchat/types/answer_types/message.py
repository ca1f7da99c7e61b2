from datetime import datetime

from msgspec import Struct


class ChatMessage(Struct, kw_only=True, tag=True):
    id: int
    sender_id: int
    receiver_id: int
    message: str
    created_at: datetime
    is_read: bool
    reaction: str | None
    sender_username: str
