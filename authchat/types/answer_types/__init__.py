from .created import Created
from .error import Error, ErrorCode
from .message import ChatMessage
from .ok import OK
from .user import UserInfo

type Result = OK | Error

__all__ = (
    "OK",
    "ChatMessage",
    "Created",
    "Error",
    "ErrorCode",
    "Result",
    "UserInfo",
)
