from .messages import MessageModel
from .users import UserModel

__all__ = (
    "MessageModel",
    "UserModel",
)
