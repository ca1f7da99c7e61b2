from msgspec import Struct

from authchat.types.answer_types.created import Created
from authchat.types.answer_types.user import UserInfo


class OK(Struct, kw_only=True, tag=True):
    data: None | Created | UserInfo = None
