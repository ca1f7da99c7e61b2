from msgspec import Struct


class UserInfo(Struct, kw_only=True, tag=True):
    id: int
    username: str
    email: str
    profile_image: str | None = None
