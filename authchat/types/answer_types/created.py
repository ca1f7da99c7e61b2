from msgspec import Struct


class Created(Struct, kw_only=True, tag=True):
    id: int
