from enum import IntEnum

from msgspec import Struct


class ErrorCode(IntEnum):
    DATABASE = 1
    NOT_INITIALIZED = 2
    DUPLICATE_USER = 3
    INVALID_CREDENTIALS = 4
    VALIDATION = 5
    NOT_LOGGED_IN = 6


class Error(Struct, kw_only=True, tag=True):
    code: ErrorCode
    message: str
