from __future__ import annotations

import os
from pathlib import Path
from typing import Self

import msgspec

ENV_PREFIX = "AUTHCHAT_"


class Settings(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    database_path: str = "auth.db"
    echo_sql: bool = False
    poll_interval: float = 2.0
    scrypt_n: int = 2**14

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.database_path}"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Self:
        """
        Build settings from ``AUTHCHAT_*`` environment variables.

        Unset variables keep their defaults. Values are converted with msgspec,
        so ``AUTHCHAT_POLL_INTERVAL=0.5`` becomes a float.
        """
        environ = dict(os.environ) if environ is None else environ

        raw = {
            field: environ[f"{ENV_PREFIX}{field.upper()}"]
            for field in cls.__struct_fields__
            if f"{ENV_PREFIX}{field.upper()}" in environ
        }

        return msgspec.convert(raw, type=cls, strict=False)


def load_settings(path: Path | str) -> Settings:
    path = Path(path)

    if not path.exists():
        msg = f"Settings file {path} does not exist"
        raise FileNotFoundError(msg)

    return msgspec.toml.decode(path.read_bytes(), type=Settings)
