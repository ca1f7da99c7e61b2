from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class DatabaseInitError(Exception):
    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Could not open database at {path}")
        self.path: Path | str = path


class MigrationError(Exception):
    def __init__(self, version: int, name: str) -> None:
        super().__init__(f"Migration {version} ({name}) failed")
        self.version: int = version
        self.name: str = name


class DuplicateUserError(Exception):
    def __init__(self, username: str, email: str) -> None:
        super().__init__("Username or email already exists")
        self.username: str = username
        self.email: str = email


class PollerStateError(Exception):
    def __init__(self, state: str) -> None:
        super().__init__(f"Poller cannot start from state {state}")
        self.state: str = state
