"""Session load errors."""

from enum import IntEnum, auto


class SessionErrorKind(IntEnum):
    """Why a session file was rejected."""

    INVALID_SESSION_FILE = auto()  # Unreadable file, bad id or version
    UNKNOWN_ERROR = auto()  # Malformed JSON
    NOT_AN_OBJECT = auto()  # Root is not a JSON object


class SessionError(Exception):
    """Raised when a session file cannot be loaded.

    The whole document is rejected; nothing from it is applied.
    """

    def __init__(self, kind: SessionErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"SessionError({self.kind.name.lower()}, {self.message!r})"
