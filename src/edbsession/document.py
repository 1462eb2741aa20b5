"""On-disk session document format.

A session file is a JSON object::

    {
        "id": "edb-session",
        "version": 1,
        "timestamp": "2024-01-01T00:00:00+00:00",
        "plugin-data": {"<plugin id>": <opaque>},
        "objects": {
            "<hex offset>": {"type": "comment", "comment": "...", "module": "..."}
        }
    }

Object keys are module-relative offsets; the record body does not repeat
the address.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from edbsession.errors import SessionError, SessionErrorKind

FORMAT_ID = "edb-session"
FORMAT_VERSION = 1

# Hex digits used when rendering addresses (64-bit)
ADDRESS_WIDTH = 16


def format_address(addr: int) -> str:
    """Render an address as fixed-width lowercase hex without prefix."""
    return f"{addr:0{ADDRESS_WIDTH}x}"


def parse_address(text: str) -> int:
    """Parse a hex address key, with or without a 0x prefix."""
    value = int(text, 16)
    if value < 0:
        raise ValueError(f"Negative address: {text!r}")
    return value


@dataclass
class SessionDocument:
    """Parsed contents of a session file."""

    version: int = FORMAT_VERSION
    timestamp: str = ""
    plugin_data: dict[str, Any] = field(default_factory=dict)
    objects: dict[str, dict[str, Any]] = field(default_factory=dict)
    format_id: str = FORMAT_ID

    @classmethod
    def new(
        cls, version: int = FORMAT_VERSION, now: datetime | None = None
    ) -> "SessionDocument":
        """Create an empty document stamped with the current time."""
        stamp = now or datetime.now(timezone.utc)
        return cls(version=version, timestamp=stamp.isoformat())

    @property
    def parsed_timestamp(self) -> datetime | None:
        try:
            return datetime.fromisoformat(self.timestamp)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.format_id,
            "version": self.version,
            "timestamp": self.timestamp,
            "plugin-data": self.plugin_data,
            "objects": self.objects,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=4) + "\n"

    @classmethod
    def from_json(
        cls, text: str, supported_version: int = FORMAT_VERSION
    ) -> "SessionDocument":
        """Parse and validate a session file's contents.

        Raises SessionError if the text is not JSON, the root is not an
        object, or the id, version or section shapes are wrong.
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            raise SessionError(
                SessionErrorKind.UNKNOWN_ERROR,
                f"An error occurred while loading session JSON file. {e}",
            ) from e

        if not isinstance(data, dict):
            raise SessionError(
                SessionErrorKind.NOT_AN_OBJECT,
                "Session file is invalid. Not an object.",
            )

        return cls.from_dict(data, supported_version)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], supported_version: int = FORMAT_VERSION
    ) -> "SessionDocument":
        format_id = data.get("id")
        version = data.get("version", 0)
        plugin_data = data.get("plugin-data")
        objects = data.get("objects")

        # null sections are empty; anything else must be an object
        if plugin_data is None:
            plugin_data = {}
        if objects is None:
            objects = {}

        # Whole-number floats such as 1.0 are read as integers
        if isinstance(version, float) and version.is_integer():
            version = int(version)

        # bool is an int subclass but never a valid version
        valid = (
            format_id == FORMAT_ID
            and isinstance(version, int)
            and not isinstance(version, bool)
            and version <= supported_version
            and isinstance(plugin_data, dict)
            and isinstance(objects, dict)
        )
        if not valid:
            raise SessionError(
                SessionErrorKind.INVALID_SESSION_FILE, "Session file is invalid."
            )

        timestamp = data.get("timestamp", "")
        return cls(
            version=version,
            timestamp=timestamp if isinstance(timestamp, str) else str(timestamp),
            plugin_data=plugin_data,
            objects=objects,
            format_id=format_id,
        )
