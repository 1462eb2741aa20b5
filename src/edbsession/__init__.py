"""edbsession - Session persistence for an interactive debugger."""

from pathlib import Path

from edbsession.errors import SessionError, SessionErrorKind
from edbsession.regions import Region, MemoryRegions, RegionResolver
from edbsession.plugins import Plugin, PluginRegistry, PluginAlreadyRegisteredError
from edbsession.document import FORMAT_ID, FORMAT_VERSION, SessionDocument
from edbsession.annotations import Annotation, AnnotationKind, AnnotationState
from edbsession.store import SessionStore

__version__ = "0.1.0"
__all__ = [
    "DebugSession",
    "SessionStore",
    "SessionDocument",
    "SessionError",
    "SessionErrorKind",
    "Annotation",
    "AnnotationKind",
    "AnnotationState",
    "Region",
    "RegionResolver",
    "MemoryRegions",
    "Plugin",
    "PluginRegistry",
    "PluginAlreadyRegisteredError",
    "FORMAT_ID",
    "FORMAT_VERSION",
]


class DebugSession:
    """One debugging session of a target, owning its session store.

    The store is created with the session and torn down with it. When a
    session path is given, :meth:`open` loads it and :meth:`close` saves
    back to it.
    """

    def __init__(
        self,
        resolver: RegionResolver,
        plugins: PluginRegistry | None = None,
        session_path: str | Path | None = None,
    ) -> None:
        self.resolver = resolver
        self.plugins = plugins if plugins is not None else PluginRegistry()
        self.session_path = Path(session_path) if session_path else None
        self.store: SessionStore | None = SessionStore(resolver, self.plugins)

    @classmethod
    def open(
        cls,
        resolver: RegionResolver,
        session_path: str | Path,
        plugins: PluginRegistry | None = None,
    ) -> "DebugSession":
        """Start a session and restore its saved state."""
        session = cls(resolver, plugins, session_path)
        session._require_store().load(session_path)
        return session

    def _require_store(self) -> SessionStore:
        if self.store is None:
            raise ValueError("Session is closed")
        return self.store

    def comment(self, address: int, text: str) -> Annotation:
        """Add a comment at a live address."""
        return self._require_store().add(Annotation.comment(address, text))

    def label(self, address: int, text: str) -> Annotation:
        """Add a label at a live address."""
        return self._require_store().add(Annotation.label(address, text))

    def comments(self) -> list[dict]:
        return self._require_store().comments()

    def labels(self) -> list[dict]:
        return self._require_store().labels()

    def save(self) -> bool:
        """Save to the session path, if one was given."""
        if not self.session_path:
            return False
        return self._require_store().save(self.session_path)

    @property
    def closed(self) -> bool:
        return self.store is None

    def close(self) -> None:
        """Save and tear down the store."""
        if self.store is None:
            return
        self.save()
        self.store = None

    def __enter__(self) -> "DebugSession":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def main() -> None:
    """Entry point for CLI."""
    from edbsession.cli import main as cli_main

    cli_main()
