"""Session persistence: annotations and plugin state in a JSON file."""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from edbsession.annotations import Annotation, AnnotationKind
from edbsession.document import (
    FORMAT_VERSION,
    SessionDocument,
    format_address,
    parse_address,
)
from edbsession.errors import SessionError, SessionErrorKind
from edbsession.plugins import PluginRegistry
from edbsession.regions import RegionResolver

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _is_empty(state: Any) -> bool:
    if state is None:
        return True
    if isinstance(state, (dict, list, tuple, str)):
        return len(state) == 0
    return False


class SessionStore:
    """Owns the live annotations of one debugging session.

    Annotations loaded from a file keep module-relative addresses until
    they are read through :meth:`comments` or :meth:`labels`, which rebase
    them against the resolver. Saving writes every annotation and then
    empties the collection.
    """

    def __init__(
        self,
        resolver: RegionResolver,
        plugins: PluginRegistry | None = None,
        *,
        version: int = FORMAT_VERSION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._resolver = resolver
        self._plugins = plugins if plugins is not None else PluginRegistry()
        self._version = version
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._objects: list[Annotation] = []
        self._document: SessionDocument | None = None

    @property
    def document(self) -> SessionDocument | None:
        """The last successfully loaded document, if any."""
        return self._document

    @property
    def plugins(self) -> PluginRegistry:
        return self._plugins

    # Loading

    def load(self, path: Path | str) -> None:
        """Load a session file.

        A missing file is not an error: nothing has been saved for this
        target yet. Raises SessionError if the file exists but cannot be
        read or is not a valid session document.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No session file at %s", path)
            return
        except (OSError, UnicodeDecodeError) as e:
            raise SessionError(
                SessionErrorKind.INVALID_SESSION_FILE,
                f"Failed to open session file. {e}",
            ) from e

        document = SessionDocument.from_json(text, self._version)

        logger.debug("Loading session file %s", path)
        self._document = document
        self._load_plugin_data(document.plugin_data)
        self._load_objects(document.objects)

    def _load_plugin_data(self, plugin_data: dict[str, Any]) -> None:
        logger.debug("Loading plugin-data")
        for identifier, state in plugin_data.items():
            plugin = self._plugins.get(identifier)
            if plugin is None:
                logger.debug("No plugin %r for saved state, skipping", identifier)
                continue
            plugin.restore_state(state)

    def _load_objects(self, objects: dict[str, Any]) -> None:
        for key, record in objects.items():
            annotation = self._parse_object(key, record)
            if annotation is not None:
                self.add(annotation)

    def _parse_object(self, key: str, record: Any) -> Annotation | None:
        try:
            offset = parse_address(key)
        except ValueError:
            logger.warning("Invalid session object address %r, skipping", key)
            return None

        if not isinstance(record, dict):
            logger.warning("Session object at %s is not an object, skipping", key)
            return None

        kind = AnnotationKind.from_key(str(record.get("type", "")))
        if kind is None:
            logger.warning(
                "Unknown session object type %r at %s, skipping",
                record.get("type"),
                key,
            )
            return None

        return Annotation.pending(
            kind,
            offset,
            _as_text(record.get(kind.key)),
            _as_text(record.get("module")),
        )

    # Saving

    def save(self, path: Path | str) -> bool:
        """Write the session file and clear the live annotations.

        Returns False if the file could not be written. The collection is
        cleared either way; load again to repopulate it.
        """
        logger.debug("Saving session file %s", path)

        document = SessionDocument.new(self._version, self._clock())
        document.plugin_data = self._collect_plugin_data()
        for annotation in self._objects:
            entry = self._persist_object(annotation)
            if entry is None:
                continue
            key, record = entry
            if key in document.objects:
                # One record per address; the first annotation wins
                logger.warning(
                    "%r shares offset %s with a saved %s, not saved",
                    annotation,
                    key,
                    document.objects[key]["type"],
                )
                continue
            document.objects[key] = record

        try:
            Path(path).write_text(document.to_json(), encoding="utf-8")
            written = True
        except OSError as e:
            logger.error("Failed to write session file %s: %s", path, e)
            written = False

        self._objects.clear()
        return written

    def _collect_plugin_data(self) -> dict[str, Any]:
        """Gather state from live plugins.

        State loaded for plugins that are not registered this run is kept
        as is, so a session opened without a plugin does not lose its data.
        """
        plugin_data: dict[str, Any] = {}

        if self._document is not None:
            for identifier, state in self._document.plugin_data.items():
                if identifier not in self._plugins:
                    plugin_data[identifier] = state

        for plugin in self._plugins:
            state = plugin.save_state()
            if not _is_empty(state):
                plugin_data[plugin.identifier()] = state

        return plugin_data

    def _persist_object(self, annotation: Annotation) -> tuple[str, dict[str, Any]] | None:
        if annotation.restored:
            region = self._resolver.find_by_address(annotation.address)
            if region is None and annotation.module_name:
                region = self._resolver.find_by_module_name(annotation.module_name)
            if region is None:
                logger.warning("No module contains %r, not saved", annotation)
                return None
            offset = region.to_offset(annotation.address)
            if offset < 0:
                logger.warning(
                    "%r lies below module %r, not saved", annotation, region.name
                )
                return None
            module = region.name
        else:
            # Never rebased: address is still the offset read from disk
            offset = annotation.address
            module = annotation.module_name

        record = annotation.persist()
        record["type"] = annotation.type_name
        record["module"] = module
        return format_address(offset), record

    # Queries

    def comments(self) -> list[dict[str, Any]]:
        """Views of all comments, rebasing any that are still pending."""
        return self._views(AnnotationKind.COMMENT)

    def labels(self) -> list[dict[str, Any]]:
        """Views of all labels, rebasing any that are still pending."""
        return self._views(AnnotationKind.LABEL)

    def _views(self, kind: AnnotationKind) -> list[dict[str, Any]]:
        views = []
        for annotation in self._objects:
            if annotation.kind == kind:
                annotation.rebase(self._resolver)
                views.append(annotation.restore_view())
        return views

    def pending(self) -> list[Annotation]:
        """Annotations whose module has not been seen yet."""
        return [a for a in self._objects if not a.restored]

    # Collection

    def add(self, annotation: Annotation) -> Annotation:
        """Add an annotation to the live session."""
        self._objects.append(annotation)
        return annotation

    def remove(self, annotation: Annotation) -> bool:
        """Remove an annotation, returns whether it was present."""
        for i, existing in enumerate(self._objects):
            if existing is annotation:
                del self._objects[i]
                return True
        return False

    def clear(self) -> None:
        self._objects.clear()

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)
