"""Debugger plugins whose state is kept in the session file.

The session store never interprets plugin state; it hands each plugin
back whatever that plugin returned from ``save_state()`` last time.
"""

import logging
from typing import Any, Iterator, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Plugin(Protocol):
    """A plugin that can persist state across sessions."""

    def identifier(self) -> str: ...

    def save_state(self) -> Any: ...

    def restore_state(self, state: Any) -> None: ...


class PluginAlreadyRegisteredError(ValueError):
    """Raised when two plugins share an identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Plugin {identifier!r} is already registered")


class PluginRegistry:
    """Ordered set of live plugins keyed by identifier."""

    def __init__(self, plugins: list[Plugin] | None = None) -> None:
        self._plugins: dict[str, Plugin] = {}
        for plugin in plugins or []:
            self.register(plugin)

    def register(self, plugin: Plugin) -> Plugin:
        """Add a plugin, returns it unchanged."""
        if not isinstance(plugin, Plugin):
            raise TypeError(f"{type(plugin).__name__} does not implement Plugin")
        identifier = plugin.identifier()
        if identifier in self._plugins:
            raise PluginAlreadyRegisteredError(identifier)
        self._plugins[identifier] = plugin
        logger.debug("Registered plugin %r", identifier)
        return plugin

    def unregister(self, identifier: str) -> bool:
        """Remove a plugin, returns whether it was registered."""
        return self._plugins.pop(identifier, None) is not None

    def get(self, identifier: str) -> Plugin | None:
        return self._plugins.get(identifier)

    def identifiers(self) -> list[str]:
        return list(self._plugins)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._plugins
