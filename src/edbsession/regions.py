"""Loaded module regions and lookup."""

from dataclasses import dataclass
from typing import Protocol, Iterator


@dataclass(frozen=True)
class Region:
    """A module mapped into the debuggee's address space."""

    name: str
    start: int  # Current load base
    size: int
    base: int = 0  # Preferred base from the module image

    @property
    def end(self) -> int:
        return self.start + self.size

    def contains(self, addr: int) -> bool:
        return self.start <= addr < self.end

    def to_offset(self, addr: int) -> int:
        """Convert an absolute address into a module-relative offset."""
        return addr - self.start + self.base

    def __repr__(self) -> str:
        return f"Region({self.name!r}, {self.start:#x}-{self.end:#x}, base={self.base:#x})"


class RegionResolver(Protocol):
    """Answers where a module currently lives."""

    def find_by_module_name(self, name: str) -> Region | None: ...

    def find_by_address(self, addr: int) -> Region | None: ...


class MemoryRegions:
    """Table of currently loaded modules."""

    def __init__(self, regions: list[Region] | None = None) -> None:
        self._by_name: dict[str, Region] = {}
        for region in regions or []:
            self.add(region)

    def add(self, region: Region) -> None:
        """Add or replace the mapping for a module."""
        self._by_name[region.name] = region

    def remove(self, name: str) -> bool:
        """Forget a module, returns whether it was loaded."""
        return self._by_name.pop(name, None) is not None

    def find_by_module_name(self, name: str) -> Region | None:
        """Look up a module by name."""
        return self._by_name.get(name)

    def find_by_address(self, addr: int) -> Region | None:
        """Find the module containing an address."""
        for region in self._by_name.values():
            if region.contains(addr):
                return region
        return None

    def __iter__(self) -> Iterator[Region]:
        return iter(sorted(self._by_name.values(), key=lambda r: r.start))

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name
