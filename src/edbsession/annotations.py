"""User annotations kept in a debugging session."""

import logging
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Any, TYPE_CHECKING

from edbsession.document import format_address

if TYPE_CHECKING:
    from edbsession.regions import RegionResolver

logger = logging.getLogger(__name__)


class AnnotationKind(IntEnum):
    """Kind of user annotation."""

    COMMENT = auto()  # Free-form comment at address
    LABEL = auto()  # Name given to an address

    @property
    def key(self) -> str:
        """Name of the text field and type tag in a session record."""
        return ANNOTATION_KEYS[self]

    @classmethod
    def from_key(cls, key: str) -> "AnnotationKind | None":
        for kind, name in ANNOTATION_KEYS.items():
            if name == key:
                return kind
        return None


ANNOTATION_KEYS: dict[AnnotationKind, str] = {
    AnnotationKind.COMMENT: "comment",
    AnnotationKind.LABEL: "label",
}


class AnnotationState(IntEnum):
    """Whether the address is still module-relative."""

    PENDING = auto()
    RESTORED = auto()


@dataclass(eq=False)
class Annotation:
    """A comment or label attached to an address.

    While pending, ``address`` is a module-relative offset read from a
    session file. After a successful :meth:`rebase` it is an absolute
    address in the running process. The transition is one-way.
    """

    kind: AnnotationKind
    address: int
    text: str
    module_name: str = ""
    restored: bool = True

    @classmethod
    def comment(cls, address: int, text: str) -> "Annotation":
        """Create a comment at a live absolute address."""
        return cls(AnnotationKind.COMMENT, address, text)

    @classmethod
    def label(cls, address: int, text: str) -> "Annotation":
        """Create a label at a live absolute address."""
        return cls(AnnotationKind.LABEL, address, text)

    @classmethod
    def pending(
        cls, kind: AnnotationKind, offset: int, text: str, module_name: str
    ) -> "Annotation":
        """Create an annotation read from a session file, not yet rebased."""
        return cls(kind, offset, text, module_name=module_name, restored=False)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, AnnotationKind):
            raise ValueError(f"Unknown annotation kind: {self.kind!r}")

    @property
    def type_name(self) -> str:
        return self.kind.key

    @property
    def state(self) -> AnnotationState:
        return AnnotationState.RESTORED if self.restored else AnnotationState.PENDING

    def persist(self) -> dict[str, Any]:
        """Type-specific payload; the store adds address, type and module."""
        return {self.kind.key: self.text}

    def restore_view(self) -> dict[str, Any]:
        """Payload for consumers, with the current address as hex."""
        return {
            self.kind.key: self.text,
            "address": format_address(self.address),
        }

    def rebase(self, resolver: "RegionResolver") -> bool:
        """Anchor a pending offset to its module's current load base.

        Returns True once the annotation is restored. If the module is not
        loaded the annotation stays pending.
        """
        if self.restored:
            return True

        region = resolver.find_by_module_name(self.module_name)
        if region is None:
            logger.debug(
                "Module %r not loaded, deferring %s at offset %#x",
                self.module_name,
                self.kind.key,
                self.address,
            )
            return False

        self.address += region.start
        self.restored = True
        return True

    def __repr__(self) -> str:
        state = "" if self.restored else f", pending in {self.module_name!r}"
        return f"Annotation({self.address:#x}, {self.kind.key}, {self.text!r}{state})"
