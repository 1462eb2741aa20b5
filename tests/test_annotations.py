"""Tests for comment and label annotations."""

import pytest

from edbsession.annotations import Annotation, AnnotationKind, AnnotationState
from edbsession.regions import MemoryRegions, Region


class CountingResolver:
    """Resolver that records lookups."""

    def __init__(self, regions: list[Region]):
        self._regions = {r.name: r for r in regions}
        self.lookups: list[str] = []

    def find_by_module_name(self, name: str) -> Region | None:
        self.lookups.append(name)
        return self._regions.get(name)

    def find_by_address(self, addr: int) -> Region | None:
        for region in self._regions.values():
            if region.contains(addr):
                return region
        return None


class TestAnnotationKind:
    """Tests for AnnotationKind."""

    def test_keys(self):
        """Test each kind maps to its record key."""
        assert AnnotationKind.COMMENT.key == "comment"
        assert AnnotationKind.LABEL.key == "label"

    def test_from_key(self):
        """Test looking up a kind by record key."""
        assert AnnotationKind.from_key("comment") == AnnotationKind.COMMENT
        assert AnnotationKind.from_key("label") == AnnotationKind.LABEL
        assert AnnotationKind.from_key("bookmark") is None


class TestAnnotation:
    """Tests for Annotation."""

    def test_live_comment(self):
        """Test a comment created at a live address is already restored."""
        ann = Annotation.comment(0x401000, "entry")

        assert ann.kind == AnnotationKind.COMMENT
        assert ann.address == 0x401000
        assert ann.text == "entry"
        assert ann.restored is True
        assert ann.state == AnnotationState.RESTORED

    def test_pending(self):
        """Test an annotation read from disk starts pending."""
        ann = Annotation.pending(AnnotationKind.LABEL, 0x1234, "loop", "libc.so.6")

        assert ann.restored is False
        assert ann.state == AnnotationState.PENDING
        assert ann.module_name == "libc.so.6"

    def test_invalid_kind(self):
        """Test constructing with a non-kind raises."""
        with pytest.raises(ValueError):
            Annotation("comment", 0x1000, "x")

    def test_persist_comment(self):
        """Test comment payload uses the comment key only."""
        ann = Annotation.comment(0x1000, "hello")
        assert ann.persist() == {"comment": "hello"}

    def test_persist_label(self):
        """Test label payload uses the label key only."""
        ann = Annotation.label(0x1000, "main_loop")
        assert ann.persist() == {"label": "main_loop"}

    def test_restore_view(self):
        """Test read view includes fixed-width hex address."""
        ann = Annotation.label(0x401000, "start")
        view = ann.restore_view()

        assert view == {"label": "start", "address": "0000000000401000"}

    def test_rebase(self):
        """Test rebase adds the module's load base."""
        regions = MemoryRegions([Region("app", 0x555555554000, 0x10000)])
        ann = Annotation.pending(AnnotationKind.COMMENT, 0x1139, "main", "app")

        assert ann.rebase(regions) is True
        assert ann.address == 0x555555554000 + 0x1139
        assert ann.restored is True

    def test_rebase_module_missing(self):
        """Test rebase defers when the module is not loaded."""
        regions = MemoryRegions()
        ann = Annotation.pending(AnnotationKind.COMMENT, 0x1139, "main", "app")

        assert ann.rebase(regions) is False
        assert ann.address == 0x1139
        assert ann.state == AnnotationState.PENDING

    def test_rebase_idempotent(self):
        """Test rebasing twice does not move the address again."""
        resolver = CountingResolver([Region("app", 0x400000, 0x1000)])
        ann = Annotation.pending(AnnotationKind.COMMENT, 0x10, "x", "app")

        ann.rebase(resolver)
        ann.rebase(resolver)

        assert ann.address == 0x400010
        assert resolver.lookups == ["app"]

    def test_rebase_live_is_noop(self):
        """Test a live annotation never queries the resolver."""
        resolver = CountingResolver([Region("app", 0x400000, 0x1000)])
        ann = Annotation.comment(0x400010, "x")

        ann.rebase(resolver)

        assert ann.address == 0x400010
        assert resolver.lookups == []

    def test_rebase_after_module_loads(self):
        """Test a deferred annotation restores once the module appears."""
        regions = MemoryRegions()
        ann = Annotation.pending(AnnotationKind.LABEL, 0x20, "x", "late.so")

        ann.rebase(regions)
        regions.add(Region("late.so", 0x7000000, 0x1000))
        ann.rebase(regions)

        assert ann.restored is True
        assert ann.address == 0x7000020

    def test_repr(self):
        """Test string representation."""
        assert repr(Annotation.comment(0x10, "hi")) == "Annotation(0x10, comment, 'hi')"
