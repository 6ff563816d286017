"""Tests for path list accumulation."""

from unittest.mock import patch

import pytest

from reg_inspector.paths import RegPath


def _paths(*names):
    return [RegPath.parse(name) for name in names]


class TestAppendPaths:
    """Test append_paths."""

    def test_appends_in_order(self):
        """Test items follow the existing entries unchanged."""
        from reg_inspector.accumulator import append_paths

        original = _paths("A", "B")
        items = _paths("A\\A1", "B\\B1", "B\\B2")
        result = append_paths(original, items)

        assert len(result) == len(original) + len(items)
        assert result[:2] == _paths("A", "B")
        assert result[2:] == items

    def test_argument_list_not_modified(self):
        """Test the consumed list is never mutated."""
        from reg_inspector.accumulator import append_paths

        original = _paths("A")
        append_paths(original, _paths("B"))
        assert original == _paths("A")

    def test_empty_items_returns_same_list(self):
        """Test appending nothing is a no-op returning the same object."""
        from reg_inspector.accumulator import append_paths

        original = _paths("A")
        assert append_paths(original, []) is original
        empty = []
        assert append_paths(empty, []) is empty

    def test_absent_list_with_empty_items(self):
        """Test None passes through when there is nothing to add."""
        from reg_inspector.accumulator import append_paths

        assert append_paths(None, []) is None

    def test_absent_list_propagates(self):
        """Test a failed list stays failed."""
        from reg_inspector.accumulator import append_paths

        assert append_paths(None, _paths("A")) is None

    def test_duplicates_kept(self):
        """Test duplicates are allowed."""
        from reg_inspector.accumulator import append_paths

        assert append_paths(_paths("A"), _paths("A")) == _paths("A", "A")

    def test_allocation_failure(self):
        """Test MemoryError becomes AllocationFailureError and leaves the list intact."""
        from reg_inspector.accumulator import append_paths
        from reg_inspector.exceptions import AllocationFailureError

        original = _paths("A", "B")
        with patch("reg_inspector.accumulator.list", side_effect=MemoryError, create=True):
            with pytest.raises(AllocationFailureError):
                append_paths(original, _paths("C"))
        assert original == _paths("A", "B")
