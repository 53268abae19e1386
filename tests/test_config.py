"""Tests for process-wide configuration."""

import pytest

from reilly.config import (
    debug_context,
    default_max_workers,
    is_debug_enabled,
    set_debug_enabled,
)


class TestDebugMode:
    """Tests for the debug mode toggle."""

    def test_set_debug_enabled(self):
        set_debug_enabled(True)
        assert is_debug_enabled()
        set_debug_enabled(False)
        assert not is_debug_enabled()

    def test_debug_context_restores_previous(self):
        assert not is_debug_enabled()
        with debug_context(True):
            assert is_debug_enabled()
            with debug_context(False):
                assert not is_debug_enabled()
            assert is_debug_enabled()
        assert not is_debug_enabled()


class TestMaxWorkers:
    """Tests for the REILLY_MAX_WORKERS setting."""

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("REILLY_MAX_WORKERS", raising=False)
        assert default_max_workers() is None

    def test_valid(self, monkeypatch):
        monkeypatch.setenv("REILLY_MAX_WORKERS", "3")
        assert default_max_workers() == 3

    @pytest.mark.parametrize("raw", ["0", "-2", "many"])
    def test_invalid(self, monkeypatch, raw):
        monkeypatch.setenv("REILLY_MAX_WORKERS", raw)
        with pytest.raises(ValueError, match="REILLY_MAX_WORKERS"):
            default_max_workers()
