"""Tests for the package's public surface."""

import importlib

import pytest

MODULES = [
    'autosave', 'cancellation', 'client', 'config', 'constants', 'draft', 'errors',
    'formation', 'ledger', 'lifecycle', 'logging_config', 'models', 'observable',
    'reports', 'roster', 'rules', 'schemas', 'timeline', 'utils', 'validators',
]


class TestImports:
    """Tests that every module imports cleanly."""

    @pytest.mark.parametrize('name', MODULES)
    def test_module_imports(self, name):
        importlib.import_module(f'gameday.{name}')

    def test_exports_resolve(self):
        """Test every name in __all__ exists on the package."""
        gameday = importlib.import_module('gameday')
        missing = [name for name in gameday.__all__ if not hasattr(gameday, name)]
        assert missing == []
