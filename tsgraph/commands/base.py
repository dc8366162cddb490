"""
BaseCommand — Shared foundation for all CLI commands

Commands receive the CLI instance and access its resources through
properties instead of reloading them.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..cli import TsGraphCLI


class BaseCommand:
    """Base class for CLI commands with access to shared resources."""

    def __init__(self, cli: 'TsGraphCLI'):
        self._cli = cli

    @property
    def project_dir(self):
        """Project root directory."""
        return self._cli.project_dir

    @property
    def config(self):
        """Loaded application configuration."""
        return self._cli.config

    @property
    def config_manager(self):
        """Layered config loader/writer."""
        return self._cli.config_manager

    @property
    def out(self):
        """Stream for command output (stdout unless redirected)."""
        return self._cli.out
