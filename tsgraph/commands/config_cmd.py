"""
ConfigCommand — Display and update configuration

    tsgraph config                          show effective settings
    tsgraph config --set index.corpus=foo   write to project config
    tsgraph config --set KEY=VALUE --user   write to user config
"""

import sys

from ..commands.base import BaseCommand


class ConfigCommand(BaseCommand):
    """Command for configuration management."""

    def show_config(self) -> int:
        """Show current configuration."""
        print(self.config_manager.display(), file=self.out)
        return 0

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        """Set a configuration value."""
        error = self.config_manager.set(key, value, scope)
        if error:
            print(f"Error: {error}", file=sys.stderr)
            return 1

        if scope == "project":
            path = self.config_manager.project_config_path
        else:
            path = self.config_manager.user_config_path
        print(f"Set {key} = {value}", file=self.out)
        print(f"Saved to {path}", file=self.out)
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'config'


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set config value (e.g., index.corpus=example.com/repo)')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    command = ConfigCommand(cli)
    if args.set:
        if '=' not in args.set:
            print("Error: Use format KEY=VALUE (e.g., index.corpus=example.com/repo)",
                  file=sys.stderr)
            return 1
        key, value = args.set.split('=', 1)
        scope = "user" if args.user else "project"
        return command.set_config(key, value, scope)
    return command.show_config()
