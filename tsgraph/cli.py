"""
CLI -- Command interface

Entries go to stdout (or --output); logs and errors go to stderr, so the
entry stream can be piped straight into a graph store.

Exit codes:
    0  success
    1  indexing or configuration error
    2  usage error (argparse)
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigManager
from .core.errors import TsGraphError
from .logger_config import get_logger, setup_logging
from . import __version__

logger = get_logger(__name__)


class TsGraphCLI:
    """Shared resources for command handlers."""

    def __init__(self, project_dir: Path, out=None):
        self.project_dir = Path(project_dir)
        self.config_manager = ConfigManager(self.project_dir)
        self.config = self.config_manager.load()
        self.out = out if out is not None else sys.stdout


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the tsgraph CLI.

    Uses the command registry pattern: parser definitions and dispatch
    logic live in the individual command modules.
    """
    parser = argparse.ArgumentParser(
        prog='tsgraph',
        description="tsgraph -- Semantic graph indexer for TypeScript",
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("TSGRAPH_PROJECT_PATH", "."),
        help='Project directory holding .tsgraph/ (default: TSGRAPH_PROJECT_PATH or current)'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'tsgraph {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    from .commands import register_all, dispatch
    register_all(subparsers)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    cli = TsGraphCLI(Path(args.project))
    setup_logging(level=getattr(args, 'log_level', None) or cli.config.logging.level)

    try:
        return dispatch(args.command, cli, args) or 0
    except TsGraphError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
