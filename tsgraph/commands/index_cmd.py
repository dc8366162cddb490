"""
IndexCommand — Index TypeScript files into a JSON-lines entry stream

Loads the requested files (plus the files they import) into a program,
refuses to run if the program has diagnostics, then writes one entry per
line to stdout or --output.
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from ..commands.base import BaseCommand
from ..core import JsonLinesSink, PreflightError, create_program, format_diagnostics, index
from ..config import IndexerConfig
from ..logger_config import get_logger

logger = get_logger(__name__)


class IndexCommand(BaseCommand):
    """Command for running the indexer."""

    def effective_config(
        self,
        root: Optional[str] = None,
        corpus: Optional[str] = None,
        language: Optional[str] = None,
    ) -> IndexerConfig:
        """Loaded index settings with command-line overrides applied."""
        config = self.config.index
        if root is not None:
            config = replace(config, root=Path(root))
        if corpus is not None:
            config = replace(config, corpus=corpus)
        if language is not None:
            config = replace(config, language=language)
        return config

    def run(self, paths: List[str], config: IndexerConfig, output: Optional[str] = None) -> int:
        """
        Index files and write their entries.

        Returns:
            Number of files indexed

        Raises:
            PreflightError: The program has diagnostics; no output is written
        """
        files = [Path(p) for p in paths]
        program = create_program(files)
        logger.info("Loaded %d file(s) into the program", len(program.source_files))

        # Refuse before --output is created, so a failed run leaves no file
        diagnostics = program.diagnostics
        if diagnostics:
            raise PreflightError(format_diagnostics(diagnostics), diagnostics)

        if output:
            with open(output, 'wb') as stream:
                index(files, program, emit=JsonLinesSink(stream), config=config)
        else:
            index(files, program, emit=JsonLinesSink(self.out), config=config)
        return len(files)


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'index'


def register_parser(subparsers):
    """Register index command parser."""
    p = subparsers.add_parser('index', help='Index TypeScript files')
    p.add_argument('paths', nargs='+', metavar='PATH',
                   help='Files to index')
    p.add_argument('--root', metavar='DIR',
                   help='Directory VName paths are relative to (default: config index.root)')
    p.add_argument('--corpus', help='VName corpus (default: config index.corpus)')
    p.add_argument('--language', help='VName language tag (default: config index.language)')
    p.add_argument('--output', '-o', metavar='FILE',
                   help='Write entries to FILE instead of stdout')
    p.add_argument('--log-level', metavar='LEVEL',
                   help='Logging level (default: config logging.level)')
    return p


def handle(cli, args):
    """Handle index command dispatch."""
    command = IndexCommand(cli)
    config = command.effective_config(root=args.root, corpus=args.corpus, language=args.language)
    error = config.validate()
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    command.run(args.paths, config, output=args.output)
    return 0
