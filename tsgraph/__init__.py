"""
tsgraph — Semantic graph indexer for TypeScript

Turns a checked TypeScript program into a deterministic stream of
Kythe-style entries: declarations, references and scoping relationships as
facts and edges over VNames.

Usage:
    tsgraph index src/main.ts --root . > entries.jsonl
    tsgraph config
    tsgraph config --set index.corpus=example.com/repo
"""

__version__ = "0.1.0"

# Core layer
from .core import (
    VName, Namespace, TYPE_SUFFIX,
    TsGraphError, ProgramLoadError, PreflightError, InternalConsistencyError,
    Program, SourceFile, create_program,
    GraphEmitter, ListSink, JsonLinesSink,
    Visitor, index,
)

# Config (stays at root)
from .config import Config, ConfigManager, IndexerConfig, LoggingConfig

__all__ = [
    # Core
    'VName', 'Namespace', 'TYPE_SUFFIX',
    'TsGraphError', 'ProgramLoadError', 'PreflightError', 'InternalConsistencyError',
    'Program', 'SourceFile', 'create_program',
    'GraphEmitter', 'ListSink', 'JsonLinesSink',
    'Visitor', 'index',
    # Config
    'Config', 'ConfigManager', 'IndexerConfig', 'LoggingConfig',
]
