"""
Configuration — Layered settings for the indexer

Config layers (later wins):
  1. Defaults
  2. User config (~/.tsgraph/config.yaml)
  3. Project config (.tsgraph/config.yaml)
  4. Environment variables (TSGRAPH_ROOT, TSGRAPH_CORPUS,
     TSGRAPH_LANGUAGE, TSGRAPH_LOG_LEVEL)

Command-line flags override the loaded values for a single run.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .logger_config import DEFAULT_LOG_LEVEL, LEVELS, get_logger

logger = get_logger(__name__)


# Placeholder until a real corpus is configured
DEFAULT_CORPUS = "default"
DEFAULT_LANGUAGE = "typescript"

SUPPORTED_LANGUAGES = ("typescript",)

ENV_OVERRIDES = {
    "TSGRAPH_ROOT": ("index", "root"),
    "TSGRAPH_CORPUS": ("index", "corpus"),
    "TSGRAPH_LANGUAGE": ("index", "language"),
    "TSGRAPH_LOG_LEVEL": ("logging", "level"),
}


@dataclass
class IndexerConfig:
    """VName settings for an indexing run."""
    root: Path = field(default_factory=Path.cwd)
    language: str = DEFAULT_LANGUAGE
    corpus: str = DEFAULT_CORPUS
    vname_root: str = ""

    def __post_init__(self):
        self.root = Path(self.root).resolve()

    def relative_path(self, path) -> str:
        """Path of a file relative to the root, with forward slashes."""
        return Path(os.path.relpath(Path(path).resolve(), self.root)).as_posix()

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.language not in SUPPORTED_LANGUAGES:
            return f"Unknown language '{self.language}'. Valid: {', '.join(SUPPORTED_LANGUAGES)}"
        if not self.corpus:
            return "Corpus must not be empty"
        return None


@dataclass
class LoggingConfig:
    """Logging preferences."""
    level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.level.upper() not in LEVELS:
            return f"Unknown log level '{self.level}'. Valid: {', '.join(LEVELS)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    index: IndexerConfig = field(default_factory=IndexerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "index": {
                "root": str(self.index.root),
                "language": self.index.language,
                "corpus": self.index.corpus,
                "vname_root": self.index.vname_root,
            },
            "logging": {
                "level": self.logging.level,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> 'Config':
        """
        Create from dictionary.

        A relative `index.root` is taken relative to base_dir (the project
        directory), not the process working directory.
        """
        index_data = data.get("index") or {}
        logging_data = data.get("logging") or {}
        base_dir = Path(base_dir) if base_dir else Path.cwd()

        root = Path(index_data.get("root") or ".")
        if not root.is_absolute():
            root = base_dir / root

        return cls(
            index=IndexerConfig(
                root=root,
                language=index_data.get("language", DEFAULT_LANGUAGE),
                corpus=index_data.get("corpus", DEFAULT_CORPUS),
                vname_root=index_data.get("vname_root", "") or "",
            ),
            logging=LoggingConfig(
                level=logging_data.get("level", DEFAULT_LOG_LEVEL),
            ),
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy (later wins):
      1. Defaults
      2. User config (~/.tsgraph/config.yaml)
      3. Project config (.tsgraph/config.yaml)
      4. Environment
    """

    USER_CONFIG_DIR = Path.home() / ".tsgraph"
    USER_CONFIG_FILE = "config.yaml"
    PROJECT_CONFIG_DIR = ".tsgraph"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_dir = Path(user_dir) if user_dir else self.USER_CONFIG_DIR
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_dir / self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read(self.project_config_path))

        # Layer 3: Environment overrides
        for env_key, (section, setting) in ENV_OVERRIDES.items():
            if os.environ.get(env_key):
                config_data.setdefault(section, {})[setting] = os.environ[env_key]

        self._config = Config.from_dict(config_data, base_dir=self.project_dir)
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "index.corpus")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'index.corpus')"

        section, setting = parts

        if section == "index":
            if setting == "root":
                config.index.root = (self.project_dir / value).resolve()
            elif setting == "language":
                config.index.language = value
            elif setting == "corpus":
                config.index.corpus = value
            elif setting == "vname_root":
                config.index.vname_root = value
            else:
                return f"Unknown index setting: {setting}. Valid: root, language, corpus, vname_root"
            error = config.index.validate()
            if error:
                return error

        elif section == "logging":
            if setting == "level":
                config.logging.level = value.upper()
            else:
                return f"Unknown logging setting: {setting}. Valid: level"
            error = config.logging.validate()
            if error:
                return error
        else:
            return f"Unknown section: {section}. Valid: index, logging"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts

        if section == "index":
            if setting == "root":
                return str(config.index.root)
            elif setting == "language":
                return config.index.language
            elif setting == "corpus":
                return config.index.corpus
            elif setting == "vname_root":
                return config.index.vname_root
        elif section == "logging":
            if setting == "level":
                return config.logging.level

        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        lines = [
            "Configuration:",
            "",
            "Index:",
            f"  Root: {config.index.root}",
            f"  Language: {config.index.language}",
            f"  Corpus: {config.index.corpus}",
            f"  VName root: {config.index.vname_root or '(empty)'}",
            "",
            "Logging:",
            f"  Level: {config.logging.level}",
            "",
            "Config files:",
            f"  Project: {self.project_config_path}",
            f"  User: {self.user_config_path}",
        ]
        return "\n".join(lines)
