"""
Tests for the layered configuration.

Layers (later wins): defaults, user file, project file, environment.
"""

from pathlib import Path

import pytest
import yaml

from tsgraph.config import (
    DEFAULT_CORPUS,
    ENV_OVERRIDES,
    Config,
    ConfigManager,
    IndexerConfig,
    LoggingConfig,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_OVERRIDES:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def manager(project, tmp_path):
    return ConfigManager(project, user_dir=tmp_path / "user")


def _write_yaml(path: Path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data))


class TestIndexerConfig:
    """VName settings."""

    def test_relative_path_uses_forward_slashes(self, tmp_path):
        config = IndexerConfig(root=tmp_path)

        assert config.relative_path(tmp_path / "src" / "a.ts") == "src/a.ts"

    def test_relative_path_outside_root(self, tmp_path):
        config = IndexerConfig(root=tmp_path / "inner")

        assert config.relative_path(tmp_path / "a.ts") == "../a.ts"

    def test_validate(self):
        assert IndexerConfig().validate() is None
        assert "Unknown language" in IndexerConfig(language="cobol").validate()
        assert "Corpus" in IndexerConfig(corpus="").validate()

    def test_logging_validate(self):
        assert LoggingConfig("debug").validate() is None
        assert "Unknown log level" in LoggingConfig("LOUD").validate()


class TestLayers:
    """ConfigManager.load()."""

    def test_defaults(self, manager, project):
        config = manager.load()

        assert config.index.corpus == DEFAULT_CORPUS
        assert config.index.root == project.resolve()
        assert config.logging.level == "WARNING"

    def test_project_overrides_user(self, manager):
        _write_yaml(manager.user_config_path, {"index": {"corpus": "user", "vname_root": "u"}})
        _write_yaml(manager.project_config_path, {"index": {"corpus": "project"}})

        config = manager.load()

        assert config.index.corpus == "project"
        # Sections merge key by key
        assert config.index.vname_root == "u"

    def test_environment_overrides_files(self, manager, monkeypatch):
        _write_yaml(manager.project_config_path, {"index": {"corpus": "project"}})
        monkeypatch.setenv("TSGRAPH_CORPUS", "env")
        monkeypatch.setenv("TSGRAPH_LOG_LEVEL", "DEBUG")

        config = manager.load()

        assert config.index.corpus == "env"
        assert config.logging.level == "DEBUG"

    def test_relative_root_resolves_against_project(self, manager, project):
        _write_yaml(manager.project_config_path, {"index": {"root": "src"}})

        assert manager.load().index.root == (project / "src").resolve()

    def test_malformed_file_is_skipped(self, manager, caplog):
        manager.project_config_path.parent.mkdir(parents=True)
        manager.project_config_path.write_text("index: [unclosed")

        config = manager.load()

        assert config.index.corpus == DEFAULT_CORPUS
        assert "Ignoring malformed config" in caplog.text

    def test_non_mapping_is_skipped(self, manager, caplog):
        _write_yaml(manager.project_config_path, ["a", "b"])

        assert manager.load().index.corpus == DEFAULT_CORPUS
        assert "expected a mapping" in caplog.text

    def test_load_is_cached(self, manager):
        assert manager.load() is manager.load()


class TestSetGet:
    """ConfigManager.set() / get()."""

    def test_set_project(self, manager):
        assert manager.set("index.corpus", "example.com/repo") is None

        saved = yaml.safe_load(manager.project_config_path.read_text())
        assert saved["index"]["corpus"] == "example.com/repo"
        assert manager.get("index.corpus") == "example.com/repo"

    def test_set_user(self, manager):
        assert manager.set("logging.level", "info", scope="user") is None

        saved = yaml.safe_load(manager.user_config_path.read_text())
        assert saved["logging"]["level"] == "INFO"
        assert not manager.project_config_path.exists()

    def test_set_root_is_resolved(self, manager, project):
        manager.set("index.root", "lib")

        assert manager.get("index.root") == str((project / "lib").resolve())

    def test_round_trip_through_file(self, manager, project, tmp_path):
        manager.set("index.vname_root", "bazel-out")

        reloaded = ConfigManager(project, user_dir=tmp_path / "user").load()
        assert reloaded.index.vname_root == "bazel-out"

    @pytest.mark.parametrize("key,value,message", [
        ("corpus", "x", "Invalid key format"),
        ("index.color", "x", "Unknown index setting"),
        ("logging.format", "x", "Unknown logging setting"),
        ("output.path", "x", "Unknown section"),
        ("index.language", "cobol", "Unknown language"),
        ("logging.level", "loud", "Unknown log level"),
    ])
    def test_set_errors(self, manager, key, value, message):
        error = manager.set(key, value)

        assert message in error
        assert not manager.project_config_path.exists()

    def test_get_unknown(self, manager):
        assert manager.get("index.color") is None
        assert manager.get("corpus") is None


class TestSerialization:

    def test_to_dict_from_dict(self, tmp_path):
        config = Config(index=IndexerConfig(root=tmp_path, corpus="c", vname_root="r"),
                        logging=LoggingConfig("ERROR"))

        restored = Config.from_dict(config.to_dict())

        assert restored.index == config.index
        assert restored.logging == config.logging

    def test_display(self, manager):
        text = manager.display()

        assert "Corpus: default" in text
        assert "VName root: (empty)" in text
        assert str(manager.project_config_path) in text
