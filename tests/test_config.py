"""
Tests for configuration — packages.yml loading and run settings.
"""

from pathlib import Path

import pytest

from fleetdrop.core.config.loader import (
    ConfigError,
    find_packages_file,
    load_package_file,
    load_registry,
)
from fleetdrop.core.config.settings import RunSettings


class TestFindPackagesFile:
    def test_finds_in_current_dir(self, packages_yml: Path):
        assert find_packages_file(packages_yml.parent) == packages_yml

    def test_walks_up(self, packages_yml: Path):
        nested = packages_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_packages_file(nested) == packages_yml

    def test_not_found(self, tmp_path: Path):
        assert find_packages_file(tmp_path) is None


class TestLoadPackageFile:
    def test_load(self, packages_yml: Path):
        config = load_package_file(packages_yml)
        assert config.hosts == {"web": ["web1", "web2"], "db": ["db1"]}
        assert config.ssh.user == "deploy"
        assert config.ssh.port == 2222
        assert [p.name for p in config.packages] == ["nginx", "nginx", "motd"]

    def test_quoted_version_kept_verbatim(self, packages_yml: Path):
        config = load_package_file(packages_yml)
        assert config.packages[1].version == "2.0"

    def test_unquoted_decimal_version_rejected(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("packages:\n  - name: app\n    version: 1.10\n")
        with pytest.raises(ConfigError, match="quoted string"):
            load_package_file(path)

    def test_integer_version_becomes_text(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("packages:\n  - name: app\n    version: 3\n")
        assert load_registry(path).find("app", version="3").version == "3"

    def test_invalid_ssh_block(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("ssh:\n  port: abc\n")
        with pytest.raises(ConfigError, match="Invalid package configuration"):
            load_package_file(path)

    def test_relative_sources_resolved_against_file(self, packages_yml: Path):
        transfer = load_package_file(packages_yml).packages[0].transfers[0]
        assert transfer.source == str(packages_yml.parent.resolve() / "files" / "nginx.conf")

    def test_inline_templates_left_alone(self, packages_yml: Path):
        transfer = load_package_file(packages_yml).packages[2].transfers[0]
        assert transfer.source.startswith("Welcome to {{ site }}")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_package_file(tmp_path / "packages.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("packages: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_package_file(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_package_file(path)

    def test_invalid_schema(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("packages:\n  - version: 1\n")
        with pytest.raises(ConfigError, match="Invalid package configuration"):
            load_package_file(path)

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("")
        assert load_package_file(path).packages == []


class TestLoadRegistry:
    def test_versions_registered_in_order(self, packages_yml: Path):
        registry = load_registry(packages_yml)
        found = registry.find("nginx")
        assert [p.version for p in found] == ["1.0", "2.0"]
        assert registry.find("nginx", version="2.0").description == "Second cut"


class TestRunSettings:
    def test_defaults(self):
        settings = RunSettings()
        assert settings.testing is False
        assert settings.staging_dir == "/tmp"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FLEETDROP_TESTING", "yes")
        monkeypatch.setenv("FLEETDROP_STAGING_DIR", "/var/tmp")
        settings = RunSettings.from_env()
        assert settings.testing is True
        assert settings.staging_dir == "/var/tmp"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("FLEETDROP_TESTING", "0")
        settings = RunSettings.from_env(testing=True, dry_run=None)
        assert settings.testing is True
        assert settings.dry_run is False
