"""Tests for the directory walker."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from ossreport import configuration
from ossreport.configuration import ConfigurationWriter
from ossreport.plugins import default_plugins
from ossreport.walker import DirectoryWalker


class RecordingPlugin:
    """Plugin double that records the files it was run on."""

    def __init__(self, name: str = "recorder", ignored: set[str] | None = None) -> None:
        self.name = name
        self.ignored = ignored or set()
        self.seen: list[str] = []

    def ignore(self, path: Path) -> bool:
        return path.name in self.ignored

    def run(self, path: Path, config: ConfigurationWriter) -> None:
        self.seen.append(path.name)


class FailingPlugin:
    name = "failing"

    def ignore(self, path: Path) -> bool:
        return False

    def run(self, path: Path, config: ConfigurationWriter) -> None:
        if path.name == "bad.txt":
            raise PermissionError("denied")


class TestDirectoryWalker:
    def test_visits_all_files_recursively(self, config, write_file, tmp_path):
        write_file("a.txt")
        write_file("sub/b.txt")
        write_file("sub/deeper/c.txt")
        plugin = RecordingPlugin()
        stats = DirectoryWalker(config, [plugin]).walk(tmp_path)
        assert sorted(plugin.seen) == ["a.txt", "b.txt", "c.txt"]
        assert stats.files == 3

    def test_order_is_deterministic(self, config, write_file, tmp_path):
        for name in ("c.txt", "a.txt", "b.txt"):
            write_file(name)
        plugin = RecordingPlugin()
        DirectoryWalker(config, [plugin]).walk(tmp_path)
        assert plugin.seen == ["a.txt", "b.txt", "c.txt"]

    def test_single_file_root(self, config, write_file):
        path = write_file("only.txt")
        plugin = RecordingPlugin()
        DirectoryWalker(config, [plugin]).walk(path)
        assert plugin.seen == ["only.txt"]

    def test_ignore_veto_skips_every_plugin(self, config, write_file, tmp_path):
        write_file("keep.txt")
        write_file("skip.txt")
        vetoing = RecordingPlugin("veto", ignored={"skip.txt"})
        other = RecordingPlugin("other")
        stats = DirectoryWalker(config, [vetoing, other]).walk(tmp_path)
        assert vetoing.seen == ["keep.txt"]
        assert other.seen == ["keep.txt"]
        assert stats.ignored == 1

    def test_plugins_run_in_order(self, config, write_file, tmp_path):
        write_file("a.txt")
        calls: list[str] = []

        class Named(RecordingPlugin):
            def run(self, path, config):
                calls.append(self.name)

        DirectoryWalker(config, [Named("first"), Named("second")]).walk(tmp_path)
        assert calls == ["first", "second"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed(self, config, write_file, tmp_path):
        target = tmp_path / "outside"
        (target / "inner").mkdir(parents=True)
        (target / "inner" / "x.txt").write_text("x")
        root = tmp_path / "root"
        root.mkdir()
        (root / "real.txt").write_text("r")
        (root / "link").symlink_to(target, target_is_directory=True)
        (root / "loop").symlink_to(root, target_is_directory=True)

        plugin = RecordingPlugin()
        stats = DirectoryWalker(config, [plugin]).walk(root)
        assert plugin.seen == ["real.txt"]
        assert stats.symlinks == 2

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_file_skipped(self, config, write_file, tmp_path):
        real = write_file("real.txt")
        (tmp_path / "alias.txt").symlink_to(real)
        plugin = RecordingPlugin()
        DirectoryWalker(config, [plugin]).walk(tmp_path)
        assert plugin.seen == ["real.txt"]

    def test_io_error_does_not_abort(self, config, write_file, tmp_path):
        write_file("bad.txt")
        write_file("good.txt")
        recorder = RecordingPlugin()
        stats = DirectoryWalker(config, [FailingPlugin(), recorder]).walk(tmp_path)
        assert recorder.seen == ["good.txt"]
        assert stats.errors == 1
        assert stats.files == 2

    def test_unreadable_file_counted_with_default_plugins(
        self, config, write_file, tmp_path, monkeypatch
    ):
        write_file("bad.txt")
        write_file("package.json", '{"dependencies": {"lodash": "^4.17.0"}}')
        real_digest = configuration.file_digest

        def digest(path):
            if path.name in ("bad.txt", "package.json"):
                raise PermissionError("denied")
            return real_digest(path)

        monkeypatch.setattr(configuration, "file_digest", digest)
        stats = DirectoryWalker(config, default_plugins()).walk(tmp_path)
        assert stats.errors == 2
        assert config.files == []


class TestScanWithDefaultPlugins:
    def test_populates_configuration(self, config, write_file, tmp_path):
        write_file("web/index.html", '<script src="https://cdn.example.com/x.js"></script>')
        write_file("Gemfile", "source 'https://rubygems.org'\ngem 'rails', '4.2.0'\n")
        write_file("package.json", '{"dependencies": {"lodash": "^4.17.0"}}')
        write_file("pom.xml", "<project><dependencies><dependency><groupId>g</groupId>"
                              "<artifactId>a</artifactId><version>1</version>"
                              "</dependency></dependencies></project>")
        write_file("src/main.c", "int main() { return 0; }\n")

        DirectoryWalker(config, default_plugins()).walk(tmp_path)

        assert len(config.files) == 5
        ecosystems = {
            fact.ecosystem for record in config.files for fact in record.dependencies
        }
        assert ecosystems == {"html", "bundler", "npm", "maven"}
        main_c = config.get_file(str(tmp_path / "src" / "main.c"))
        assert main_c.dependencies == []

    def test_unreadable_manifest_does_not_abort(self, config, write_file, tmp_path):
        write_file("package.json", "{broken")
        write_file("z.txt")
        DirectoryWalker(config, default_plugins()).walk(tmp_path)
        assert len(config.files) == 2
