"""DirectoryWalker — recursive, sequential, symlink-free tree traversal."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from ossreport.configuration import ConfigurationWriter
from ossreport.plugins.base import ScanPlugin

log = structlog.get_logger("ossreport.walker")


@dataclass
class WalkStats:
    """Counters for one walk."""

    files: int = 0
    ignored: int = 0
    symlinks: int = 0
    errors: int = 0


class DirectoryWalker:
    """Visit every regular file under a root and run the plugins on it.

    Symbolic links are never followed. A file is skipped entirely when any
    plugin's ``ignore`` returns true; otherwise every plugin runs on it in
    order. A read error is counted and logged, the remaining plugins are
    skipped for that file, and the walk carries on.
    """

    def __init__(self, config: ConfigurationWriter, plugins: Sequence[ScanPlugin]) -> None:
        self._config = config
        self._plugins = list(plugins)

    def walk(self, root: Path) -> WalkStats:
        stats = WalkStats()
        self._visit(Path(root), stats)
        log.info(
            "walker.done",
            root=str(root),
            files=stats.files,
            ignored=stats.ignored,
            symlinks=stats.symlinks,
            errors=stats.errors,
        )
        return stats

    def _visit(self, path: Path, stats: WalkStats) -> None:
        if path.is_symlink():
            stats.symlinks += 1
            log.debug("walker.symlink_skipped", path=str(path))
            return

        if path.is_dir():
            try:
                children = sorted(path.iterdir())
            except OSError as exc:
                stats.errors += 1
                log.warning("walker.list_failed", path=str(path), error=str(exc))
                return
            for child in children:
                self._visit(child, stats)
        elif path.is_file():
            self._visit_file(path, stats)

    def _visit_file(self, path: Path, stats: WalkStats) -> None:
        if any(plugin.ignore(path) for plugin in self._plugins):
            stats.ignored += 1
            log.debug("walker.file_ignored", path=str(path))
            return

        stats.files += 1
        for plugin in self._plugins:
            try:
                plugin.run(path, self._config)
            except OSError as exc:
                # The file is unreadable; later plugins would fail the same way
                stats.errors += 1
                log.warning(
                    "walker.read_failed",
                    path=str(path),
                    plugin=getattr(plugin, "name", type(plugin).__name__),
                    error=str(exc),
                )
                return
