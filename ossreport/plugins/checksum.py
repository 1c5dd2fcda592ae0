"""Checksum plugin — digest every regular file into the configuration."""

from __future__ import annotations

from pathlib import Path

from ossreport.configuration import ConfigurationWriter
from ossreport.plugins.base import register_plugin


class ChecksumPlugin:
    """Records every file; an unreadable file raises :class:`OSError` to the walker."""

    name = "checksum"

    def ignore(self, path: Path) -> bool:
        return False

    def run(self, path: Path, config: ConfigurationWriter) -> None:
        config.add_file(path)


register_plugin(ChecksumPlugin())
