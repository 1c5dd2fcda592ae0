"""Scan plugin interface and registry."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from ossreport.configuration import ConfigurationWriter

log = structlog.get_logger("ossreport.plugins")


@runtime_checkable
class ScanPlugin(Protocol):
    """Interface that every scan plugin must satisfy."""

    name: str

    def ignore(self, path: Path) -> bool: ...

    def run(self, path: Path, config: ConfigurationWriter) -> None: ...


class ManifestPlugin:
    """Base for plugins that read one recognised file format.

    Subclasses implement :meth:`matches` and :meth:`extract`. Read and parse
    failures are logged and swallowed so one bad manifest never stops a scan.
    """

    name = "manifest"
    ecosystem = ""

    def ignore(self, path: Path) -> bool:
        return False

    def matches(self, path: Path) -> bool:
        raise NotImplementedError

    def run(self, path: Path, config: ConfigurationWriter) -> None:
        if not self.matches(path):
            return
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
            self.extract(path, content, config)
        except (OSError, ValueError, ET.ParseError) as exc:
            log.warning("plugin.failed", plugin=self.name, path=str(path), error=str(exc))

    def extract(self, path: Path, content: str, config: ConfigurationWriter) -> None:
        raise NotImplementedError


PLUGIN_REGISTRY: dict[str, ScanPlugin] = {}


def register_plugin(plugin: ScanPlugin) -> None:
    """Register a plugin instance by name; registration order is run order."""
    PLUGIN_REGISTRY[plugin.name] = plugin


def default_plugins() -> list[ScanPlugin]:
    """Registered plugins in run order, checksum first."""
    plugins = list(PLUGIN_REGISTRY.values())
    plugins.sort(key=lambda p: p.name != "checksum")
    return plugins
