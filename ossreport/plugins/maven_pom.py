"""Plugin for Maven pom.xml files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from ossreport.configuration import ConfigurationWriter
from ossreport.plugins.base import ManifestPlugin, register_plugin

_NS = "{http://maven.apache.org/POM/4.0.0}"


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else None


class MavenPomPlugin(ManifestPlugin):
    """Declared ``<dependencies>`` of the project model, recorded verbatim."""

    name = "maven"
    ecosystem = "maven"

    def matches(self, path: Path) -> bool:
        return path.name == "pom.xml"

    def extract(self, path: Path, content: str, config: ConfigurationWriter) -> None:
        root = ET.fromstring(content)

        # Try both namespaced and non-namespaced
        for ns in (_NS, ""):
            deps_el = root.find(f"{ns}dependencies")
            if deps_el is None:
                continue
            for dep_el in deps_el.findall(f"{ns}dependency"):
                config.add_dependency(
                    path,
                    self.ecosystem,
                    group=_text(dep_el.find(f"{ns}groupId")),
                    name=_text(dep_el.find(f"{ns}artifactId")),
                    version=_text(dep_el.find(f"{ns}version")),
                )


register_plugin(MavenPomPlugin())
