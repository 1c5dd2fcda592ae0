"""Plugin for npm package.json manifests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ossreport.configuration import ConfigurationWriter
from ossreport.digest import file_digest
from ossreport.plugins.base import ManifestPlugin, register_plugin

log = structlog.get_logger("ossreport.plugins")


class PackageJson(BaseModel):
    """The dependency sections of a package.json; everything else is ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    dependencies: dict[str, Any] | None = None
    optional_dependencies: dict[str, Any] | None = Field(
        default=None, alias="optionalDependencies"
    )
    dev_dependencies: dict[str, Any] | None = Field(default=None, alias="devDependencies")


def _scope_comment(scope: str | None) -> str | None:
    if scope is None:
        return None
    return json.dumps({"scope": scope})


class NodePackagePlugin(ManifestPlugin):
    name = "npm"
    ecosystem = "npm"

    def matches(self, path: Path) -> bool:
        return path.name == "package.json"

    def extract(self, path: Path, content: str, config: ConfigurationWriter) -> None:
        pkg = PackageJson.model_validate_json(content)
        self._process(path, pkg.dependencies, None, config)
        self._process(path, pkg.optional_dependencies, "optional", config)
        self._process(path, pkg.dev_dependencies, "dev", config)

    def _process(
        self,
        path: Path,
        deps: dict[str, Any] | None,
        scope: str | None,
        config: ConfigurationWriter,
    ) -> None:
        if not deps:
            return
        comment = _scope_comment(scope)
        for pkg_name, version in deps.items():
            if not isinstance(version, str):
                log.warning(
                    "npm.invalid_version",
                    path=str(path),
                    package=pkg_name,
                    value=repr(version),
                )
                continue
            # Local dependencies are identified by the digest of their content
            if version.startswith("file:"):
                target = self._resolve_local(path, version[len("file:"):])
                try:
                    digest = file_digest(target)
                except OSError as exc:
                    log.warning(
                        "npm.local_dependency_unreadable",
                        path=str(path),
                        package=pkg_name,
                        target=str(target),
                        error=str(exc),
                    )
                    continue
                config.add_dependency(
                    path, self.ecosystem, name=pkg_name, version=digest, comment=comment
                )
            elif version.find("://") > 0:
                config.add_dependency(path, self.ecosystem, uri=version, comment=comment)
            elif version.find("/") > 0:
                # GitHub "owner/repo" shorthand
                config.add_dependency(
                    path, self.ecosystem, uri=f"git://github.com/{version}", comment=comment
                )
            else:
                config.add_dependency(
                    path, self.ecosystem, name=pkg_name, version=version, comment=comment
                )

    @staticmethod
    def _resolve_local(manifest: Path, target: str) -> Path:
        local = Path(target)
        if local.is_absolute():
            return local
        return manifest.parent / local


register_plugin(NodePackagePlugin())
