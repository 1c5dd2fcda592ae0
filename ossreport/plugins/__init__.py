"""Scan plugins — auto-registered on import, checksum first."""

from ossreport.plugins import (
    checksum,  # noqa: F401
    gemfile,  # noqa: F401
    html_links,  # noqa: F401
    maven_pom,  # noqa: F401
    node_package,  # noqa: F401
)
from ossreport.plugins.base import PLUGIN_REGISTRY, ScanPlugin, default_plugins

__all__ = ["PLUGIN_REGISTRY", "ScanPlugin", "default_plugins"]
