"""Attach identification results to the files of a configuration."""

from __future__ import annotations

from typing import Protocol

import structlog

from ossreport.client import IdentificationRecord
from ossreport.configuration import Configuration

log = structlog.get_logger("ossreport.identify")


class Resolver(Protocol):
    def resolve(self, digest: str) -> IdentificationRecord | None: ...


def identify(config: Configuration, resolver: Resolver) -> int:
    """Resolve every non-ignored file and group the hits into projects.

    Each distinct digest is resolved once. Returns the number of file
    records that were matched to a project.
    """
    results: dict[str, IdentificationRecord | None] = {}
    matched = 0
    for record in config.files:
        if record.ignored:
            continue
        if record.digest not in results:
            results[record.digest] = resolver.resolve(record.digest)
        result = results[record.digest]
        if result is None or not result.name:
            continue

        project = config.get_group(result.name).get_project(result.scm_uri, result.version)
        project.description = project.description or result.description
        project.project_url = project.project_url or result.project_url
        project.home_url = project.home_url or result.home_url
        for cpe in result.cpes:
            project.add_cpe(cpe)
        for license in result.licenses:
            project.add_license(license)
        project.add_file(record.digest)
        matched += 1

    log.info("identify.done", files=len(config.files), resolved=len(results), matched=matched)
    return matched
