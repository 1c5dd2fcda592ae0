"""JSON documents for a configuration, in private and public form.

The private document keeps local paths and names. The public document is
safe to share: file paths and names are dropped, and so are dependency
facts unless they are explicitly exported.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from ossreport.configuration import Configuration
from ossreport.core.config import ExportOptions
from ossreport.models import DependencyFact, FileRecord, ProjectGroup, ProjectRecord
from ossreport.report.csv_export import write_csv
from ossreport.report.csv_import import import_csv

log = structlog.get_logger("ossreport.report")

PRIVATE_FILENAME = "ossreport.private.json"
PUBLIC_FILENAME = "ossreport.public.json"
CSV_FILENAME = "ossreport.csv"


# ── document schemas ─────────────────────────────────────────────────────


class DependencySchema(BaseModel):
    ecosystem: str
    uri: str | None = None
    group: str | None = None
    name: str | None = None
    version: str | None = None
    comment: str | None = None


class FileSchema(BaseModel):
    digest: str
    path: str | None = None
    name: str | None = None
    license: str | None = None
    comment: str | None = None
    state: str | None = None
    ignored: bool = False
    dependencies: list[DependencySchema] = Field(default_factory=list)


class ProjectSchema(BaseModel):
    name: str | None = None
    description: str | None = None
    version: str | None = None
    project_url: str | None = None
    scm_uri: str | None = None
    home_url: str | None = None
    cpes: list[str] = Field(default_factory=list)
    licenses: list[str] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    comment: str | None = None


class ProjectGroupSchema(BaseModel):
    name: str
    members: list[ProjectSchema] = Field(default_factory=list)


class ConfigurationSchema(BaseModel):
    timestamp: datetime
    files: list[FileSchema] = Field(default_factory=list)
    projects: dict[str, ProjectGroupSchema] = Field(default_factory=dict)


# ── model <-> schema ─────────────────────────────────────────────────────


def to_schema(config: Configuration) -> ConfigurationSchema:
    return ConfigurationSchema(
        timestamp=config.timestamp,
        files=[
            FileSchema(
                digest=record.digest,
                path=record.path,
                name=record.name,
                license=record.license,
                comment=record.comment,
                state=record.state,
                ignored=record.ignored,
                dependencies=[
                    DependencySchema(
                        ecosystem=fact.ecosystem,
                        uri=fact.uri,
                        group=fact.group,
                        name=fact.name,
                        version=fact.version,
                        comment=fact.comment,
                    )
                    for fact in record.dependencies
                ],
            )
            for record in config.files
        ],
        projects={
            key: ProjectGroupSchema(
                name=group.name,
                members=[ProjectSchema(**vars(project)) for project in group.members],
            )
            for key, group in config.projects.items()
        },
    )


def from_schema(doc: ConfigurationSchema) -> Configuration:
    config = Configuration()
    config.timestamp = doc.timestamp
    for file_doc in doc.files:
        config.add_record(
            FileRecord(
                digest=file_doc.digest,
                path=file_doc.path,
                name=file_doc.name,
                license=file_doc.license,
                comment=file_doc.comment,
                state=file_doc.state,
                ignored=file_doc.ignored,
                dependencies=[DependencyFact(**dep.model_dump()) for dep in file_doc.dependencies],
            )
        )
    for key, group_doc in doc.projects.items():
        config.projects[key] = ProjectGroup(
            name=group_doc.name,
            members=[ProjectRecord(**member.model_dump()) for member in group_doc.members],
        )
    return config


def dump_private(config: Configuration) -> str:
    return to_schema(config).model_dump_json(indent=2, exclude_none=True)


def dump_public(config: Configuration, export_dependencies: bool = True) -> str:
    hidden = {"path", "name"}
    if not export_dependencies:
        hidden.add("dependencies")
    return to_schema(config).model_dump_json(
        indent=2,
        exclude_none=True,
        exclude={"files": {"__all__": hidden}},
    )


def load_json(path: Path) -> Configuration:
    """Load a private or public JSON document."""
    doc = ConfigurationSchema.model_validate_json(Path(path).read_text(encoding="utf-8"))
    config = from_schema(doc)
    log.info("import.json_loaded", path=str(path), files=len(config.files), groups=len(config.projects))
    return config


def load_configuration(path: Path) -> Configuration:
    """Load a configuration from a tabular report (``.csv``) or a JSON document."""
    path = Path(path)
    if path.suffix.lower() == ".csv":
        return import_csv(path)
    return load_json(path)


# ── report directory ─────────────────────────────────────────────────────


@dataclass
class ReportPaths:
    private: Path
    public: Path
    csv: Path
    rows: int = 0


def write_reports(
    config: Configuration,
    output_dir: Path,
    options: ExportOptions | None = None,
) -> ReportPaths:
    """Write the private, public and tabular reports into *output_dir*."""
    options = options or ExportOptions()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = ReportPaths(
        private=output_dir / PRIVATE_FILENAME,
        public=output_dir / PUBLIC_FILENAME,
        csv=output_dir / CSV_FILENAME,
    )

    config.touch()
    paths.private.write_text(dump_private(config) + "\n", encoding="utf-8")
    config.touch()
    paths.public.write_text(
        dump_public(config, export_dependencies=options.export_dependencies) + "\n",
        encoding="utf-8",
    )
    paths.rows = write_csv(config, paths.csv, options)
    log.info("export.reports_written", directory=str(output_dir), rows=paths.rows)
    return paths
