"""CLI entry point: ossreport.

Subcommands:
    ossreport scan ./src -o out              # Fingerprint a tree and extract dependencies
    ossreport merge local.json ids.json -o out   # Merge identification results into a scan
    ossreport import reviewed.csv -o out     # Rebuild reports from a reviewed CSV
    ossreport identify local.json -o out     # Look up every digest on the remote service
"""

from __future__ import annotations

from pathlib import Path

import click

from ossreport.core.config import ExportOptions, Settings
from ossreport.core.logging import setup_logging
from ossreport.report.persistence import ReportPaths


def _export_options(f):
    f = click.option("--no-artifacts", is_flag=True, help="Omit build artifacts from the CSV")(f)
    f = click.option("--no-images", is_flag=True, help="Omit images from the CSV")(f)
    f = click.option(
        "--no-dependencies", is_flag=True, help="Omit dependencies from the public JSON"
    )(f)
    f = click.option(
        "-o",
        "--output",
        "output_dir",
        required=True,
        type=click.Path(file_okay=False, path_type=Path),
        help="Output directory",
    )(f)
    return f


def _options(no_dependencies: bool, no_images: bool, no_artifacts: bool) -> ExportOptions:
    return ExportOptions(
        export_dependencies=not no_dependencies,
        include_images=not no_images,
        include_artifacts=not no_artifacts,
    )


def _load(path: Path):
    """Load a report document, turning format errors into a usage error."""
    from ossreport.exceptions import ReportError
    from ossreport.report.persistence import load_configuration

    try:
        return load_configuration(path)
    except ReportError as e:
        raise click.ClickException(f"{path}: {e}") from e


def _report(paths: ReportPaths) -> None:
    click.echo(f"Private report: {paths.private}")
    click.echo(f"Public report:  {paths.public}")
    click.echo(f"CSV report:     {paths.csv} ({paths.rows} rows)")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """ossreport: fingerprint source trees and report third-party content."""
    setup_logging(verbose)


@main.command("scan")
@click.argument("directory", type=click.Path(exists=True, path_type=Path))
@click.option("--min-size", type=int, default=None, help="Flag files smaller than this as ignored")
@_export_options
def scan(
    directory: Path,
    min_size: int | None,
    output_dir: Path,
    no_dependencies: bool,
    no_images: bool,
    no_artifacts: bool,
) -> None:
    """Scan DIRECTORY, recording digests and declared dependencies."""
    from ossreport.configuration import Configuration
    from ossreport.plugins import default_plugins
    from ossreport.report.persistence import write_reports
    from ossreport.walker import DirectoryWalker

    settings = Settings.from_env().with_overrides(min_file_size=min_size)
    config = Configuration(min_file_size=settings.min_file_size)
    stats = DirectoryWalker(config, default_plugins()).walk(directory)
    click.echo(
        f"Scanned {stats.files} files ({stats.symlinks} links skipped, {stats.errors} errors)"
    )
    _report(write_reports(config, output_dir, _options(no_dependencies, no_images, no_artifacts)))


@main.command("merge")
@click.argument("local_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("other_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_export_options
def merge(
    local_file: Path,
    other_file: Path,
    output_dir: Path,
    no_dependencies: bool,
    no_images: bool,
    no_artifacts: bool,
) -> None:
    """Merge OTHER_FILE's identification data into LOCAL_FILE's files."""
    from ossreport.report.persistence import write_reports

    config = _load(local_file)
    config.merge(_load(other_file))
    _report(write_reports(config, output_dir, _options(no_dependencies, no_images, no_artifacts)))


@main.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_export_options
def import_report(
    csv_file: Path,
    output_dir: Path,
    no_dependencies: bool,
    no_images: bool,
    no_artifacts: bool,
) -> None:
    """Rebuild the reports from a reviewed CSV_FILE."""
    from ossreport.exceptions import ReportError
    from ossreport.report.csv_import import import_csv
    from ossreport.report.persistence import write_reports

    try:
        config = import_csv(csv_file)
    except ReportError as e:
        raise click.ClickException(str(e)) from e
    _report(write_reports(config, output_dir, _options(no_dependencies, no_images, no_artifacts)))


@main.command("identify")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--api-url", default=None, help="Identification service base URL")
@_export_options
def identify(
    input_file: Path,
    api_url: str | None,
    output_dir: Path,
    no_dependencies: bool,
    no_images: bool,
    no_artifacts: bool,
) -> None:
    """Look up every file digest of INPUT_FILE on the identification service."""
    from ossreport.client import IdentificationClient
    from ossreport.identify import identify as run_identify
    from ossreport.report.persistence import write_reports

    settings = Settings.from_env().with_overrides(api_url=api_url)
    config = _load(input_file)
    with IdentificationClient.from_settings(settings) as client:
        matched = run_identify(config, client)
    click.echo(f"Identified {matched} of {len(config.files)} files")
    _report(write_reports(config, output_dir, _options(no_dependencies, no_images, no_artifacts)))


if __name__ == "__main__":
    main()
