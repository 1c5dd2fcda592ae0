"""Report documents — JSON persistence and the flat tabular format."""

from ossreport.report.csv_export import TabularExporter, export_rows, write_csv
from ossreport.report.csv_import import import_csv
from ossreport.report.persistence import (
    ReportPaths,
    load_configuration,
    load_json,
    write_reports,
)

__all__ = [
    "ReportPaths",
    "TabularExporter",
    "export_rows",
    "import_csv",
    "load_configuration",
    "load_json",
    "write_csv",
    "write_reports",
]
