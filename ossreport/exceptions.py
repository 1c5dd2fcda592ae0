"""Custom exceptions for ossreport."""


class ReportError(Exception):
    """Base exception for all report errors."""


class UnregisteredFileError(ReportError, RuntimeError):
    """Raised when a dependency is attached to a file that was never added."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"file {path!r} is not part of the configuration; "
            "the checksum plugin must run before dependency plugins"
        )


class ListFormatError(ReportError, ValueError):
    """Raised when a bracket-delimited list cell cannot be decoded."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"invalid list value: {text!r}")


class ImportFormatError(ReportError, ValueError):
    """Raised when a tabular report is missing required columns."""
