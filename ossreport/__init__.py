"""ossreport — fingerprint a source tree and report its third-party content."""

__version__ = "0.3.0"
