# pcb_gerber/exceptions.py

"""
Exception classes for Gerber package analysis.

Only package-level problems are raised. Everything that goes wrong inside a
single file is collected into that file's errors/warnings instead.
"""


class GerberAnalysisError(Exception):
    """Base exception for all analysis errors."""
    pass


class PackageError(GerberAnalysisError):
    """Raised when the uploaded package as a whole cannot be analyzed."""
    pass


class EmptyPackageError(PackageError):
    """Raised when a package yields no files to analyze."""

    def __init__(self, message: str = "No valid files found in the archive"):
        super().__init__(message)


class InvalidArchiveError(PackageError):
    """Raised when an archive suffix was declared but the bytes cannot be read as one."""

    def __init__(self, filename: str, reason: str = ""):
        self.filename = filename
        detail = f": {reason}" if reason else ""
        super().__init__(f"'{filename}' is not a readable archive{detail}")


class UnsupportedArchiveError(PackageError):
    """Raised for archive formats we decline to open (RAR, 7z)."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(
            f"Archive format of '{filename}' is not supported. "
            "Please extract it and upload a ZIP file or the individual Gerber files instead."
        )


class ConfigError(GerberAnalysisError):
    """Raised when analysis settings cannot be loaded."""
    pass


class AnalysisSuperseded(GerberAnalysisError):
    """Raised when a newer analysis request replaced this one before it finished."""

    def __init__(self, filename: str, generation: int):
        self.filename = filename
        self.generation = generation
        super().__init__(f"Analysis of '{filename}' (request {generation}) was superseded by a newer request")
