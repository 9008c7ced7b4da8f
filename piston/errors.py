"""
Error taxonomy for the acquisition pipeline.

Every error carries the pipeline stage it was raised from so callers can tell
a manifest failure from a download failure without parsing messages.
"""
from typing import List, Optional, Tuple


class PistonError(Exception):
    """Base class for every failure surfaced by piston."""

    def __init__(self, message: str, stage: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.url = url

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class NetworkError(PistonError):
    """Transport, DNS, timeout or non-2xx failure on a fetch."""


class ParseError(PistonError):
    """Body is not valid JSON or does not match the expected shape."""


class PartialParseError(ParseError):
    """Body ended in the middle of a JSON document (truncated stream)."""


class NotFound(PistonError):
    """A version id, alias target or artifact kind is absent."""


class FileSystemError(PistonError):
    """Local read/write/mkdir failure."""


class ArchiveFormatError(PistonError):
    """File is not a valid archive container."""


class IntegrityError(PistonError):
    """Written size or SHA-1 does not match the download descriptor."""


class AcquisitionError(PistonError):
    """One or more artifacts of an acquisition run failed."""

    def __init__(self, failures: List[Tuple[str, PistonError]]):
        self.failures = failures
        names = ", ".join(name for name, _ in failures[:5])
        more = f" (+{len(failures) - 5} more)" if len(failures) > 5 else ""
        super().__init__(
            f"{len(failures)} artifact(s) failed: {names}{more}",
            stage="download",
        )
