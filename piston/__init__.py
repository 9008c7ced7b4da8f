from piston.config import Settings
from piston.core.downloader import ArtifactDownloader
from piston.core.files import ArchiveExtractor
from piston.core.http import fetch_document
from piston.endpoints.assets import AssetIndexLoader
from piston.endpoints.manifest import ManifestResolver
from piston.endpoints.version import VersionDescriptorLoader
from piston.errors import (
    AcquisitionError,
    ArchiveFormatError,
    FileSystemError,
    IntegrityError,
    NetworkError,
    NotFound,
    ParseError,
    PartialParseError,
    PistonError,
)
from piston.services.acquisition_service import AcquisitionResult, AcquisitionService

__version__ = "0.1.0"

__all__ = [
    "AcquisitionError",
    "AcquisitionResult",
    "AcquisitionService",
    "ArchiveExtractor",
    "ArchiveFormatError",
    "ArtifactDownloader",
    "AssetIndexLoader",
    "FileSystemError",
    "IntegrityError",
    "ManifestResolver",
    "NetworkError",
    "NotFound",
    "ParseError",
    "PartialParseError",
    "PistonError",
    "Settings",
    "VersionDescriptorLoader",
    "fetch_document",
]
