"""
Pydantic models for the piston-meta documents.

Field names follow the JSON documents published by the launcher metadata
service, so a model dumps back to the same keys it was loaded from.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

VersionType = Literal["release", "snapshot", "old_beta", "old_alpha"]


class Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_unset=True)


# ==========================================
# 1. MANIFEST
# ==========================================

class LatestVersions(Document):
    release: str
    snapshot: str


class VersionSummary(Document):
    id: str
    type: VersionType
    url: str
    time: str
    releaseTime: str
    # Only present in version_manifest_v2.json
    sha1: Optional[str] = None
    complianceLevel: Optional[int] = None


class VersionManifest(Document):
    latest: LatestVersions
    versions: List[VersionSummary]


# ==========================================
# 2. VERSION DESCRIPTOR
# ==========================================

class DownloadDescriptor(Document):
    sha1: str
    size: int
    url: str


class AssetIndexRef(DownloadDescriptor):
    id: str
    totalSize: int


class LibraryArtifact(DownloadDescriptor):
    path: str


class LibraryDownloads(Document):
    artifact: Optional[LibraryArtifact] = None
    classifiers: Optional[Dict[str, LibraryArtifact]] = None


class RuleOs(Document):
    name: Optional[str] = None
    arch: Optional[str] = None
    version: Optional[str] = None


class Rule(Document):
    action: Literal["allow", "disallow"]
    os: Optional[RuleOs] = None
    features: Optional[Dict[str, bool]] = None


class LibraryRef(Document):
    name: str
    downloads: Optional[LibraryDownloads] = None
    rules: Optional[List[Rule]] = None
    url: Optional[str] = None
    natives: Optional[Dict[str, str]] = None

    @property
    def artifact(self) -> Optional[LibraryArtifact]:
        if self.downloads is None:
            return None
        return self.downloads.artifact


class LoggingFile(DownloadDescriptor):
    id: str


class LoggingEntry(Document):
    argument: str
    file: LoggingFile
    type: str


class LoggingConfig(Document):
    client: Optional[LoggingEntry] = None


class JavaVersion(Document):
    component: str
    majorVersion: int


class Arguments(Document):
    game: List[Any] = []
    jvm: List[Any] = []


class VersionDescriptor(Document):
    id: str
    type: VersionType
    mainClass: str
    assets: Optional[str] = None
    assetIndex: AssetIndexRef
    downloads: Dict[str, DownloadDescriptor]
    libraries: List[LibraryRef]
    javaVersion: Optional[JavaVersion] = None
    logging: Optional[LoggingConfig] = None
    complianceLevel: Optional[int] = None
    minimumLauncherVersion: Optional[int] = None
    releaseTime: Optional[str] = None
    time: Optional[str] = None
    arguments: Optional[Arguments] = None
    # Pre-1.13 descriptors carry a flat argument string instead of `arguments`
    minecraftArguments: Optional[str] = None

    @property
    def assets_id(self) -> str:
        return self.assets or self.assetIndex.id


# ==========================================
# 3. ASSET INDEX
# ==========================================

class Asset(Document):
    hash: str
    size: int

    @property
    def object_path(self) -> str:
        """Relative path of the object inside an assets/objects store."""
        return f"{self.hash[:2]}/{self.hash}"


class AssetIndex(Document):
    objects: Dict[str, Asset]
    # Legacy flags (<= 1.7.2 indexes)
    virtual: Optional[bool] = None
    map_to_resources: Optional[bool] = None

    def __len__(self) -> int:
        return len(self.objects)
