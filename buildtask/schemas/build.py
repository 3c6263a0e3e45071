"""
Build schema - the declarative build definition.

A Build names a service account, zero or more sources to fetch into the
shared workspace, and an ordered list of steps (containers) to run against
it. The translator turns a Build into a Task.

Manifest shape (build.knative.dev/v1alpha1):

    apiVersion: build.knative.dev/v1alpha1
    kind: Build
    metadata: {name: ..., namespace: ..., uid: ...}
    spec:
      serviceAccountName: ...
      source: {git: {url, revision}, targetPath, subPath, name}
      sources: [...]
      steps: [{name, image, args, env, volumeMounts, workingDir}, ...]
      volumes: [...]
      nodeSelector: {...}
      affinity: {...}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from buildtask.errors import InvalidSourceError

from .core import Container, ObjectMeta, Volume

API_VERSION = "build.knative.dev/v1alpha1"
KIND = "Build"


class SourceKind(str, Enum):
    """Discriminant for the source variants."""
    GIT = "git"
    GCS = "gcs"
    CUSTOM = "custom"


class GCSSourceType(str, Enum):
    """How a GCS location is interpreted by the fetcher."""
    ARCHIVE = "Archive"
    MANIFEST = "Manifest"


@dataclass(frozen=True)
class GitSourceSpec:
    """A git repository checked out at a revision."""
    url: str = ""
    revision: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "revision": self.revision}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GitSourceSpec":
        return cls(url=data.get("url", ""), revision=data.get("revision", ""))


@dataclass(frozen=True)
class GCSSourceSpec:
    """An archive or manifest stored in Google Cloud Storage."""
    type: GCSSourceType = GCSSourceType.ARCHIVE
    location: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "location": self.location}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GCSSourceSpec":
        return cls(
            type=GCSSourceType(data.get("type", GCSSourceType.ARCHIVE.value)),
            location=data.get("location", ""),
        )


@dataclass(frozen=True)
class SourceSpec:
    """
    One source to fetch into the workspace.

    Exactly one of git, gcs or custom is populated and kind says which.
    kind is None for a source whose variant this version does not know;
    the translator skips such sources.

    Attributes:
        kind: Which variant is populated
        git: Git variant
        gcs: GCS variant
        custom: Custom variant - an unnamed container that fetches the source
        name: Optional source name, used to suffix container names
        target_path: Optional path under the workspace to fetch into
        sub_path: Optional path within the workspace volume to mount into steps
    """
    kind: Optional[SourceKind] = None
    git: Optional[GitSourceSpec] = None
    gcs: Optional[GCSSourceSpec] = None
    custom: Optional[Container] = None
    name: str = ""
    target_path: str = ""
    sub_path: str = ""

    def __post_init__(self):
        populated = self.populated_kinds()
        if len(populated) > 1:
            raise InvalidSourceError(
                "b.spec.source", tuple(k.value for k in populated)
            )
        expected = populated[0] if populated else None
        if self.kind != expected:
            raise InvalidSourceError(
                f"b.spec.source.{self.kind.value if self.kind else 'kind'}"
            )

    def populated_kinds(self) -> list[SourceKind]:
        """Variants that carry a value, in declaration order."""
        kinds = []
        if self.git is not None:
            kinds.append(SourceKind.GIT)
        if self.gcs is not None:
            kinds.append(SourceKind.GCS)
        if self.custom is not None:
            kinds.append(SourceKind.CUSTOM)
        return kinds

    @classmethod
    def from_git(cls, url: str, revision: str, **kwargs: Any) -> "SourceSpec":
        return cls(kind=SourceKind.GIT, git=GitSourceSpec(url, revision), **kwargs)

    @classmethod
    def from_gcs(
        cls,
        location: str,
        type: GCSSourceType = GCSSourceType.ARCHIVE,
        **kwargs: Any,
    ) -> "SourceSpec":
        return cls(kind=SourceKind.GCS, gcs=GCSSourceSpec(type, location), **kwargs)

    @classmethod
    def from_custom(cls, container: Container, **kwargs: Any) -> "SourceSpec":
        return cls(kind=SourceKind.CUSTOM, custom=container, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            **({"git": self.git.to_dict()} if self.git else {}),
            **({"gcs": self.gcs.to_dict()} if self.gcs else {}),
            **({"custom": self.custom.to_dict()} if self.custom else {}),
            **({"name": self.name} if self.name else {}),
            **({"targetPath": self.target_path} if self.target_path else {}),
            **({"subPath": self.sub_path} if self.sub_path else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceSpec":
        """
        Deserialize from a manifest source.

        Raises:
            InvalidSourceError: If more than one variant is populated
        """
        present = [k for k in SourceKind if data.get(k.value) is not None]
        if len(present) > 1:
            raise InvalidSourceError("b.spec.source", tuple(k.value for k in present))

        git = gcs = custom = None
        if "git" in data and data["git"] is not None:
            git = GitSourceSpec.from_dict(data["git"])
        if "gcs" in data and data["gcs"] is not None:
            gcs = GCSSourceSpec.from_dict(data["gcs"])
        if "custom" in data and data["custom"] is not None:
            custom = Container.from_dict(data["custom"])

        return cls(
            kind=present[0] if present else None,
            git=git,
            gcs=gcs,
            custom=custom,
            name=data.get("name", ""),
            target_path=data.get("targetPath", ""),
            sub_path=data.get("subPath", ""),
        )


@dataclass(frozen=True)
class BuildSpec:
    """
    The desired state of a Build.

    Attributes:
        service_account_name: Identity whose secrets provide credentials
                              (empty means the "default" service account)
        source: Optional primary source, fetched before any of sources
        sources: Additional sources, in fetch order
        steps: Ordered build steps
        volumes: User-declared volumes available to steps
        node_selector: Scheduling hint, passed through
        affinity: Scheduling hint, passed through
    """
    service_account_name: str = ""
    source: Optional[SourceSpec] = None
    sources: tuple[SourceSpec, ...] = field(default_factory=tuple)
    steps: tuple[Container, ...] = field(default_factory=tuple)
    volumes: tuple[Volume, ...] = field(default_factory=tuple)
    node_selector: dict[str, str] = field(default_factory=dict)
    affinity: Optional[dict[str, Any]] = None

    def all_sources(self) -> tuple[SourceSpec, ...]:
        """The primary source (if any) followed by the additional sources."""
        if self.source is not None:
            return (self.source,) + tuple(self.sources)
        return tuple(self.sources)

    def to_dict(self) -> dict[str, Any]:
        return {
            **({"serviceAccountName": self.service_account_name}
               if self.service_account_name else {}),
            **({"source": self.source.to_dict()} if self.source else {}),
            **({"sources": [s.to_dict() for s in self.sources]} if self.sources else {}),
            "steps": [s.to_dict() for s in self.steps],
            **({"volumes": [v.to_dict() for v in self.volumes]} if self.volumes else {}),
            **({"nodeSelector": dict(self.node_selector)} if self.node_selector else {}),
            **({"affinity": self.affinity} if self.affinity else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildSpec":
        source = data.get("source")
        return cls(
            service_account_name=data.get("serviceAccountName", ""),
            source=SourceSpec.from_dict(source) if source else None,
            sources=tuple(SourceSpec.from_dict(s) for s in data.get("sources") or ()),
            steps=tuple(Container.from_dict(s) for s in data.get("steps") or ()),
            volumes=tuple(Volume.from_dict(v) for v in data.get("volumes") or ()),
            node_selector=dict(data.get("nodeSelector") or {}),
            affinity=data.get("affinity"),
        )


@dataclass(frozen=True)
class Build:
    """
    A Build object: identity plus spec.

    Attributes:
        metadata: Name, namespace and uid of the Build
        spec: What to fetch and run
    """
    metadata: ObjectMeta
    spec: BuildSpec = field(default_factory=BuildSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": API_VERSION,
            "kind": KIND,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Build":
        """
        Deserialize from a Build manifest.

        Raises:
            ValueError: If the manifest is not a Build
            InvalidSourceError: If a source populates more than one variant
        """
        kind = data.get("kind", KIND)
        if kind != KIND:
            raise ValueError(f"Expected kind {KIND}, got {kind}")
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=BuildSpec.from_dict(data.get("spec") or {}),
        )
