"""
buildtask.schemas - Schema definitions for the translator.

Build -> (translator) -> Task

Lifecycle:
1. Build: Declarative build definition (sources, steps, volumes, identity)
2. ServiceAccount / Secret: Identity objects looked up while translating
3. Task: Executable pod (init containers + nop container + volumes)

All types are frozen dataclasses. Wire format is the Kubernetes manifest
shape (camelCase keys) via to_dict()/from_dict().
"""

from .core import (
    EnvVar,
    VolumeMount,
    Container,
    Volume,
    OwnerReference,
    ObjectMeta,
)
from .build import (
    Build,
    BuildSpec,
    SourceSpec,
    SourceKind,
    GitSourceSpec,
    GCSSourceSpec,
    GCSSourceType,
)
from .identity import (
    ObjectReference,
    ServiceAccount,
    Secret,
)
from .task import (
    Task,
    TaskSpec,
    RESTART_POLICY_NEVER,
)

__all__ = [
    # Core
    "EnvVar",
    "VolumeMount",
    "Container",
    "Volume",
    "OwnerReference",
    "ObjectMeta",
    # Build
    "Build",
    "BuildSpec",
    "SourceSpec",
    "SourceKind",
    "GitSourceSpec",
    "GCSSourceSpec",
    "GCSSourceType",
    # Identity
    "ObjectReference",
    "ServiceAccount",
    "Secret",
    # Task
    "Task",
    "TaskSpec",
    "RESTART_POLICY_NEVER",
]
