"""
Core container schemas shared by Builds and Tasks.

These mirror the subset of the Kubernetes core/v1 types that the translator
reads or writes. Field names are snake_case in Python and camelCase on the
wire (to_dict/from_dict), so a rendered Task is a valid Pod manifest.

Fields the translator does not interpret (resources, securityContext, ports,
...) are kept in Container.extras and passed through verbatim.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class EnvVar:
    """
    A single environment variable.

    value_from holds a secretKeyRef/configMapKeyRef/fieldRef source verbatim;
    when set, value is ignored by the cluster.
    """
    name: str
    value: str = ""
    value_from: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.value_from is not None:
            return {"name": self.name, "valueFrom": self.value_from}
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnvVar":
        return cls(
            name=data["name"],
            value=str(data.get("value") or ""),
            value_from=data.get("valueFrom"),
        )


@dataclass(frozen=True)
class VolumeMount:
    """
    A volume mounted into a container.

    Attributes:
        name: Name of the volume (must match a declared Volume)
        mount_path: Absolute path inside the container
        sub_path: Optional path within the volume to mount instead of its root
        read_only: Mount read-only
    """
    name: str
    mount_path: str
    sub_path: str = ""
    read_only: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "mountPath": self.mount_path,
            **({"subPath": self.sub_path} if self.sub_path else {}),
            **({"readOnly": self.read_only} if self.read_only else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VolumeMount":
        return cls(
            name=data["name"],
            mount_path=data["mountPath"],
            sub_path=data.get("subPath", ""),
            read_only=data.get("readOnly", False),
        )


# Container manifest keys modelled explicitly; everything else lands in extras.
_CONTAINER_KEYS = {"name", "image", "command", "args", "env", "volumeMounts", "workingDir"}


@dataclass(frozen=True)
class Container:
    """
    A container in a Build step list or a Task's container sequences.

    Attributes:
        name: Container name (empty for unnamed build steps)
        image: Image reference
        command: Entrypoint override
        args: Arguments to the entrypoint
        env: Ordered environment variables (later duplicates win)
        volume_mounts: Ordered volume mounts
        working_dir: Working directory (empty means image default)
        extras: Manifest fields not modelled here, passed through untouched
    """
    name: str = ""
    image: str = ""
    command: tuple[str, ...] = field(default_factory=tuple)
    args: tuple[str, ...] = field(default_factory=tuple)
    env: tuple[EnvVar, ...] = field(default_factory=tuple)
    volume_mounts: tuple[VolumeMount, ...] = field(default_factory=tuple)
    working_dir: str = ""
    extras: dict[str, Any] = field(default_factory=dict)

    def get_env(self, name: str) -> Optional[str]:
        """Return the effective value of an env var (last declaration wins)."""
        value = None
        for var in self.env:
            if var.name == name:
                value = var.value
        return value

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a Kubernetes container manifest."""
        return {
            "name": self.name,
            **({"image": self.image} if self.image else {}),
            **({"command": list(self.command)} if self.command else {}),
            **({"args": list(self.args)} if self.args else {}),
            **({"env": [e.to_dict() for e in self.env]} if self.env else {}),
            **({"volumeMounts": [m.to_dict() for m in self.volume_mounts]}
               if self.volume_mounts else {}),
            **({"workingDir": self.working_dir} if self.working_dir else {}),
            **self.extras,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Container":
        """Deserialize from a Kubernetes container manifest."""
        return cls(
            name=data.get("name", ""),
            image=data.get("image", ""),
            command=tuple(data.get("command") or ()),
            args=tuple(data.get("args") or ()),
            env=tuple(EnvVar.from_dict(e) for e in data.get("env") or ()),
            volume_mounts=tuple(
                VolumeMount.from_dict(m) for m in data.get("volumeMounts") or ()
            ),
            working_dir=data.get("workingDir", ""),
            extras={k: v for k, v in data.items() if k not in _CONTAINER_KEYS},
        )


@dataclass(frozen=True)
class Volume:
    """
    A named volume.

    Attributes:
        name: Volume name, unique within a Task
        source: Volume source keyed by kind, e.g. {"emptyDir": {}} or
                {"secret": {"secretName": "creds"}}. A well-formed volume
                declares exactly one kind.
    """
    name: str
    source: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def empty_dir(cls, name: str) -> "Volume":
        return cls(name=name, source={"emptyDir": {}})

    @classmethod
    def from_secret(cls, name: str, secret_name: str) -> "Volume":
        return cls(name=name, source={"secret": {"secretName": secret_name}})

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, **self.source}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Volume":
        return cls(
            name=data.get("name", ""),
            source={k: v for k, v in data.items() if k != "name"},
        )


@dataclass(frozen=True)
class OwnerReference:
    """Points at the object that owns (and garbage-collects) another."""
    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OwnerReference":
        return cls(
            api_version=data["apiVersion"],
            kind=data["kind"],
            name=data["name"],
            uid=data.get("uid", ""),
            controller=data.get("controller", True),
            block_owner_deletion=data.get("blockOwnerDeletion", True),
        )


@dataclass(frozen=True)
class ObjectMeta:
    """Identity and bookkeeping metadata for Builds and Tasks."""
    name: str = ""
    namespace: str = "default"
    uid: str = ""
    generate_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: tuple[OwnerReference, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            **({"name": self.name} if self.name else {}),
            **({"generateName": self.generate_name} if self.generate_name else {}),
            "namespace": self.namespace,
            **({"uid": self.uid} if self.uid else {}),
            **({"labels": dict(self.labels)} if self.labels else {}),
            **({"annotations": dict(self.annotations)} if self.annotations else {}),
            **({"ownerReferences": [o.to_dict() for o in self.owner_references]}
               if self.owner_references else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectMeta":
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace") or "default",
            uid=data.get("uid", ""),
            generate_name=data.get("generateName", ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
            owner_references=tuple(
                OwnerReference.from_dict(o) for o in data.get("ownerReferences") or ()
            ),
        )
