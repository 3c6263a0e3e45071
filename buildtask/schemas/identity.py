"""
Identity schemas - service accounts and the secrets they reference.

Only the fields the credential stage reads are modelled.
"""

from dataclasses import dataclass, field
from typing import Any

# Kubernetes secret types recognised by the credential builders.
SECRET_TYPE_OPAQUE = "Opaque"
SECRET_TYPE_BASIC_AUTH = "kubernetes.io/basic-auth"
SECRET_TYPE_SSH_AUTH = "kubernetes.io/ssh-auth"
SECRET_TYPE_DOCKERCFG = "kubernetes.io/dockercfg"
SECRET_TYPE_DOCKER_CONFIG_JSON = "kubernetes.io/dockerconfigjson"


@dataclass(frozen=True)
class ObjectReference:
    """A by-name reference to another object in the same namespace."""
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectReference":
        return cls(name=data["name"])


@dataclass(frozen=True)
class ServiceAccount:
    """
    A service account.

    Attributes:
        name: Service account name
        namespace: Namespace it lives in
        secrets: Ordered references to secrets usable by this identity
    """
    name: str
    namespace: str = "default"
    secrets: tuple[ObjectReference, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "secrets": [s.to_dict() for s in self.secrets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceAccount":
        metadata = data.get("metadata") or {}
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace") or "default",
            secrets=tuple(ObjectReference.from_dict(s) for s in data.get("secrets") or ()),
        )


@dataclass(frozen=True)
class Secret:
    """
    A secret.

    Attributes:
        name: Secret name
        namespace: Namespace it lives in
        type: Kubernetes secret type (basic-auth, ssh-auth, ...)
        annotations: Annotations; credential builders match on these
        data: Secret payload (never logged, never copied into a Task)
    """
    name: str
    namespace: str = "default"
    type: str = SECRET_TYPE_OPAQUE
    annotations: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                **({"annotations": dict(self.annotations)} if self.annotations else {}),
            },
            "type": self.type,
            **({"data": dict(self.data)} if self.data else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Secret":
        metadata = data.get("metadata") or {}
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace") or "default",
            type=data.get("type", SECRET_TYPE_OPAQUE),
            annotations=dict(metadata.get("annotations") or {}),
            data=dict(data.get("data") or {}),
        )
