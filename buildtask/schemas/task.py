"""
Task schema - the executable output of a translation.

A Task is a pod: init containers run to completion in order, then the single
"nop" container runs to mark the build as finished. to_dict() renders an
apiVersion v1 / kind Pod manifest ready to hand to the cluster.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .core import Container, ObjectMeta, Volume

RESTART_POLICY_NEVER = "Never"


@dataclass(frozen=True)
class TaskSpec:
    """
    The pod spec of a Task.

    Attributes:
        init_containers: Credential, source and step containers, in run order
        containers: Exactly one completion container
        volumes: User, implicit and secret volumes
        restart_policy: Always "Never"; a failed build is not restarted
        service_account_name: Passed through from the Build
        node_selector: Passed through from the Build
        affinity: Passed through from the Build
    """
    init_containers: tuple[Container, ...] = field(default_factory=tuple)
    containers: tuple[Container, ...] = field(default_factory=tuple)
    volumes: tuple[Volume, ...] = field(default_factory=tuple)
    restart_policy: str = RESTART_POLICY_NEVER
    service_account_name: str = ""
    node_selector: dict[str, str] = field(default_factory=dict)
    affinity: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "restartPolicy": self.restart_policy,
            "initContainers": [c.to_dict() for c in self.init_containers],
            "containers": [c.to_dict() for c in self.containers],
            **({"serviceAccountName": self.service_account_name}
               if self.service_account_name else {}),
            "volumes": [v.to_dict() for v in self.volumes],
            **({"nodeSelector": dict(self.node_selector)} if self.node_selector else {}),
            **({"affinity": self.affinity} if self.affinity else {}),
        }


@dataclass(frozen=True)
class Task:
    """A Task: metadata plus pod spec."""
    metadata: ObjectMeta
    spec: TaskSpec

    def init_container_names(self) -> list[str]:
        """Names of the init containers, in run order."""
        return [c.name for c in self.spec.init_containers]

    def get_init_container(self, name: str) -> Optional[Container]:
        """Get an init container by name."""
        for container in self.spec.init_containers:
            if container.name == name:
                return container
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a Pod manifest."""
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
        }
