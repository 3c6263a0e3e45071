"""
Assembly stage - wrap the containers and volumes into a Task.
"""

from typing import Sequence

from buildtask.config import ImageConfig
from buildtask.schemas import (
    Build,
    Container,
    ObjectMeta,
    OwnerReference,
    Task,
    TaskSpec,
    Volume,
    RESTART_POLICY_NEVER,
)
from buildtask.schemas.build import API_VERSION, KIND
from buildtask.volumes import validate_volumes

from .base import (
    BUILD_NAME_LABEL_KEY,
    IMPLICIT_VOLUMES,
    NOP_CONTAINER_NAME,
    SIDECAR_INJECT_ANNOTATION,
)


def merge_volumes(
    user_volumes: Sequence[Volume],
    secret_volumes: Sequence[Volume],
) -> tuple[Volume, ...]:
    """
    User volumes, then the implicit volumes, then the secret volumes.

    Raises:
        InvalidVolumeError: If the merged set is invalid
    """
    volumes = tuple(user_volumes) + IMPLICIT_VOLUMES + tuple(secret_volumes)
    validate_volumes(volumes)
    return volumes


def build_owner_reference(build: Build) -> OwnerReference:
    """Controller reference so the Task is deleted with its Build."""
    return OwnerReference(
        api_version=API_VERSION,
        kind=KIND,
        name=build.name,
        uid=build.metadata.uid,
        controller=True,
        block_owner_deletion=True,
    )


def assemble_task(
    build: Build,
    init_containers: Sequence[Container],
    secret_volumes: Sequence[Volume],
    images: ImageConfig,
) -> Task:
    """
    Assemble the Task for a Build.

    Args:
        build: The Build being translated
        init_containers: Credential, source and step containers, in run order
        secret_volumes: Volumes from the credential stage
        images: Image configuration (nop_image is used)

    Returns:
        The Task

    Raises:
        InvalidVolumeError: If the merged volume set is invalid
    """
    volumes = merge_volumes(build.spec.volumes, secret_volumes)

    metadata = ObjectMeta(
        # Same namespace as the Build so it can reach colocated resources.
        namespace=build.namespace,
        generate_name=f"{build.name}-",
        labels={BUILD_NAME_LABEL_KEY: build.name},
        annotations={SIDECAR_INJECT_ANNOTATION: "false"},
        owner_references=(build_owner_reference(build),),
    )

    spec = TaskSpec(
        init_containers=tuple(init_containers),
        containers=(Container(name=NOP_CONTAINER_NAME, image=images.nop_image),),
        volumes=volumes,
        restart_policy=RESTART_POLICY_NEVER,
        service_account_name=build.spec.service_account_name,
        node_selector=build.spec.node_selector,
        affinity=build.spec.affinity,
    )
    return Task(metadata=metadata, spec=spec)
