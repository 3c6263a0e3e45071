"""
Step stage - normalize user build steps into init containers.

For each step:
- implicit env vars are prepended (user vars come later and win)
- implicit volume mounts are appended unless the user mounted that path
- the working directory defaults to the workspace
- the step gets its final, position-derived name
"""

from dataclasses import replace
from typing import Sequence

from buildtask.schemas import Container, VolumeMount

from .base import (
    IMPLICIT_ENV_VARS,
    IMPLICIT_VOLUME_MOUNTS,
    WORKSPACE_DIR,
    WORKSPACE_VOLUME,
    clean_path,
    step_container_name,
)


def merge_volume_mounts(
    requested: Sequence[VolumeMount],
    workspace_sub_path: str = "",
) -> tuple[VolumeMount, ...]:
    """
    User mounts followed by every implicit mount at an unclaimed path.

    Args:
        requested: The step's own mounts, kept verbatim
        workspace_sub_path: Sub-path to set on the implicit workspace mount

    Returns:
        The merged mounts
    """
    # TODO: check that requested mounts name a declared volume
    claimed = {clean_path(vm.mount_path) for vm in requested}
    mounts = list(requested)
    for implicit in IMPLICIT_VOLUME_MOUNTS:
        if clean_path(implicit.mount_path) in claimed:
            continue
        if workspace_sub_path and implicit.name == WORKSPACE_VOLUME:
            implicit = replace(implicit, sub_path=workspace_sub_path)
        mounts.append(implicit)
    return tuple(mounts)


def normalize_step(step: Container, index: int, workspace_sub_path: str = "") -> Container:
    """
    Normalize one build step.

    Args:
        step: The declared step (or a renamed custom source)
        index: Position of the step in the step list
        workspace_sub_path: Sub-path for the implicit workspace mount

    Returns:
        The step as it will run in the Task
    """
    return replace(
        step,
        name=step_container_name(index, step.name),
        env=IMPLICIT_ENV_VARS + tuple(step.env),
        volume_mounts=merge_volume_mounts(step.volume_mounts, workspace_sub_path),
        working_dir=step.working_dir or WORKSPACE_DIR,
    )


def normalize_steps(
    steps: Sequence[Container],
    workspace_sub_path: str = "",
) -> tuple[Container, ...]:
    """Normalize every step, in order."""
    return tuple(
        normalize_step(step, index, workspace_sub_path)
        for index, step in enumerate(steps)
    )
