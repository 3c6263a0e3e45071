"""
Source stage - turn each declared source into a container.

Sources are processed in order: the primary source (spec.source) first, then
spec.sources. The index used in container names is the position in that
combined list.

- git:    init container running the git image
- gcs:    init container running the GCS fetcher image
- custom: the user's container, renamed and prepended to the build steps

The sub_path of each source, in order, becomes the workspace sub-path; the
last source wins.
"""

import logging
from dataclasses import dataclass, field, replace

from buildtask.config import ImageConfig
from buildtask.errors import MissingFieldError
from buildtask.schemas import Container, SourceKind, SourceSpec

from .base import (
    GCS_SOURCE,
    GIT_SOURCE,
    IMPLICIT_ENV_VARS,
    IMPLICIT_VOLUME_MOUNTS,
    WORKSPACE_DIR,
    custom_source_name,
    source_container_name,
    workspace_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceResult:
    """
    Output of the source stage.

    Attributes:
        containers: git/gcs init containers, in source order
        steps: Build steps with custom source containers prepended
        workspace_sub_path: Sub-path applied to the workspace mount of every step
    """
    containers: tuple[Container, ...] = field(default_factory=tuple)
    steps: tuple[Container, ...] = field(default_factory=tuple)
    workspace_sub_path: str = ""


def git_to_container(source: SourceSpec, index: int, images: ImageConfig) -> Container:
    """
    Init container that checks out a git source.

    Raises:
        MissingFieldError: If url or revision is empty
    """
    git = source.git
    if not git.url:
        raise MissingFieldError("b.spec.source.git.url")
    if not git.revision:
        raise MissingFieldError("b.spec.source.git.revision")

    args = ["-url", git.url, "-revision", git.revision]
    if source.target_path:
        args.extend(["-path", source.target_path])

    return Container(
        name=source_container_name(GIT_SOURCE, index, source.name),
        image=images.git_image,
        args=tuple(args),
        env=IMPLICIT_ENV_VARS,
        volume_mounts=IMPLICIT_VOLUME_MOUNTS,
        working_dir=WORKSPACE_DIR,
    )


def gcs_to_container(source: SourceSpec, index: int, images: ImageConfig) -> Container:
    """
    Init container that fetches a GCS source.

    Raises:
        MissingFieldError: If location is empty
    """
    gcs = source.gcs
    if not gcs.location:
        raise MissingFieldError("b.spec.source.gcs.location")

    args = ["--type", gcs.type.value, "--location", gcs.location]
    # dest_dir is where the fetcher copies the GCS files
    if source.target_path:
        args.extend(["--dest_dir", workspace_path(source.target_path)])

    return Container(
        name=source_container_name(GCS_SOURCE, index, source.name),
        image=images.gcs_fetcher_image,
        args=tuple(args),
        env=IMPLICIT_ENV_VARS,
        volume_mounts=IMPLICIT_VOLUME_MOUNTS,
        working_dir=WORKSPACE_DIR,
    )


def custom_to_container(source: SourceSpec) -> Container:
    """
    Rename a custom source container so it can run as a build step.

    Raises:
        MissingFieldError: If the container already has a name
    """
    if source.custom.name:
        raise MissingFieldError("b.spec.source.name")
    return replace(source.custom, name=custom_source_name(source.name))


def resolve_sources(
    sources: tuple[SourceSpec, ...],
    steps: tuple[Container, ...],
    images: ImageConfig,
) -> SourceResult:
    """
    Run the source stage over a Build's sources.

    Args:
        sources: Primary source followed by additional sources
        steps: The Build's declared steps
        images: Image configuration (git_image, gcs_fetcher_image)

    Returns:
        SourceResult with init containers, the augmented step list and the
        workspace sub-path

    Raises:
        MissingFieldError: If a source is missing a required field
    """
    containers: list[Container] = []
    steps = tuple(steps)
    workspace_sub_path = ""

    for index, source in enumerate(sources):
        if source.kind == SourceKind.GIT:
            containers.append(git_to_container(source, index, images))
        elif source.kind == SourceKind.GCS:
            containers.append(gcs_to_container(source, index, images))
        elif source.kind == SourceKind.CUSTOM:
            # Normalized later with env, volume mounts, etc.
            steps = (custom_to_container(source),) + steps
        else:
            logger.debug(
                f"Skipping source {index}: no recognised source kind",
                extra={"stage": "sources"},
            )
        # Upstream validation allows at most one source with a sub_path; an
        # unrecognised source still sets it
        workspace_sub_path = source.sub_path

    return SourceResult(
        containers=tuple(containers),
        steps=steps,
        workspace_sub_path=workspace_sub_path,
    )
