"""
Constants and naming shared by the translation stages.

IMPORTANT: Changing the container name prefixes without changing the log
collection configuration will break log collection for init containers.
"""

import posixpath

from buildtask.schemas import EnvVar, Volume, VolumeMount

WORKSPACE_DIR = "/workspace"
HOME_DIR = "/builder/home"

WORKSPACE_VOLUME = "workspace"
HOME_VOLUME = "home"

# Injected into every credential, source and step container.
IMPLICIT_ENV_VARS: tuple[EnvVar, ...] = (
    EnvVar(name="HOME", value=HOME_DIR),
)
IMPLICIT_VOLUME_MOUNTS: tuple[VolumeMount, ...] = (
    VolumeMount(name=WORKSPACE_VOLUME, mount_path=WORKSPACE_DIR),
    VolumeMount(name=HOME_VOLUME, mount_path=HOME_DIR),
)
IMPLICIT_VOLUMES: tuple[Volume, ...] = (
    Volume.empty_dir(WORKSPACE_VOLUME),
    Volume.empty_dir(HOME_VOLUME),
)

# Prefixes added to the names of init containers.
INIT_CONTAINER_PREFIX = "build-step-"
UNNAMED_INIT_CONTAINER_PREFIX = "build-step-unnamed-"

CREDS_INIT = "credential-initializer"
GIT_SOURCE = "git-source"
GCS_SOURCE = "gcs-source"
CUSTOM_SOURCE = "custom-source"

NOP_CONTAINER_NAME = "nop"

# Identifies the Tasks belonging to a Build.
BUILD_NAME_LABEL_KEY = "build.knative.dev/buildName"
SIDECAR_INJECT_ANNOTATION = "sidecar.istio.io/inject"

DEFAULT_SERVICE_ACCOUNT = "default"


def source_container_name(source_kind: str, index: int, source_name: str = "") -> str:
    """
    Name of a git/gcs source container.

    build-step-<kind>-<source name>, or build-step-<kind>-<index> when unnamed.
    """
    suffix = source_name if source_name else str(index)
    return f"{INIT_CONTAINER_PREFIX}{source_kind}-{suffix}"


def custom_source_name(source_name: str = "") -> str:
    """Name given to a custom source container before step normalization."""
    if not source_name:
        return CUSTOM_SOURCE
    return f"{CUSTOM_SOURCE}-{source_name}"


def step_container_name(index: int, step_name: str = "") -> str:
    """
    Name of a normalized step.

    build-step-<name> for named steps, build-step-unnamed-<index> otherwise.
    """
    if not step_name:
        return f"{UNNAMED_INIT_CONTAINER_PREFIX}{index}"
    return f"{INIT_CONTAINER_PREFIX}{step_name}"


def clean_path(path: str) -> str:
    """
    Lexically clean a slash-separated path.

    Like posixpath.normpath, except that leading slashes collapse to one, so
    "//workspace" and "/workspace/" both clean to "/workspace".
    """
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("/"):
        return "/" + cleaned.lstrip("/")
    return cleaned


def workspace_path(target_path: str) -> str:
    """Join a target path under the workspace, even when it is absolute."""
    return clean_path(posixpath.join(WORKSPACE_DIR, target_path.lstrip("/")))
