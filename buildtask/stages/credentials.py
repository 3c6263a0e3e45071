"""
Credential stage - build the credential initializer container.

Looks up the Build's service account and each secret it references, runs the
credential builders against every secret, and collects:
- the builders' flags as the container's args
- one secret volume and mount per matched secret
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from buildtask.config import ImageConfig
from buildtask.credentials import CredentialBuilder, default_builders, volume_name
from buildtask.schemas import Build, Container, Volume, VolumeMount
from buildtask.store import IdentityStore

from .base import (
    CREDS_INIT,
    DEFAULT_SERVICE_ACCOUNT,
    IMPLICIT_ENV_VARS,
    IMPLICIT_VOLUME_MOUNTS,
    INIT_CONTAINER_PREFIX,
    WORKSPACE_DIR,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialResult:
    """Output of the credential stage."""
    container: Container
    volumes: tuple[Volume, ...] = field(default_factory=tuple)


def service_account_name(build: Build) -> str:
    """The service account to resolve; "default" when the Build names none."""
    return build.spec.service_account_name or DEFAULT_SERVICE_ACCOUNT


def secret_volume_name(secret_name: str) -> str:
    return f"secret-volume-{secret_name}"


def make_credential_initializer(
    build: Build,
    store: IdentityStore,
    images: ImageConfig,
    builders: Optional[Sequence[CredentialBuilder]] = None,
) -> CredentialResult:
    """
    Build the credential initializer container and its secret volumes.

    Args:
        build: The Build being translated
        store: Service account / secret lookups
        images: Image configuration (creds_image is used)
        builders: Credential builders, in matching order (defaults to docker, git)

    Returns:
        CredentialResult with the container and the secret volumes

    Raises:
        NotFoundError: If the service account or a referenced secret is missing
        LookupFailureError: If the store fails
    """
    if builders is None:
        builders = default_builders()

    namespace = build.namespace
    sa = store.get_service_account(namespace, service_account_name(build))

    volumes: list[Volume] = []
    volume_mounts: list[VolumeMount] = list(IMPLICIT_VOLUME_MOUNTS)
    args: list[str] = []

    for secret_ref in sa.secrets:
        secret = store.get_secret(namespace, secret_ref.name)

        matched = False
        for builder in builders:
            flags = builder.matching_annotations(secret)
            if flags:
                matched = True
                args.extend(flags)
                logger.debug(
                    f"Secret {secret.name} matched {builder.kind} credentials",
                    extra={"stage": "credentials"},
                )

        if matched:
            name = secret_volume_name(secret.name)
            volume_mounts.append(VolumeMount(name=name, mount_path=volume_name(secret.name)))
            volumes.append(Volume.from_secret(name, secret.name))

    container = Container(
        name=INIT_CONTAINER_PREFIX + CREDS_INIT,
        image=images.creds_image,
        args=tuple(args),
        env=IMPLICIT_ENV_VARS,
        volume_mounts=tuple(volume_mounts),
        working_dir=WORKSPACE_DIR,
    )
    return CredentialResult(container=container, volumes=tuple(volumes))
