"""
Docker registry credentials.

Basic-auth secrets are matched per registry annotation:

    metadata:
      annotations:
        build.knative.dev/docker-0: https://gcr.io
    type: kubernetes.io/basic-auth

emits "-basic-docker=<secret>=https://gcr.io". Docker config secrets are
matched by type alone.
"""

from buildtask.schemas import Secret
from buildtask.schemas.identity import (
    SECRET_TYPE_BASIC_AUTH,
    SECRET_TYPE_DOCKERCFG,
    SECRET_TYPE_DOCKER_CONFIG_JSON,
)

from .base import CredentialBuilder, sort_annotations

ANNOTATION_PREFIX = "build.knative.dev/docker-"

BASIC_AUTH_FLAG = "basic-docker"
DOCKERCFG_FLAG = "docker-cfg"
DOCKER_CONFIG_FLAG = "docker-config"


class DockerCredentialBuilder(CredentialBuilder):
    """Matches secrets holding container registry credentials."""

    kind = "docker"

    def matching_annotations(self, secret: Secret) -> list[str]:
        if secret.type == SECRET_TYPE_BASIC_AUTH:
            return [
                f"-{BASIC_AUTH_FLAG}={secret.name}={value}"
                for value in sort_annotations(secret.annotations, ANNOTATION_PREFIX)
            ]
        if secret.type == SECRET_TYPE_DOCKERCFG:
            return [f"-{DOCKERCFG_FLAG}={secret.name}"]
        if secret.type == SECRET_TYPE_DOCKER_CONFIG_JSON:
            return [f"-{DOCKER_CONFIG_FLAG}={secret.name}"]
        return []
