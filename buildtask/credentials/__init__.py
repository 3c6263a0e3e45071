"""
Credential builders.

A credential builder inspects a secret and, if it recognises it, returns the
command-line flags that tell the credential initializer container how to
activate it. Every matched secret is mounted at volume_name(secret.name).

- docker: registry credentials (basic-auth, dockercfg, dockerconfigjson)
- git: repository credentials (basic-auth, ssh-auth)
"""

from .base import (
    CredentialBuilder,
    VOLUME_PATH,
    volume_name,
    sort_annotations,
)
from .dockercreds import DockerCredentialBuilder
from .gitcreds import GitCredentialBuilder


def default_builders() -> list[CredentialBuilder]:
    """The builders run against every secret, in declaration order."""
    return [DockerCredentialBuilder(), GitCredentialBuilder()]


__all__ = [
    "CredentialBuilder",
    "DockerCredentialBuilder",
    "GitCredentialBuilder",
    "VOLUME_PATH",
    "volume_name",
    "sort_annotations",
    "default_builders",
]
