"""
Base credential builder protocol and shared helpers.
"""

import posixpath
from abc import ABC, abstractmethod

from buildtask.schemas import Secret

# Directory under which matched secrets are mounted in the credential container.
VOLUME_PATH = "/var/build-secrets"


def volume_name(secret_name: str) -> str:
    """Mount path for a matched secret."""
    return posixpath.join(VOLUME_PATH, secret_name)


def sort_annotations(annotations: dict[str, str], prefix: str) -> list[str]:
    """
    Values of annotations whose key starts with prefix, ordered by key.

    Args:
        annotations: Secret annotations
        prefix: Annotation key prefix (e.g. "build.knative.dev/git-")

    Returns:
        Annotation values, sorted by their keys
    """
    return [annotations[key] for key in sorted(k for k in annotations if k.startswith(prefix))]


class CredentialBuilder(ABC):
    """
    Abstract base class for credential builders.

    Builders are stateless; a secret "matches" a builder when
    matching_annotations() returns one or more flags.
    """

    # Human-readable name used in logs.
    kind: str = ""

    @abstractmethod
    def matching_annotations(self, secret: Secret) -> list[str]:
        """
        Flags for the credential initializer, or an empty list if no match.

        Args:
            secret: The secret to inspect

        Returns:
            Ordered list of command-line flags
        """
        pass
