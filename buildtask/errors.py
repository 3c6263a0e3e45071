"""
Error classes for buildtask translation.

Every failure aborts the whole translation; no partial Task is returned.
The caller (usually a controller loop) decides how to surface the error on
the originating Build and whether to retry.

- MissingFieldError: a required source field was empty or disallowed
- InvalidSourceError: a source populated more than one variant
- NotFoundError: a referenced service account or secret does not exist
- InvalidVolumeError: the merged volume set failed validation
- LookupFailureError: the identity store failed for another reason

Error handling contract:
- Errors are exceptions, not values
- The translator never retries and never wraps store errors
"""

from typing import Optional


class BuildTaskError(Exception):
    """Base exception for buildtask."""
    pass


class MissingFieldError(BuildTaskError):
    """
    A required field was empty, or a field that must be empty was set.

    Attributes:
        path: Dotted path of the offending field (e.g. "b.spec.source.git.url")
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"missing field(s): {path}")


class InvalidSourceError(BuildTaskError):
    """
    A source declared more than one of git, gcs and custom.

    Attributes:
        path: Dotted path of the offending source
        kinds: The variants that were populated
    """

    def __init__(self, path: str, kinds: tuple[str, ...] = ()):
        self.path = path
        self.kinds = kinds
        detail = f" ({', '.join(kinds)})" if kinds else ""
        super().__init__(f"expected exactly one, got both: {path}{detail}")


class NotFoundError(BuildTaskError):
    """
    A service account or secret was not found in the identity store.

    Attributes:
        kind: "ServiceAccount" or "Secret"
        namespace: Namespace that was searched
        name: Name that was requested
    """

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f'{kind} "{name}" not found in namespace "{namespace}"')


class InvalidVolumeError(BuildTaskError):
    """
    The merged volume set is structurally invalid.

    Attributes:
        name: The offending volume name, when one can be identified
    """

    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name
        super().__init__(message)


class LookupFailureError(BuildTaskError):
    """
    The identity store failed for a reason other than not-found.

    Examples:
    - Backend unavailable
    - Stored document could not be parsed
    """
    pass


class ConfigError(BuildTaskError):
    """Configuration validation error."""
    pass
