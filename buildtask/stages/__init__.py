"""
Translation stages for buildtask.

Each stage handles one part of turning a Build into a Task, in this order:
- credentials: credential initializer container and secret volumes
- sources: git/gcs init containers, custom sources prepended to steps
- steps: implicit env, mounts, working dir and names for every step
- assembly: container ordering, volume merge/validation, Task metadata
"""

from .credentials import CredentialResult, make_credential_initializer
from .sources import SourceResult, resolve_sources
from .steps import normalize_steps
from .assembly import assemble_task

__all__ = [
    "CredentialResult",
    "make_credential_initializer",
    "SourceResult",
    "resolve_sources",
    "normalize_steps",
    "assemble_task",
]
