"""
IdentityStore - read access to service accounts and secrets.

The translator only needs two lookups. Production callers back them with the
cluster API; InMemoryIdentityStore backs them with manifests held in memory
or loaded from a multi-document YAML file, for the CLI and tests.

Contract for implementations:
- Return the object when it exists
- Raise NotFoundError when it does not
- Raise LookupFailureError for anything else
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from buildtask.errors import LookupFailureError, NotFoundError
from buildtask.schemas import ServiceAccount, Secret

SERVICE_ACCOUNT = "ServiceAccount"
SECRET = "Secret"


class IdentityStore(ABC):
    """Abstract read-only store of service accounts and secrets."""

    @abstractmethod
    def get_service_account(self, namespace: str, name: str) -> ServiceAccount:
        """
        Look up a service account.

        Raises:
            NotFoundError: If it does not exist
            LookupFailureError: If the store failed
        """
        pass

    @abstractmethod
    def get_secret(self, namespace: str, name: str) -> Secret:
        """
        Look up a secret.

        Raises:
            NotFoundError: If it does not exist
            LookupFailureError: If the store failed
        """
        pass


class InMemoryIdentityStore(IdentityStore):
    """
    Identity store over Kubernetes-style manifests.

    Documents are indexed by (kind, namespace, name) when added and parsed on
    lookup, so a malformed document only fails the lookups that reach it.

    Usage:
        store = InMemoryIdentityStore.from_yaml("identities.yaml")
        sa = store.get_service_account("default", "builder")
    """

    def __init__(self, documents: Optional[Iterable[dict[str, Any]]] = None):
        self._documents: dict[tuple[str, str, str], dict[str, Any]] = {}
        for doc in documents or ():
            self.add(doc)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "InMemoryIdentityStore":
        """
        Load every document in a (multi-document) YAML file.

        Raises:
            LookupFailureError: If the file cannot be read or parsed, or holds a
                document that is not a named ServiceAccount or Secret
        """
        path = Path(path)
        try:
            with open(path, "r") as f:
                documents = [d for d in yaml.safe_load_all(f) if d]
        except (OSError, yaml.YAMLError) as e:
            raise LookupFailureError(f"Failed to load identity store {path}: {e}") from e
        try:
            return cls(documents)
        except ValueError as e:
            raise LookupFailureError(f"Failed to load identity store {path}: {e}") from e

    def add(self, document: dict[str, Any] | ServiceAccount | Secret) -> None:
        """
        Add a ServiceAccount or Secret (object or manifest dict).

        Raises:
            ValueError: If the document is not a named ServiceAccount or Secret
        """
        if isinstance(document, (ServiceAccount, Secret)):
            document = document.to_dict()
        if not isinstance(document, dict):
            raise ValueError(f"Expected a manifest mapping, got {type(document).__name__}")
        kind = document.get("kind")
        if kind not in (SERVICE_ACCOUNT, SECRET):
            raise ValueError(f"Unsupported document kind: {kind}")
        metadata = document.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError(f"{kind} document metadata is not a mapping")
        name = metadata.get("name")
        if not name:
            raise ValueError(f"{kind} document has no metadata.name")
        namespace = metadata.get("namespace") or "default"
        self._documents[(kind, namespace, name)] = document

    def get_service_account(self, namespace: str, name: str) -> ServiceAccount:
        return self._get(SERVICE_ACCOUNT, namespace, name, ServiceAccount.from_dict)

    def get_secret(self, namespace: str, name: str) -> Secret:
        return self._get(SECRET, namespace, name, Secret.from_dict)

    def _get(self, kind: str, namespace: str, name: str, parse):
        document = self._documents.get((kind, namespace, name))
        if document is None:
            raise NotFoundError(kind, namespace, name)
        try:
            return parse(document)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise LookupFailureError(
                f'{kind} "{name}" in namespace "{namespace}" is malformed: {e}'
            ) from e

    def __len__(self) -> int:
        return len(self._documents)
