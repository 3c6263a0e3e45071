"""
Git repository credentials.

Basic-auth and ssh-auth secrets are matched per host annotation:

    metadata:
      annotations:
        build.knative.dev/git-0: https://github.com
    type: kubernetes.io/basic-auth

emits "-basic-git=<secret>=https://github.com".
"""

from buildtask.schemas import Secret
from buildtask.schemas.identity import SECRET_TYPE_BASIC_AUTH, SECRET_TYPE_SSH_AUTH

from .base import CredentialBuilder, sort_annotations

ANNOTATION_PREFIX = "build.knative.dev/git-"

BASIC_AUTH_FLAG = "basic-git"
SSH_FLAG = "ssh-git"


class GitCredentialBuilder(CredentialBuilder):
    """Matches secrets holding git credentials."""

    kind = "git"

    def matching_annotations(self, secret: Secret) -> list[str]:
        if secret.type == SECRET_TYPE_BASIC_AUTH:
            flag = BASIC_AUTH_FLAG
        elif secret.type == SECRET_TYPE_SSH_AUTH:
            flag = SSH_FLAG
        else:
            return []
        return [
            f"-{flag}={secret.name}={value}"
            for value in sort_annotations(secret.annotations, ANNOTATION_PREFIX)
        ]
