"""
Translator - Transform a Build into a Task.

The translator runs four stages in a fixed order:
1. credentials: resolve the service account and its secrets
2. sources: git/gcs init containers; custom sources become leading steps
3. steps: normalize every step (env, mounts, working dir, name)
4. assembly: order the containers, merge volumes, add metadata

The resulting Task has:
- init containers: credential initializer, source containers, steps
- one "nop" container that marks the build as complete
- user, implicit and secret volumes
- an owner reference back to the Build

The Build passed in is deep-copied first and never modified.
"""

import copy
import logging
from typing import Optional, Sequence

from buildtask.config import ImageConfig
from buildtask.credentials import CredentialBuilder, default_builders
from buildtask.schemas import Build, Task
from buildtask.store import IdentityStore
from buildtask.stages import (
    assemble_task,
    make_credential_initializer,
    normalize_steps,
    resolve_sources,
)

logger = logging.getLogger(__name__)


class BuildToTaskTranslator:
    """
    Translator for turning a Build into an executable Task.

    Usage:
        store = InMemoryIdentityStore.from_yaml("identities.yaml")
        translator = BuildToTaskTranslator(store, images=ImageConfig(nop_image="nop:1"))
        task = translator.translate(build)
    """

    def __init__(
        self,
        store: IdentityStore,
        images: Optional[ImageConfig] = None,
        builders: Optional[Sequence[CredentialBuilder]] = None,
    ):
        """
        Initialize the translator.

        Args:
            store: Service account / secret lookups
            images: Images for the containers the translator adds
            builders: Credential builders, in matching order (defaults to docker, git)
        """
        self._store = store
        self._images = images or ImageConfig()
        self._builders = list(builders) if builders is not None else default_builders()

    def translate(self, build: Build) -> Task:
        """
        Translate a Build into a Task.

        Args:
            build: The Build to translate (not modified)

        Returns:
            A Task ready to be created

        Raises:
            MissingFieldError: If a source is missing a required field
            NotFoundError: If the service account or a secret is missing
            LookupFailureError: If the identity store fails
            InvalidVolumeError: If the merged volume set is invalid
        """
        build = copy.deepcopy(build)
        build_ref = f"{build.namespace}/{build.name}"
        logger.info(f"Translating build {build_ref}", extra={"build": build_ref})

        cred = make_credential_initializer(build, self._store, self._images, self._builders)
        logger.debug(f"  credential initializer: {len(cred.container.args)} args, "
                     f"{len(cred.volumes)} secret volumes",
                     extra={"build": build_ref, "stage": "credentials"})

        sources = resolve_sources(build.spec.all_sources(), build.spec.steps, self._images)
        logger.debug(f"  sources: {len(sources.containers)} containers, "
                     f"workspace sub-path {sources.workspace_sub_path!r}",
                     extra={"build": build_ref, "stage": "sources"})

        steps = normalize_steps(sources.steps, sources.workspace_sub_path)

        init_containers = (cred.container,) + sources.containers + steps
        task = assemble_task(build, init_containers, cred.volumes, self._images)

        logger.info(f"Translated build {build_ref}: "
                    f"{len(init_containers)} init containers, {len(task.spec.volumes)} volumes",
                    extra={"build": build_ref, "stage": "assembly"})
        return task


def make_task(
    build: Build,
    store: IdentityStore,
    images: Optional[ImageConfig] = None,
) -> Task:
    """
    Convenience function to translate a Build with the default builders.

    Args:
        build: The Build to translate
        store: Service account / secret lookups
        images: Images for the containers the translator adds

    Returns:
        A Task ready to be created
    """
    return BuildToTaskTranslator(store, images=images).translate(build)
