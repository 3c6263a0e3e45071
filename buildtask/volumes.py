"""
Volume validation for the merged Task volume set.
"""

from typing import Iterable

from buildtask.errors import InvalidVolumeError
from buildtask.schemas import Volume


def validate_volumes(volumes: Iterable[Volume]) -> None:
    """
    Validate a volume set.

    Rules:
    - Every volume has a non-empty name
    - Names are unique
    - Every volume declares exactly one source kind, whose settings are a mapping

    Raises:
        InvalidVolumeError: On the first violation found
    """
    seen: set[str] = set()
    for index, volume in enumerate(volumes):
        if not volume.name:
            raise InvalidVolumeError(f"volumes[{index}]: missing field(s): name")
        if volume.name in seen:
            raise InvalidVolumeError(
                f"volumes[{index}]: duplicate volume name: {volume.name}", name=volume.name
            )
        seen.add(volume.name)

        if len(volume.source) != 1:
            kinds = ", ".join(sorted(volume.source)) or "none"
            raise InvalidVolumeError(
                f"volume {volume.name}: expected exactly one volume source, got {kinds}",
                name=volume.name,
            )
        (kind, settings), = volume.source.items()
        if settings is not None and not isinstance(settings, dict):
            raise InvalidVolumeError(
                f"volume {volume.name}: {kind} must be a mapping", name=volume.name
            )
