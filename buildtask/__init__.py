"""
buildtask - Translate declarative Builds into executable Tasks.

A Build (sources + steps + identity) is turned into a single pod-like Task:
a credential initializer, source fetchers and the build steps as init
containers, followed by a no-op completion container.
"""

__version__ = "0.1.0"


__all__ = [
    "BuildToTaskTranslator",
    "make_task",
    "ImageConfig",
    "BuildTaskConfig",
    "load_config",
    "get_buildtask_home",
]

from .config import BuildTaskConfig, ImageConfig, load_config, get_buildtask_home
from .translator import BuildToTaskTranslator, make_task
