"""
Configuration management for buildtask.

Configuration lives in $BUILDTASK_HOME/config.yaml (default
~/.config/buildtask/config.yaml):

    images:
      creds_image: gcr.io/example/creds-init:latest
      git_image: gcr.io/example/git-init:latest
      gcs_fetcher_image: gcr.io/cloud-builders/gcs-fetcher:latest
      nop_image: gcr.io/example/nop:latest
    logging:
      level: INFO
      format: pretty
      file: ~/.local/state/buildtask/buildtask.log
    env_file: ~/.config/buildtask/.env

Image references can be overridden at startup through BUILDTASK_*_IMAGE
environment variables (applied after the file and env_file).
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from buildtask.errors import ConfigError

DEFAULT_CREDS_IMAGE = "override-with-creds:latest"
DEFAULT_GIT_IMAGE = "override-with-git:latest"
DEFAULT_GCS_FETCHER_IMAGE = "gcr.io/cloud-builders/gcs-fetcher:latest"
DEFAULT_NOP_IMAGE = "override-with-nop:latest"

# Environment variable -> ImageConfig field
IMAGE_ENV_VARS = {
    "BUILDTASK_CREDS_IMAGE": "creds_image",
    "BUILDTASK_GIT_IMAGE": "git_image",
    "BUILDTASK_GCS_FETCHER_IMAGE": "gcs_fetcher_image",
    "BUILDTASK_NOP_IMAGE": "nop_image",
}


@dataclass(frozen=True)
class ImageConfig:
    """
    Images used for the containers the translator adds.

    Attributes:
        creds_image: Prepares the build's credentials
        git_image: Contains the git binary used by git sources
        gcs_fetcher_image: Fetches GCS sources
        nop_image: Runs last and logs build success
    """
    creds_image: str = DEFAULT_CREDS_IMAGE
    git_image: str = DEFAULT_GIT_IMAGE
    gcs_fetcher_image: str = DEFAULT_GCS_FETCHER_IMAGE
    nop_image: str = DEFAULT_NOP_IMAGE

    def override(self, **overrides: Optional[str]) -> "ImageConfig":
        """Copy with every non-empty override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown image option(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v})

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class BuildTaskConfig:
    """Complete buildtask configuration."""
    images: ImageConfig = field(default_factory=ImageConfig)
    log_level: str = "INFO"
    log_format: str = "pretty"
    log_file: Optional[str] = None
    env_file: Optional[str] = None

    def get_log_file_path(self) -> Optional[Path]:
        """Log file path, user-expanded, or None for console only."""
        return Path(self.log_file).expanduser() if self.log_file else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "images": self.images.to_dict(),
            "logging": {
                "level": self.log_level,
                "format": self.log_format,
                **({"file": self.log_file} if self.log_file else {}),
            },
            **({"env_file": self.env_file} if self.env_file else {}),
        }


def get_buildtask_home() -> Path:
    """Directory holding config.yaml: $BUILDTASK_HOME or ~/.config/buildtask."""
    home = os.environ.get("BUILDTASK_HOME")
    if home:
        return Path(home).expanduser()
    return Path("~/.config/buildtask").expanduser()


def _load_yaml(config_path: Path) -> dict[str, Any]:
    """Load and parse the YAML configuration file."""
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")
    return data


def _images_from_env(images: ImageConfig) -> ImageConfig:
    """Apply BUILDTASK_*_IMAGE environment overrides."""
    return images.override(**{
        attr: os.environ.get(var) for var, attr in IMAGE_ENV_VARS.items()
    })


def load_config(config_path: Optional[Path] = None) -> BuildTaskConfig:
    """
    Load buildtask configuration.

    Args:
        config_path: Path to config file. Defaults to $BUILDTASK_HOME/config.yaml;
                     when that default file is absent, built-in defaults are used.

    Returns:
        BuildTaskConfig instance

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ConfigError: If the config is invalid
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = get_buildtask_home() / "config.yaml"
    config_path = Path(config_path).expanduser()

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"buildtask config.yaml not found at {config_path}")
        data: dict[str, Any] = {}
    else:
        data = _load_yaml(config_path)

    images_data = data.get("images") or {}
    if not isinstance(images_data, dict):
        raise ConfigError("'images' must be a mapping")
    images = ImageConfig().override(**images_data)

    logging_data = data.get("logging") or {}
    env_file = data.get("env_file")
    if env_file:
        env_path = Path(env_file).expanduser()
        if env_path.exists():
            load_dotenv(env_path)

    return BuildTaskConfig(
        images=_images_from_env(images),
        log_level=str(logging_data.get("level", "INFO")).upper(),
        log_format=logging_data.get("format", "pretty"),
        log_file=logging_data.get("file"),
        env_file=env_file,
    )
