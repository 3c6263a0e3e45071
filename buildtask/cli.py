"""
CLI interface for buildtask.

Provides commands to translate Build manifests into Pod manifests and to
inspect or initialize configuration.
"""

import sys
from pathlib import Path

import click
import yaml

from buildtask import __version__
from buildtask.errors import BuildTaskError


@click.group()
@click.version_option(version=__version__, prog_name="buildtask")
@click.option("--config", "config_path", type=click.Path(path_type=Path),
              help="Config file (default: $BUILDTASK_HOME/config.yaml)")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx, config_path, log_level):
    """
    buildtask - Translate Builds into executable Tasks.
    """
    from buildtask.config import load_config
    from buildtask.utils import setup_logging

    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except (FileNotFoundError, BuildTaskError) as e:
        # init can still run; commands that need config check config_error
        ctx.obj["config_error"] = str(e)
        setup_logging(log_level=log_level or "INFO")
        return

    ctx.obj["config"] = config
    setup_logging(
        log_level=log_level or config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
    )


def _require_config(ctx):
    """Return the loaded config or exit with the load error."""
    if "config" not in ctx.obj:
        click.echo(f"✗ Config not loaded: {ctx.obj.get('config_error', 'Unknown error')}", err=True)
        click.echo("Run 'buildtask init --force' to create a default configuration file.", err=True)
        raise SystemExit(1)
    return ctx.obj["config"]


@main.command("translate")
@click.argument("build_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--store", "store_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="YAML file of ServiceAccount and Secret manifests")
@click.option("--output", "-o", "output_format", type=click.Choice(["yaml", "json"]),
              default="yaml", show_default=True)
@click.option("--creds-image", help="Image preparing the build's credentials")
@click.option("--git-image", help="Image containing the git binary")
@click.option("--gcs-fetcher-image", help="Image containing the GCS fetcher")
@click.option("--nop-image", help="Image run at the end of the build")
@click.pass_context
def translate(ctx, build_file, store_file, output_format, creds_image, git_image,
              gcs_fetcher_image, nop_image):
    """
    Translate a Build manifest into a Pod manifest.

    BUILD_FILE is a YAML or JSON Build manifest.

    Without --store, only the "default" service account exists and it
    references no secrets.

    Examples:

        buildtask translate build.yaml

        buildtask translate build.yaml --store identities.yaml -o json
    """
    from buildtask.schemas import Build, ServiceAccount
    from buildtask.store import InMemoryIdentityStore
    from buildtask.translator import BuildToTaskTranslator
    from buildtask.utils import dump_manifest, load_manifest

    config = _require_config(ctx)
    images = config.images.override(
        creds_image=creds_image,
        git_image=git_image,
        gcs_fetcher_image=gcs_fetcher_image,
        nop_image=nop_image,
    )

    try:
        build = Build.from_dict(load_manifest(build_file))
        if store_file is not None:
            store = InMemoryIdentityStore.from_yaml(store_file)
        else:
            store = InMemoryIdentityStore([ServiceAccount(name="default", namespace=build.namespace)])
        task = BuildToTaskTranslator(store, images=images).translate(build)
    except (BuildTaskError, ValueError, KeyError, yaml.YAMLError) as e:
        click.echo(f"✗ {build_file}: {e}", err=True)
        raise SystemExit(1)

    click.echo(dump_manifest(task.to_dict(), output_format), nl=False)


@main.group("config")
def config_group():
    """Inspect configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Print the effective configuration."""
    config = _require_config(ctx)
    click.echo(yaml.safe_dump(config.to_dict(), sort_keys=False), nl=False)


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize buildtask configuration."""
    from buildtask.config import BuildTaskConfig, get_buildtask_home

    home = get_buildtask_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / "config.yaml"
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    cfg_path.write_text(yaml.safe_dump(BuildTaskConfig().to_dict(), sort_keys=False))
    click.echo(f"Initialized buildtask config at {cfg_path}")


if __name__ == "__main__":
    sys.exit(main())
