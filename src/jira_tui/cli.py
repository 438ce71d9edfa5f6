"""CLI entry point using Click."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import click

from jira_tui.config import CONFIG_DIR_ENV, CONFIG_FILE, ConfigError, default_config_dir, init_config_dir, load_config

LOG_FILE = "jira-tui.log"


class _DefaultGroup(click.Group):
    """Insert 'run' when the first arg is not a registered subcommand."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.no_args_is_help = False  # bare `jira-tui` routes to run

    def invoke(self, ctx):
        if not ctx._protected_args and not ctx.args:
            ctx._protected_args = ["run"]
        return super().invoke(ctx)

    def resolve_command(self, ctx, args):
        cmd_name = args[0] if args else None
        if cmd_name and cmd_name in self.commands:
            return super().resolve_command(ctx, args)
        return super().resolve_command(ctx, ["run"] + list(args))


def setup_logging(config_dir: Path, verbose: bool = False) -> Path:
    """Log to a rotating file in the config directory; the terminal belongs to the TUI."""
    config_dir.mkdir(parents=True, exist_ok=True)
    log_file = config_dir / LOG_FILE

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_handler = logging.handlers.RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.addHandler(file_handler)

    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_file


@click.group(cls=_DefaultGroup)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=CONFIG_DIR_ENV,
    default=None,
    help="Directory holding config.toml and secrets.yaml (default: ~/.jira-tui).",
)
@click.version_option(package_name="jira-tui")
@click.pass_context
def main(ctx, config_dir: Path | None) -> None:
    """Jira TUI - browse and edit Jira issues from the terminal."""
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir or default_config_dir()


@main.command()
@click.option("--verbose", "-v", is_flag=True, help="Log API requests at debug level.")
@click.pass_context
def run(ctx, verbose: bool) -> None:
    """Open the issue browser."""
    from jira_tui.app import JiraApp
    from jira_tui.client import JiraClient
    from jira_tui.usercache import load_user_cache, user_cache_path

    config_dir: Path = ctx.obj["config_dir"]
    if not (config_dir / CONFIG_FILE).exists():
        for path in init_config_dir(config_dir):
            click.echo(f"Created {path}")
        click.echo("Edit these files with your Jira site and credentials, then run 'jira-tui' again.")
        raise SystemExit(0)

    try:
        config = load_config(config_dir)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    setup_logging(config_dir, verbose=verbose)
    cache_path = user_cache_path(config_dir)
    client = JiraClient(config.jira.base_url, config.jira.email, config.jira.api_token)
    app = JiraApp(
        config,
        client=client,
        user_cache_path=cache_path,
        cached_users=load_user_cache(cache_path),
    )
    app.run()


@main.command("init")
@click.pass_context
def init_cmd(ctx) -> None:
    """Write sample config.toml and secrets.yaml (existing files are kept)."""
    config_dir: Path = ctx.obj["config_dir"]
    written = init_config_dir(config_dir)
    if not written:
        click.echo(f"Config already exists in {config_dir}")
        return
    for path in written:
        click.echo(f"Created {path}")
    click.echo("Run 'jira-tui' to open the issue browser.")
