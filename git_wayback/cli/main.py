"""Main CLI entry point for git-wayback."""

import click
import logging
import sys
import yaml
from pathlib import Path
from typing import Optional
from datetime import datetime

from rich.console import Console

from ..core.config import ConfigManager
from ..core.errors import CutoffParseError, HistoryError, NotFoundError, RepositoryOpenError
from ..core.models import Outcome, SelectionPolicy, parse_wayback_time
from ..core.report import ResultReport
from ..core.wayback import find_all, find_current_tag


logger = logging.getLogger(__name__)


def setup_logging(level: str, verbose: bool = False) -> None:
    """Configure logging on stderr for CLI runs."""
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("git_wayback").setLevel(log_level)


def make_report(config: dict) -> ResultReport:
    display = config.get('display', {})
    console = Console(no_color=not display.get('color', True), highlight=False)
    return ResultReport(
        console,
        hash_length=display.get('hash_length', 12),
        tag_width=display.get('tag_width', 12),
    )


def fail(message: str, code: int = 1) -> None:
    """Print a red error message on stderr and exit."""
    click.echo(click.style(f"error: {message}", fg='red', bold=True), err=True)
    sys.exit(code)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Path to configuration file')
@click.option('--project-root', '-p', type=click.Path(exists=True),
              help='Directory holding the .git-wayback configuration')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], project_root: Optional[str], verbose: bool):
    """git-wayback - find the newest tag and commit made before a point in time."""
    ctx.ensure_object(dict)

    project_path = Path(project_root) if project_root else Path.cwd()
    config_manager = ConfigManager(project_path)

    if config:
        config_data = config_manager.load_config(Path(config))
    else:
        config_data = config_manager.load_config()

    validation_errors = config_manager.validate_config(config_data)
    # validate reports the errors itself
    if validation_errors and ctx.invoked_subcommand != 'validate':
        click.echo("Configuration validation errors:", err=True)
        for error in validation_errors:
            click.echo(f"  - {error}", err=True)
        if not ctx.resilient_parsing:
            sys.exit(1)

    level = 'WARNING' if validation_errors else config_data['logging']['level']
    setup_logging(level, verbose)

    # Store in context for subcommands
    ctx.obj['config'] = config_data
    ctx.obj['config_manager'] = config_manager
    ctx.obj['project_root'] = project_path
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('path', type=click.Path())
@click.argument('when')
@click.option('--ref', default=None, help='Ref or commit the history walk starts from')
@click.option('--tagged-only', 'policy', flag_value='tagged',
              help='Only search for a tagged commit')
@click.option('--untagged-only', 'policy', flag_value='untagged',
              help='Only search the commit history')
@click.option('--first-parent', is_flag=True,
              help='Follow only the first parent of merge commits')
@click.option('--require-tag-found', is_flag=True,
              help='Exit with status 1 when no tag predates the wayback time')
@click.option('--debug', is_flag=True, help='Trace every commit and tag visited')
@click.pass_context
def find(ctx: click.Context, path: str, when: str, ref: Optional[str], policy: Optional[str],
         first_parent: bool, require_tag_found: bool, debug: bool):
    """Find the newest tag and commit committed before WHEN.

    WHEN uses the layout 'YYYY-MM-DD HH:MM:SS +HHMM', for example
    '2017-09-04 19:43:36 +0300'.
    """
    from ..backends.git_backend import GitHistorySource

    config = ctx.obj['config']
    search = config.get('wayback', {})

    # Fail fast before the repository is touched
    try:
        wayback_time = parse_wayback_time(when)
    except CutoffParseError as e:
        click.echo("Run 'git-wayback layout' to see the accepted format.", err=True)
        fail(str(e))

    if debug:
        logging.getLogger("git_wayback").setLevel(logging.DEBUG)

    if policy:
        policies = [SelectionPolicy(policy)]
    else:
        policies = [SelectionPolicy(p) for p in search.get('policies', ['tagged', 'untagged'])]

    first_parent = first_parent or search.get('first_parent', False)
    start = ref or search.get('start_ref', 'HEAD')

    try:
        source = GitHistorySource.open(path, first_parent=first_parent)
    except RepositoryOpenError as e:
        fail(str(e))

    report = make_report(config)
    current_tag = None

    with source:
        results = find_all(source, wayback_time, start=start, policies=policies)

        if config.get('display', {}).get('show_current_tag'):
            try:
                current_tag = find_current_tag(source)
            except NotFoundError:
                current_tag = None
            except HistoryError as e:
                logger.warning(f"Cannot look up the tag of HEAD: {e}")

    report.render(wayback_time, results)
    if config.get('display', {}).get('show_current_tag'):
        report.current_tag(current_tag)

    if any(result.outcome is Outcome.FAILED for result in results):
        sys.exit(1)

    if require_tag_found and any(
        result.policy is SelectionPolicy.TAGGED and result.outcome is Outcome.NOT_FOUND
        for result in results
    ):
        sys.exit(1)


@cli.command()
@click.argument('path', type=click.Path())
@click.pass_context
def tag(ctx: click.Context, path: str):
    """Show the tag pointing at HEAD of the repository at PATH."""
    from ..backends.git_backend import GitHistorySource

    try:
        source = GitHistorySource.open(path)
    except RepositoryOpenError as e:
        fail(str(e))

    with source:
        try:
            name = find_current_tag(source)
        except NotFoundError as e:
            click.echo(str(e))
            sys.exit(1)
        except HistoryError as e:
            fail(str(e))

    click.echo(name)


@cli.command()
@click.pass_context
def layout(ctx: click.Context):
    """Show the wayback time layout and the current time in it."""
    report = make_report(ctx.obj['config'])
    report.layout_help(datetime.now().astimezone())


@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing configuration file')
@click.pass_context
def init(ctx: click.Context, force: bool):
    """Write a default configuration file."""
    config_manager = ctx.obj['config_manager']
    config_path = config_manager.get_config_path()

    if config_path.exists() and not force:
        click.echo(f"Configuration already exists: {config_path}")
        click.echo("Use --force to overwrite it.")
        return

    if config_manager.create_default_config_file():
        click.echo(f"✓ Created configuration file: {config_path}")
    else:
        fail(f"Failed to create configuration file: {config_path}")


@cli.command()
@click.pass_context
def config(ctx: click.Context):
    """Show current configuration."""
    config_data = ctx.obj['config']
    config_manager = ctx.obj['config_manager']

    click.echo(f"Configuration file: {config_manager.get_config_path()}")
    click.echo("Current configuration:")
    click.echo("=" * 50)
    click.echo(yaml.dump(config_data, default_flow_style=False, indent=2).rstrip())


@cli.command()
@click.option('--validate-only', is_flag=True, help='Only validate configuration without showing details')
@click.pass_context
def validate(ctx: click.Context, validate_only: bool):
    """Validate the current configuration."""
    config_data = ctx.obj['config']
    config_manager = ctx.obj['config_manager']

    validation_errors = config_manager.validate_config(config_data)

    if validation_errors:
        click.echo("Configuration validation failed:", err=True)
        for error in validation_errors:
            click.echo(f"  ✗ {error}", err=True)
        sys.exit(1)
    else:
        click.echo("✓ Configuration is valid")
        if not validate_only:
            click.echo(f"Configuration file: {config_manager.get_config_path()}")


if __name__ == '__main__':
    cli()
