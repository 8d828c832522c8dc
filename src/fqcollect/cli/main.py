import os
import sys
import time
import logging
from typing import Optional

import click
from rich.panel import Panel
from rich.text import Text

from .. import __version__
from ..config import get_config, ALLOWED_LOG_LEVELS
from ..errors import FqcollectError, InputNotFound, SearchRootNotFound, OutputNotWritable, UnsupportedPlatform
from ..fs.samples import read_sample_list
from ..fs.locator import LocatorSettings, SampleFileLocator, SampleResult
from ..installer import CommandRunner, SingularityInstaller, require_supported_platform, ubuntu_major_version
from ..utils.coloring import colorize_path, format_result
from ..utils.console import console

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONTEXT_SETTINGS = {'help_option_names': ['-h', '--help']}

INSTALLER_DESCRIPTION = (
    "This command installs singularity. By default for all users in /usr/local. "
    "To install for the current user only provide a (writable) path with the -p option. "
    "This also assumes that all system dependencies are already installed.\n"
    "Please provide sudo password when asked."
)
INTERACTIVE_PAUSE_SECONDS = 10


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, unless something already attached handlers."""
    level_name = (level or get_config().get_log_level()).upper()
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=getattr(logging, level_name, logging.WARNING), format=LOG_FORMAT)


# --- Usage error handling ---

class ToolUsageError(click.UsageError):
    """Usage error that prints the message and the full help, then exits 1."""
    exit_code = 1

    def show(self, file=None) -> None:
        click.echo(f"Error: {self.format_message()}", err=True)
        if self.ctx is not None:
            click.echo("", err=True)
            click.echo(self.ctx.get_help(), err=True)


def _show_help_and_fail(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(1)


class ToolCommand(click.Command):
    """Command whose -h exits with status 1 and whose parse errors exit with status 1."""

    def get_help_option(self, ctx: click.Context) -> Optional[click.Option]:
        option = super().get_help_option(ctx)
        if option is not None:
            option.callback = _show_help_and_fail
        return option

    def parse_args(self, ctx: click.Context, args):
        try:
            return super().parse_args(ctx, args)
        except ToolUsageError:
            raise
        except click.UsageError as e:
            raise ToolUsageError(e.format_message(), ctx=ctx) from e


# --- Click CLI Definition ---

@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '-V', '--version')
@click.option('--log-level', type=click.Choice(ALLOWED_LOG_LEVELS, case_sensitive=False), default=None,
              help="Logging level (default: [DEFAULT] log_level from the config file).")
def cli(log_level: Optional[str]):
    """fqcollect: find and copy FASTQ files, install Singularity."""
    setup_logging(log_level)


def _locator_default(key: str):
    return lambda: get_config().get('LOCATOR', key)


def _copy_files_default() -> bool:
    config = get_config()
    try:
        return config.getboolean('LOCATOR', 'copy_files', default=True)
    except ValueError as e:
        raise click.ClickException(
            f"Invalid [LOCATOR] copy_files in {config.config_path}: {e}. Use true/false, yes/no, 1/0.") from e


@click.command("find", cls=ToolCommand, context_settings=CONTEXT_SETTINGS)
@click.option('-i', 'input_path', default=_locator_default('sample_list'), metavar='PATH',
              help="File containing sample ID's to find and copy. One sample ID per line.")
@click.option('-f', 'search_root', default=_locator_default('search_root'), metavar='PATH',
              help="Folder containing fastq files (will be searched recursively).")
@click.option('-o', 'output_dir', default=_locator_default('output_dir'), metavar='PATH',
              help="Output folder to copy fastq files into.")
@click.option('-s', 'separator', default=_locator_default('separator'), metavar='TEXT',
              help="Separator to append after sample name.")
@click.option('-d', 'report_only', is_flag=True, default=False,
              help="Don't copy the files, instead only report whether they are found or not.")
@click.option('-v', 'verbose', is_flag=True, default=False,
              help="List every matched file under its sample.")
@click.pass_context
def find_fastq(ctx: click.Context, input_path: str, search_root: str, output_dir: str,
               separator: Optional[str], report_only: bool, verbose: bool):
    """Find and copy fastq files. Reports for each sample how many files were found and copied.

    Defaults for -i, -f, -o and -s come from the [LOCATOR] section of the
    config file (see 'fqcollect config show LOCATOR').
    """
    setup_logging()
    copy_files = not report_only and _copy_files_default()
    try:
        samples = read_sample_list(input_path)
        locator = SampleFileLocator(LocatorSettings(
            search_root=search_root,
            output_dir=output_dir,
            separator=separator if separator is not None else "_",
            copy_files=copy_files,
        ))
    except (InputNotFound, SearchRootNotFound, OutputNotWritable) as e:
        raise ToolUsageError(str(e), ctx=ctx) from e

    for line in locator.header_lines(samples):
        console.print(line, markup=False, highlight=False)

    def print_result(result: SampleResult) -> None:
        console.print(format_result(result))
        if verbose:
            for path in result.files:
                console.print("    ", colorize_path(path), sep="")

    try:
        report = locator.run(samples, on_result=print_result)
    except OutputNotWritable as e:
        raise ToolUsageError(str(e), ctx=ctx) from e

    console.print()
    style = "found" if report.all_found else "missing"
    console.print(report.summary_line(), style=style, markup=False, highlight=False)


@click.command("install-singularity", cls=ToolCommand, context_settings=CONTEXT_SETTINGS)
@click.option('-p', 'prefix', default=None, metavar='PATH',
              help="Folder where singularity will be installed (a singularity subfolder will be created). "
                   "If not provided, it is installed system-wide for all users in /usr/local.")
@click.option('--dry-run', is_flag=True, default=False, help="Only print the commands that would run.")
@click.option('-y', '--yes', 'assume_yes', is_flag=True, default=False,
              help="Start right away instead of pausing when run interactively.")
@click.pass_context
def install_singularity(ctx: click.Context, prefix: Optional[str], dry_run: bool, assume_yes: bool):
    """Install the Singularity container runtime (Debian/Ubuntu only)."""
    setup_logging()
    try:
        distribution = require_supported_platform()
    except UnsupportedPlatform as e:
        click.echo(str(e), err=True)
        ctx.exit(1)
    logger.info(f"Detected supported distribution: {distribution}")

    if prefix:
        prefix = os.path.realpath(os.path.expanduser(prefix))
        try:
            os.makedirs(prefix, exist_ok=True)
        except OSError as e:
            raise ToolUsageError(f"Destination folder {prefix} could not be created: {e}", ctx=ctx) from e
        if not os.access(prefix, os.W_OK):
            raise ToolUsageError(f"Destination folder {prefix} is not writable, exiting...", ctx=ctx)

    settings = get_config().get_installer_config()
    console.print(Panel(INSTALLER_DESCRIPTION, title=f"singularity {settings['singularity_version']}",
                        border_style="cyan", expand=False))
    if sys.stdin.isatty() and not assume_yes and not dry_run:
        console.print(f"sleeping for {INTERACTIVE_PAUSE_SECONDS} seconds", style="info")
        time.sleep(INTERACTIVE_PAUSE_SECONDS)

    runner = CommandRunner(dry_run=dry_run)
    installer = SingularityInstaller(
        singularity_version=settings['singularity_version'],
        go_version=settings['go_version'],
        repo_url=settings['repo_url'],
        go_url=settings['go_url'],
        prefix=prefix,
        ubuntu_major=ubuntu_major_version(),
        runner=runner,
        announce=lambda message: console.print(message, style="step", markup=False, highlight=False),
    )
    try:
        installer.install()
    except FqcollectError as e:
        console.print(Text.assemble(("Install failed: ", "error"), str(e)))
        ctx.exit(1)

    if dry_run:
        console.print("Commands that would run:", style="info")
        for command in runner.history:
            console.print(f"  {command}", markup=False, highlight=False)


# --- Config commands ---

@click.group("config", context_settings=CONTEXT_SETTINGS)
def config_group():
    """Show or change fqcollect settings."""


@config_group.command("show")
@click.argument('section', required=False)
def config_show(section: Optional[str]):
    """Show one section, or all of them."""
    config = get_config()
    if section:
        values = config.get_section(section.upper())
        if values is None:
            raise click.ClickException(
                f"Unknown section '{section}'. Available: {', '.join(config.get_available_sections())}")
        sections = {section.upper(): values}
    else:
        sections = config.get_all_config()
    for name, values in sections.items():
        console.print(f"[{name}]", style="bold", markup=False, highlight=False)
        for key, value in values.items():
            console.print(f"{key} = {value}", markup=False, highlight=False)
        console.print()
    console.print(f"Configuration file: {config.config_path}", style="info", markup=False, highlight=False)


@config_group.command("get")
@click.argument('section')
@click.argument('key')
def config_get(section: str, key: str):
    """Print a single value."""
    value = get_config().get(section.upper(), key.lower())
    if value is None:
        raise click.ClickException(f"Key '[{section.upper()}].{key.lower()}' not found.")
    click.echo(value)


@config_group.command("set")
@click.argument('section')
@click.argument('key')
@click.argument('value')
def config_set(section: str, key: str, value: str):
    """Set a value and save the config file."""
    try:
        get_config().set(section.upper(), key.lower(), value)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"[{section.upper()}] {key.lower()} = {value}")


cli.add_command(find_fastq)
cli.add_command(install_singularity)
cli.add_command(config_group)


if __name__ == '__main__':
    cli()
