"""CLI adapter for ``lib_test_launcher`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose the launcher as a single command: parse options, validate them, resolve
the engine for the invoking project, delegate, and exit with the engine's
verdict.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings.
* :func:`cli` – the launcher command.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls :func:`startup` once, then
:func:`validate_options` and :func:`launch`; launcher errors become a one-line
diagnostic on stderr and exit code 1, while unexpected exceptions are rendered
by ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import sys
import uuid
from importlib import metadata
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import EXIT_FAILURE, EXIT_SUCCESS, launch, startup
from .domain.errors import DependencyResolutionError, InvalidInvocation, LauncherError
from .domain.options import validate_options
from .observability import bind_trace_id, enable_console_logging, get_logger, log_error, log_info

PROG_NAME: Final[str] = "lib_test_launcher"
CLICK_CONTEXT_SETTINGS = {"help_option_names": [], "max_content_width": 100}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version(PROG_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _show_help_and_fail(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print usage and stop with exit code 1."""

    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(EXIT_FAILURE)


@click.command(
    help="Run the tests of the current project, using the project's own pinned launcher when installed.",
    context_settings=CLICK_CONTEXT_SETTINGS,
)
@click.option(
    "-h",
    "--help",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_help_and_fail,
    help="Show this message and exit with status 1.",
)
@click.version_option(
    _resolve_version(),
    "-v",
    "--version",
    prog_name=PROG_NAME,
    message="lib_test_launcher version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "-c",
    "--config",
    "config",
    default=None,
    help=(
        "Path to a test configuration file. If it does not set a root directory, "
        "the project root is assumed."
    ),
)
@click.option(
    "--coverage",
    is_flag=True,
    default=False,
    help="Collect and report test coverage information.",
)
@click.option(
    "-w",
    "--max-workers",
    "--maxWorkers",
    "max_workers",
    default=None,
    help="Maximum number of workers spawned to run tests (defaults to the number of cores).",
)
@click.option(
    "-o",
    "--only-changed",
    "--onlyChanged",
    "only_changed",
    is_flag=True,
    default=False,
    help="Only run tests related to files changed in the current repository.",
)
@click.option(
    "-i",
    "--run-in-band",
    "--runInBand",
    "run_in_band",
    is_flag=True,
    default=False,
    help="Run all tests serially in the current process instead of a worker pool.",
)
@click.option(
    "--test-env-data",
    "--testEnvData",
    "test_env_data",
    default=None,
    help="JSON value made available to tests through lib_test_launcher.get_env_data().",
)
@click.option(
    "--test-path-pattern",
    "--testPathPattern",
    "test_path_pattern",
    default=None,
    help="Regular expression matched against test paths before running them.",
)
@click.option(
    "--no-highlight",
    "--noHighlight",
    "no_highlight",
    is_flag=True,
    default=False,
    help="Disable highlighting of test results.",
)
@click.option(
    "--no-stack-trace",
    "--noStackTrace",
    "no_stack_trace",
    is_flag=True,
    default=False,
    help="Omit stack traces from test results.",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Display individual test results.",
)
@click.option(
    "--watch",
    is_flag=True,
    default=False,
    help="Watch files for changes and rerun related tests.",
)
@click.option(
    "--watch-extensions",
    "--watchExtensions",
    "watch_extensions",
    default=None,
    help="Comma separated list of file extensions to watch (requires --watch).",
)
@click.option(
    "-b",
    "--bail",
    is_flag=True,
    default=False,
    help="Stop the run after the first failing test.",
)
@click.option(
    "--use-stderr",
    "--useStderr",
    "use_stderr",
    is_flag=True,
    default=False,
    help="Divert all output to stderr.",
)
@click.option(
    "--cache/--no-cache",
    default=True,
    show_default=True,
    help="Use the test cache.",
)
@click.option(
    "--json",
    "json",
    is_flag=True,
    default=False,
    help="Print test results as JSON; other output goes to stderr.",
)
@click.option(
    "--test-runner",
    "--testRunner",
    "test_runner",
    default=None,
    help="Custom test runner plugin to load.",
)
@click.option(
    "--log-heap-usage",
    "--logHeapUsage",
    "log_heap_usage",
    is_flag=True,
    default=False,
    help="Log memory usage after every test.",
)
@click.option(
    "--watchman/--no-watchman",
    default=True,
    show_default=True,
    help="Use the filesystem watcher service for file crawling.",
)
@click.argument("patterns", nargs=-1)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, patterns: tuple[str, ...], **raw: Any) -> None:
    """Validate options, resolve the engine, and exit with its verdict."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    settings = startup()
    if settings.log_level:
        ctx.call_on_close(_console_logging_scope(settings.log_level))
    bind_trace_id(uuid.uuid4().hex)

    try:
        options = validate_options(raw, patterns)
        exit_code = launch(options, settings=settings)
    except LauncherError as exc:
        log_error("launch_aborted", stage=_stage_of(exc), path=None, error=str(exc), category=type(exc).__name__)
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(EXIT_FAILURE)

    if exit_code != EXIT_SUCCESS:
        log_info("tests_failed", stage="delegate", path=None, exit_code=exit_code)
        ctx.exit(exit_code)


def _console_logging_scope(level: str) -> Callable[[], None]:
    """Enable console logging and return the callback that undoes it."""

    logger = get_logger()
    previous_level = logger.level
    handler = enable_console_logging(level)

    def _restore() -> None:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)

    return _restore


def _stage_of(exc: LauncherError) -> str:
    if isinstance(exc, InvalidInvocation):
        return "validate"
    if isinstance(exc, DependencyResolutionError):
        return "resolve"
    return "launch"


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=PROG_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
