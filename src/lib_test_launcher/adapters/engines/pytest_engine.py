"""Bundled engine delegating to ``pytest``.

Purpose
-------
Provide the fallback ``run_cli`` used when a project has no local engine. It
translates validated :class:`InvocationOptions` into ``pytest.main`` arguments
and reports the outcome through the completion callback.

Contents
--------
* :func:`run_cli` – engine entry point re-exported by the package root.
* :func:`collect_test_paths` – regex-based test file selection.
* :func:`build_pytest_args` – option to flag mapping.

System Role
-----------
Only the straight option-to-flag mapping lives here. Options pytest cannot
honour are logged as warnings instead of failing the run.
"""

from __future__ import annotations

import contextlib
import fnmatch
import importlib.util
import json
import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

import pytest

from ...domain.options import InvocationOptions
from ...observability import log_info, log_warning
from ...testing import ENV_DATA_VARIABLE

_TEST_FILE_GLOBS = ("test_*.py", "*_test.py")
_SKIPPED_DIRS = frozenset({"__pycache__", "__pypackages__", "node_modules", "build", "dist", "site-packages"})


def run_cli(options: InvocationOptions, root_dir: Path | str, on_complete: Callable[[bool], None]) -> None:
    """Run pytest for *root_dir* and report ``True`` when every test passed."""

    root = Path(root_dir)
    _warn_unsupported(options)
    test_paths = collect_test_paths(root, options.selection_patterns())
    if not test_paths:
        log_warning("no_tests_found", stage="delegate", path=str(root), patterns=list(options.selection_patterns()))
        print(f"No tests found in {root} matching: {', '.join(options.selection_patterns())}", file=sys.stderr)
        on_complete(False)
        return

    args = build_pytest_args(options, root, test_paths)
    log_info("pytest_started", stage="delegate", path=str(root), args=args)
    with _exported_env_data(options.test_env_data), _stdout_target(options.use_stderr):
        exit_code = pytest.main(args)
    log_info("pytest_finished", stage="delegate", path=str(root), exit_code=int(exit_code))
    on_complete(int(exit_code) == int(pytest.ExitCode.OK))


def collect_test_paths(root: Path, patterns: Sequence[str]) -> list[str]:
    """Return test files under *root* whose relative path matches any pattern.

    Without patterns the root itself is returned so pytest applies its own
    discovery rules.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> (root / "tests" / "api").mkdir(parents=True)
    >>> for name in ("tests/api/test_users.py", "tests/test_cli.py", "tests/helpers.py"):
    ...     _ = (root / name).write_text("", encoding="utf-8")
    >>> [Path(p).relative_to(root).as_posix() for p in collect_test_paths(root, ["api/"])]
    ['tests/api/test_users.py']
    >>> collect_test_paths(root, []) == [str(root)]
    True
    >>> tmp.cleanup()
    """

    if not patterns:
        return [str(root)]
    compiled = [re.compile(pattern) for pattern in patterns]
    selected: list[str] = []
    for path in _iter_test_files(root):
        relative = path.relative_to(root).as_posix()
        if any(expression.search(relative) for expression in compiled):
            selected.append(str(path))
    return selected


def build_pytest_args(options: InvocationOptions, root: Path, test_paths: Sequence[str]) -> list[str]:
    """Translate *options* into a ``pytest.main`` argument list.

    Examples
    --------
    >>> build_pytest_args(InvocationOptions(bail=True, cache=False), Path("/srv/app"), ["/srv/app"])
    ['--rootdir=/srv/app', '-x', '-p', 'no:cacheprovider', '/srv/app']
    """

    args = [f"--rootdir={root}"]
    if options.config:
        args.extend(["-c", options.config])
    if options.bail:
        args.append("-x")
    if options.verbose:
        args.append("-v")
    if options.no_stack_trace:
        args.append("--tb=no")
    if options.no_highlight:
        args.append("--color=no")
    if not options.cache:
        args.extend(["-p", "no:cacheprovider"])
    if options.test_runner:
        args.extend(["-p", options.test_runner])
    if options.max_workers is not None:
        if _plugin_available("xdist"):
            args.extend(["-n", str(options.max_workers)])
        else:
            log_warning("option_unsupported", stage="delegate", path=None, option="max_workers", reason="pytest-xdist")
    if options.coverage:
        if _plugin_available("pytest_cov"):
            args.append(f"--cov={root}")
        else:
            log_warning("option_unsupported", stage="delegate", path=None, option="coverage", reason="pytest-cov")
    args.extend(test_paths)
    return args


def _warn_unsupported(options: InvocationOptions) -> None:
    for option in ("watch", "json", "only_changed", "log_heap_usage"):
        if getattr(options, option):
            log_warning("option_unsupported", stage="delegate", path=None, option=option, reason="bundled engine")


def _plugin_available(module: str) -> bool:
    return importlib.util.find_spec(module) is not None


def _iter_test_files(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _SKIPPED_DIRS and not name.startswith("."))
        for filename in sorted(filenames):
            if any(fnmatch.fnmatch(filename, pattern) for pattern in _TEST_FILE_GLOBS):
                yield Path(dirpath) / filename


@contextlib.contextmanager
def _exported_env_data(data: Any) -> Iterator[None]:
    """Expose *data* as JSON in :data:`ENV_DATA_VARIABLE` while the block runs."""

    if data is None:
        yield
        return
    previous = os.environ.get(ENV_DATA_VARIABLE)
    os.environ[ENV_DATA_VARIABLE] = json.dumps(data)
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop(ENV_DATA_VARIABLE, None)
        else:
            os.environ[ENV_DATA_VARIABLE] = previous


@contextlib.contextmanager
def _stdout_target(use_stderr: bool) -> Iterator[None]:
    if not use_stderr:
        yield
        return
    with contextlib.redirect_stdout(sys.stderr):
        yield
