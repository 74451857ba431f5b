import logging
import os
import pathlib
import subprocess
import typing

def merge_environ(overrides : typing.Mapping[str, str] | None = None) -> dict[str, str] | None:
    """
    Return a copy of :py:data:`os.environ` updated with `overrides`, or :py:obj:`None` if there is nothing to override.
    """
    if not overrides:
        return None
    env = os.environ.copy()
    env.update(overrides)
    return env

def run_captured(*,
    args : typing.Sequence[str | pathlib.Path],
    cwd : pathlib.Path | None = None,
    env : typing.Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """
    Run a command to completion, capturing both `stdout` and `stderr` as bytes.

    :param args: Command to run.
    :param cwd: Working directory, optional.
    :param env: Environment variables that override the ones of the current process, optional.

    The exit code is **not** checked: it is up to the caller to classify failures.
    A missing executable raises :py:class:`FileNotFoundError`.

    There is neither a timeout nor a retry: a hung process blocks the caller.
    """
    logging.debug(f'Running {args} (cwd={cwd}, env overrides={dict(env) if env else {}}).')
    return subprocess.run(
        args = args,
        cwd = cwd,
        env = merge_environ(env),
        stdout = subprocess.PIPE, stderr = subprocess.PIPE,
        check = False,
    )
