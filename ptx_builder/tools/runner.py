"""
Run an :py:class:`ptx_builder.tools.executable.Executable` after checking its version.
"""

import dataclasses
import logging
import pathlib
import re
import subprocess
import sys

import semantic_version

from ptx_builder.error import CommandFailed, CommandNotFound, CommandVersionNotFulfilled, InternalError
from ptx_builder.tools.executable import Executable
from ptx_builder.utils.subprocess_helpers import run_captured

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

@dataclasses.dataclass(frozen = True, slots = True)
class Output:
    """
    Decoded output of a successful command.
    """
    stdout : str
    stderr : str

def decode(*, command : str, raw : subprocess.CompletedProcess[bytes]) -> Output:
    try:
        return Output(stdout = raw.stdout.decode('utf-8'), stderr = raw.stderr.decode('utf-8'))
    except UnicodeDecodeError as error:
        raise InternalError(f"Output of '{command}' is not valid UTF-8") from error

def parse_executable_version(executable : Executable) -> semantic_version.Version:
    """
    Retrieve the version of `executable` from the output of ``<name> -V``.

    The version is looked for right after the executable name, *e.g.*::

        cargo 1.80.0-nightly (b1feb75d0 2024-05-19)
    """
    args = (executable.name, '-V')

    logging.debug(f'Querying version with {args}.')

    try:
        raw = run_captured(args = args)
    except FileNotFoundError as error:
        raise CommandNotFound(executable.name, executable.VERIFICATION_HINT) from error

    output = decode(command = executable.name, raw = raw)

    if raw.returncode != 0:
        raise CommandFailed(executable.name, raw.returncode, output.stderr)

    if (matched := re.search(pattern = rf'{re.escape(executable.name)}\s(\S+)', string = output.stdout + output.stderr)) is None:
        raise InternalError('Unable to find executable version')

    try:
        version = semantic_version.Version(matched.group(1))
    except ValueError as error:
        raise InternalError(f'Unable to parse executable version {matched.group(1)!r}') from error

    return executable.normalize_version(version)

class ExecutableRunner:
    """
    Compose and run a command line for an :py:class:`ptx_builder.tools.executable.Executable`.

    >>> from ptx_builder.tools.executable import Cargo
    >>> from ptx_builder.tools.runner import ExecutableRunner
    >>> ExecutableRunner(Cargo()).with_args('build', '--release').args
    ('cargo', 'build', '--release')
    """
    def __init__(self, executable : Executable) -> None:
        self.executable = executable
        self.extra_args : list[str | pathlib.Path] = []
        self.env : dict[str, str] = {}
        self.cwd : pathlib.Path | None = None

    @property
    def args(self) -> tuple[str | pathlib.Path, ...]:
        return (self.executable.name, *self.extra_args)

    def with_args(self, *args : str | pathlib.Path) -> Self:
        self.extra_args.extend(args)
        return self

    def with_env(self, key : str, value : str | pathlib.Path) -> Self:
        self.env[key] = str(value)
        return self

    def with_cwd(self, path : str | pathlib.Path) -> Self:
        self.cwd = pathlib.Path(path)
        return self

    def get_current_version(self) -> semantic_version.Version:
        return parse_executable_version(self.executable)

    def is_runnable(self) -> bool:
        """
        Whether the executable can be found and reports a version.
        """
        try:
            self.get_current_version()
        except (CommandNotFound, CommandFailed, InternalError):
            return False
        return True

    def check_version(self) -> None:
        """
        Raise :py:class:`ptx_builder.error.CommandVersionNotFulfilled` if the current version does not
        match the required one.
        """
        current = self.get_current_version()
        required = self.executable.REQUIRED_VERSION

        logging.info(f"Found '{self.executable.name}' {current} (required: {required}).")

        if required is not None and not required.match(current):
            raise CommandVersionNotFulfilled(self.executable.name, current, required, self.executable.VERSION_HINT)

    def run(self) -> Output:
        """
        Check the version and run the command.
        """
        self.check_version()
        return self.execute()

    def execute(self) -> Output:
        """
        Run the command, without checking the version.

        Any non-zero exit code is a failure, regardless of `stdout`.
        """
        logging.info(f'Running {self.args} in {self.cwd or pathlib.Path.cwd()}.')

        try:
            raw = run_captured(args = self.args, cwd = self.cwd, env = self.env)
        except OSError as error:
            raise InternalError(f"Unable to execute command '{self.executable.name}'") from error

        output = decode(command = self.executable.name, raw = raw)

        if raw.returncode != 0:
            raise CommandFailed(self.executable.name, raw.returncode, output.stderr)

        return output
