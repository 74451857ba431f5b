"""
Build a device crate into a PTX assembly with ``cargo``.

The build is skipped when it is not needed, see :py:meth:`BuildContext.is_build_needed`.
Otherwise, ``cargo rustc`` is run once, and its verbose log is used to resolve the artifacts,
see :py:class:`ptx_builder.output.BuildOutput`.
"""

import enum
import logging
import os
import pathlib
import sys
import typing

import attrs
import typeguard

from ptx_builder.error import BuildFailed, CommandFailed
from ptx_builder.output import CRATE_TYPE, TARGET_NAME, BuildOutput
from ptx_builder.source import Crate, CrateType
from ptx_builder.tools.executable import Cargo, Linker
from ptx_builder.tools.runner import ExecutableRunner

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

#: Set in the environment of ``cargo`` so that a device crate build script does not recurse.
NESTED_BUILD_ENV : typing.Final[str] = 'PTX_CRATE_BUILDING'

#: Set by ``cargo`` to the path of the tool that drives the build.
LAUNCHER_ENV : typing.Final[str] = 'CARGO'

#: Launchers that only analyse the code, such as IDE assistants.
ANALYSIS_LAUNCHERS : typing.Final[tuple[str, ...]] = ('rls', 'rust-analyzer')

class Profile(enum.Enum):
    DEBUG = 'debug'
    RELEASE = 'release'

    def __str__(self) -> str:
        return self.value

class BuildStatus(enum.Enum):
    NOT_NEEDED = 'NotNeeded'
    SUCCESS = 'Success'

@attrs.define(frozen = True, slots = True, kw_only = True)
class BuildContext:
    """
    Where the build is invoked from.

    It is read from the environment with :py:meth:`from_environ`, or given explicitly.
    """
    launcher : str | None = None
    """Path of the tool driving the host build."""
    nested : bool = False
    """Whether this is a build triggered by the build of another device crate."""

    @classmethod
    def from_environ(cls, environ : typing.Mapping[str, str] | None = None) -> 'BuildContext':
        environ = os.environ if environ is None else environ
        return cls(
            launcher = environ.get(LAUNCHER_ENV) or None,
            nested = environ.get(NESTED_BUILD_ENV) == '1',
        )

    @property
    def is_analysis(self) -> bool:
        """
        Whether the launcher is a code analysis tool rather than an actual build.
        """
        if not self.launcher:
            return False
        stem = pathlib.PurePath(self.launcher).stem
        return any(stem.endswith(name) for name in ANALYSIS_LAUNCHERS)

    def is_build_needed(self) -> bool:
        return not self.is_analysis and not self.nested

@attrs.define(frozen = True, slots = True)
class BuildResult:
    """
    Either :py:attr:`BuildStatus.SUCCESS` with an :py:attr:`output`, or :py:attr:`BuildStatus.NOT_NEEDED`.
    """
    status : BuildStatus
    output : BuildOutput | None = None

def is_noise(line : str) -> bool:
    """
    Verbose ``cargo`` lines that are not diagnostics.
    """
    return (
        line.startswith('+ ')
        or 'Running' in line
        or 'Fresh' in line
        or line.startswith('Caused by:')
        or line.startswith("  process didn't exit successfully: ")
    )

def filter_diagnostics(stderr : str) -> list[str]:
    return [line for line in stderr.strip('\n').split('\n') if not is_noise(line)]

class Builder:
    """
    Build a device crate.

    The crate is built in an output directory of its own, see :py:meth:`ptx_builder.source.Crate.get_output_path`,
    such that it does not collide with a host build of the same tree.

    Without an explicit `context`, the context is read from the environment each time it is needed,
    see :py:meth:`get_context`.
    """
    @typeguard.typechecked
    def __init__(self, path : str | pathlib.Path, *, context : BuildContext | None = None) -> None:
        self.crate = Crate.analyse(path)

        self.context : BuildContext | None = context
        self.profile = Profile.RELEASE
        self.colors = True
        self.crate_type : CrateType | None = None

    def disable_colors(self) -> Self:
        self.colors = False
        return self

    def set_colors(self, colors : bool) -> Self:
        self.colors = colors
        return self

    def set_profile(self, profile : Profile) -> Self:
        self.profile = profile
        return self

    def set_crate_type(self, crate_type : CrateType | None) -> Self:
        self.crate_type = crate_type
        return self

    def get_context(self) -> BuildContext:
        return self.context if self.context is not None else BuildContext.from_environ()

    def is_build_needed(self) -> bool:
        return self.get_context().is_build_needed()

    def get_args(self) -> tuple[str, ...]:
        """
        Arguments passed to ``cargo``.
        """
        args : list[str] = ['rustc', '--target', TARGET_NAME]

        if self.profile is Profile.RELEASE:
            args.append('--release')

        args += ['--color', 'always' if self.colors else 'never']

        match self.crate_type:
            case CrateType.BINARY:
                args += ['--bin', self.crate.name]
            case CrateType.LIBRARY:
                args.append('--lib')

        args += ['-v', '--', '--crate-type', CRATE_TYPE]

        return tuple(args)

    def build(self) -> BuildResult:
        """
        Build the crate, unless :py:meth:`is_build_needed` is `False`.

        :raises ptx_builder.error.BuildFailed: If ``cargo`` fails, with the curated diagnostics.
        """
        context = self.get_context()

        if not context.is_build_needed():
            logging.info(f'Skipping the build of {self.crate.path} ({context}).')
            return BuildResult(status = BuildStatus.NOT_NEEDED)

        ExecutableRunner(Linker()).check_version()

        output_path = self.crate.get_output_path()

        cargo = ExecutableRunner(Cargo()) \
            .with_args(*self.get_args()) \
            .with_cwd(self.crate.path) \
            .with_env(NESTED_BUILD_ENV, '1') \
            .with_env('CARGO_TARGET_DIR', output_path)

        cargo.check_version()

        try:
            output = cargo.execute()
        except CommandFailed as error:
            raise BuildFailed(filter_diagnostics(error.stderr)) from error

        result = BuildOutput.resolve(
            crate = self.crate,
            output_path = output_path,
            profile = str(self.profile),
            crate_type = self.crate_type,
            stderr = output.stderr,
        )

        logging.info(f'Built {result.get_assembly_path()}.')

        return BuildResult(status = BuildStatus.SUCCESS, output = result)
