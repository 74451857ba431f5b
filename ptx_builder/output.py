"""
Resolution of the build artifacts from the diagnostics of a successful build.

``cargo`` does not tell where the PTX assembly is: its filename carries a suffix generated by ``cargo``
that only shows up in the verbose ``rustc`` command line. The command line is scraped from the log,
and it is persisted next to the build output because a *fresh* build (nothing recompiled) does not print it.
"""

import logging
import pathlib
import re
import typing

import attrs

from ptx_builder.error import InternalError
from ptx_builder.source import Crate, CrateType
from ptx_builder.utils import depfile

#: Name of the target.
TARGET_NAME : typing.Final[str] = 'nvptx64-nvidia-cuda'

#: Crate type used to build the device crate.
CRATE_TYPE : typing.Final[str] = 'cdylib'

#: Sidecar file, inside the output directory, that holds the last observed build command.
LAST_BUILD_CMD : typing.Final[str] = '.last-build-command'

@attrs.define(frozen = True, slots = True)
class BuildCommand:
    """
    A ``rustc`` command line, either observed in the log of the current build or loaded from the sidecar file.

    There is a single sidecar file per output directory, shared by all profiles and targets of the crate.
    It holds the last observed command: a fresh build right after a build with another profile (or target)
    reads back the suffix of that other build. Callers that alternate profiles must not rely on fresh builds.
    """
    text : str
    cached : bool = False
    """Set to `True` if the command was loaded from the sidecar file."""

    @classmethod
    def load(cls, output_path : pathlib.Path) -> typing.Optional['BuildCommand']:
        path = output_path / LAST_BUILD_CMD
        if not path.is_file():
            return None
        return cls(text = path.read_text(encoding = 'utf-8'), cached = True)

    def persist(self, output_path : pathlib.Path) -> None:
        """
        Write to the sidecar file, unless the command was loaded from it in the first place.
        """
        if self.cached:
            return
        (output_path / LAST_BUILD_CMD).write_text(self.text, encoding = 'utf-8')

class BuildCommandParser:
    """
    Everything that depends on the format of the ``cargo`` verbose log.
    """
    EXTRA_FILENAME : typing.Final[re.Pattern[str]] = re.compile(r'-C extra-filename=(\S+)')

    @staticmethod
    def find(stderr : str, crate_name : str) -> str | None:
        """
        Find the ``rustc`` command line that builds `crate_name` as a :py:data:`CRATE_TYPE`.
        """
        crate_name_flag = f'--crate-name {crate_name}'
        crate_type_flag = f'--crate-type {CRATE_TYPE}'
        for line in stderr.splitlines():
            if crate_name_flag in line and crate_type_flag in line:
                return line
        return None

    @classmethod
    def extra_filename(cls, command : str) -> str:
        if (matched := cls.EXTRA_FILENAME.search(command)) is None:
            raise InternalError('Unable to find `extra-filename` rustc flag')
        return matched.group(1)

def resolve_build_command(*, stderr : str, crate_name : str, output_path : pathlib.Path) -> BuildCommand:
    """
    Look for the build command in `stderr`, and fall back to the sidecar file.

    A command found in `stderr` overwrites the sidecar file.
    """
    if (line := BuildCommandParser.find(stderr, crate_name)) is not None:
        command = BuildCommand(text = line)
        command.persist(output_path)
        logging.debug(f'Persisted the build command to {output_path / LAST_BUILD_CMD}.')
        return command

    if (command := BuildCommand.load(output_path)) is not None:
        logging.info(f'No build command in the log (fresh build), using the one from {output_path / LAST_BUILD_CMD}.')
        return command

    raise InternalError('Unable to find build command of the device crate')

@attrs.define(frozen = True, slots = True, kw_only = True)
class BuildOutput:
    """
    Artifacts of a successful build.
    """
    crate : Crate
    output_path : pathlib.Path
    profile : str
    """Name of the profile directory, *e.g.* ``release``."""
    crate_type : CrateType | None = None
    file_suffix : str

    @classmethod
    def resolve(cls, *, crate : Crate, output_path : pathlib.Path, profile : str, crate_type : CrateType | None, stderr : str) -> 'BuildOutput':
        command = resolve_build_command(stderr = stderr, crate_name = crate.output_file_prefix, output_path = output_path)
        return cls(
            crate = crate,
            output_path = output_path,
            profile = profile,
            crate_type = crate_type,
            file_suffix = BuildCommandParser.extra_filename(command.text),
        )

    @property
    def profile_path(self) -> pathlib.Path:
        return self.output_path / TARGET_NAME / self.profile

    def get_assembly_path(self) -> pathlib.Path:
        """
        Location of the PTX assembly.
        """
        return self.profile_path / 'deps' / f'{self.crate.output_file_prefix}{self.file_suffix}.ptx'

    def get_deps_path(self) -> pathlib.Path:
        return self.profile_path / f'{self.crate.get_deps_file_prefix(self.crate_type)}.d'

    def dependencies(self) -> list[pathlib.Path]:
        """
        Source files of the crate, including ``Cargo.toml`` and ``Cargo.lock``.

        :raises OSError: If the deps file cannot be read.
        """
        path = self.get_deps_path()

        content = path.read_text(encoding = 'utf-8')

        if not content.strip():
            raise InternalError('Empty deps file')

        _, sources = depfile.parse(content)

        logging.debug(f'Found {len(sources)} source files in {path}.')

        return [*self.crate.manifest_paths, *sources]
