"""
Analysis of a device crate: its name, its shape, and where its build output goes.
"""

import enum
import logging
import os
import pathlib
import pickle
import sys
import tempfile
import typing

import attrs
import blake3
import typeguard

from ptx_builder.error import InternalError, InvalidCratePath, InvalidCrateType, MissingCrateType

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

#: Name of the directory, under the shared temporary root, that holds all build outputs.
OUTPUT_ROOT_NAME : typing.Final[str] = 'ptx-builder-0.5'

#: Environment variable that overrides the shared temporary root.
TEMP_DIR_ENV : typing.Final[str] = 'PTX_BUILDER_TEMP_DIR'

class CrateType(enum.Enum):
    """
    Target of a crate, used to disambiguate a crate that defines both.
    """
    LIBRARY = 'Library'
    BINARY = 'Binary'

class CrateShape(enum.Enum):
    """
    Which entry points a crate defines.
    """
    LIBRARY = 'Library'
    BINARY = 'Binary'
    MIXED = 'Mixed'

def get_temp_root(environ : typing.Mapping[str, str] | None = None) -> pathlib.Path:
    """
    Shared temporary root wherein all crates get their own output directory.
    """
    environ = os.environ if environ is None else environ
    if (override := environ.get(TEMP_DIR_ENV)):
        return pathlib.Path(override)
    return pathlib.Path(tempfile.gettempdir())

@attrs.define(frozen = True, slots = True, kw_only = True)
class Crate:
    """
    Information about a CUDA crate.

    Use :py:meth:`analyse` to locate a crate and collect the needed information.
    """
    path : pathlib.Path
    """Absolute crate root."""
    name : str
    """Name declared in ``Cargo.toml``."""
    shape : CrateShape
    """Entry points that the crate defines."""
    temp_root : pathlib.Path = attrs.field(factory = get_temp_root)
    """Shared temporary root of :py:meth:`get_output_path`."""

    MANIFEST : typing.ClassVar[str] = 'Cargo.toml'
    LOCKFILE : typing.ClassVar[str] = 'Cargo.lock'
    LIBRARY_ENTRY : typing.ClassVar[pathlib.PurePath] = pathlib.PurePath('src', 'lib.rs')
    BINARY_ENTRY : typing.ClassVar[pathlib.PurePath] = pathlib.PurePath('src', 'main.rs')

    @classmethod
    @typeguard.typechecked
    def analyse(cls, path : str | pathlib.Path, *, temp_root : pathlib.Path | None = None) -> 'Crate':
        """
        Try to locate a crate at `path`, relative to the current working directory.

        :raises ptx_builder.error.InvalidCratePath: If there is no ``Cargo.toml`` file at `path`.
        """
        path = pathlib.Path.cwd() / path

        manifest = path / cls.MANIFEST
        if not manifest.exists() or manifest.is_dir():
            raise InvalidCratePath(path)

        name = cls.read_name(manifest)

        has_library = (path / cls.LIBRARY_ENTRY).is_file()
        has_binary = (path / cls.BINARY_ENTRY).is_file()

        match has_library, has_binary:
            case True, True:
                shape = CrateShape.MIXED
            case True, False:
                shape = CrateShape.LIBRARY
            case False, True:
                shape = CrateShape.BINARY
            case _:
                raise InternalError('Unable to find neither lib.rs nor main.rs')

        logging.debug(f'Found {shape.value.lower()} crate {name!r} at {path}.')

        return cls(path = path, name = name, shape = shape, temp_root = temp_root if temp_root is not None else get_temp_root())

    @staticmethod
    def read_name(manifest : pathlib.Path) -> str:
        """
        Read the package name from the manifest, and nothing else.
        """
        with manifest.open('rb') as file:
            try:
                content = tomllib.load(file)
            except tomllib.TOMLDecodeError as error:
                raise InternalError(f'Unable to parse {manifest}') from error

        name = content.get('package', {}).get('name')
        if not isinstance(name, str):
            raise InternalError('Cannot get crate name')
        return name

    @property
    def output_file_prefix(self) -> str:
        """
        PTX assembly filename prefix.
        """
        return self.name.replace('-', '_')

    def get_deps_file_prefix(self, crate_type : CrateType | None = None) -> str:
        """
        Deps file filename prefix.

        Library artifacts are prefixed with ``lib``, binaries are not. A mixed crate requires `crate_type`.
        """
        library = f'lib{self.output_file_prefix}'
        binary = self.output_file_prefix

        match self.shape, crate_type:
            case CrateShape.MIXED, None:
                raise MissingCrateType()
            case CrateShape.LIBRARY, CrateType.BINARY:
                raise InvalidCrateType(CrateType.BINARY.value)
            case CrateShape.BINARY, CrateType.LIBRARY:
                raise InvalidCrateType(CrateType.LIBRARY.value)
            case CrateShape.LIBRARY, _:
                return library
            case CrateShape.BINARY, _:
                return binary
            case CrateShape.MIXED, CrateType.LIBRARY:
                return library
            case CrateShape.MIXED, CrateType.BINARY:
                return binary

        raise ValueError(f'unsupported {self.shape} with {crate_type}')

    def get_hash(self) -> str:
        """
        Stable digest of the crate identity, *i.e.* its root and its name.
        """
        hasher = blake3.blake3() # pylint: disable=not-callable
        hasher.update(pickle.dumps((str(self.path), self.name)))
        return hasher.hexdigest()

    def get_output_path(self) -> pathlib.Path:
        """
        Temporary crate build location, created if needed.
        """
        path = self.temp_root / OUTPUT_ROOT_NAME / self.output_file_prefix / self.get_hash()
        path.mkdir(parents = True, exist_ok = True)
        return path

    @property
    def manifest_paths(self) -> tuple[pathlib.Path, pathlib.Path]:
        """
        ``Cargo.toml`` and ``Cargo.lock``, that are not tracked by the compiler dep-info.
        """
        return self.path / self.MANIFEST, self.path / self.LOCKFILE
