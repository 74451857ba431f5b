"""
Executables the build depends on, along with their requirements.
"""

import abc
import sys
import typing

import semantic_version

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

class Executable(abc.ABC):
    """
    Details and requirements for an executable.
    """
    #: Executable name in ``PATH``.
    NAME : typing.ClassVar[str]

    #: How to install the executable when it is missing.
    VERIFICATION_HINT : typing.ClassVar[str] = 'Please make sure you have it installed and in PATH'

    #: How to update the executable when it is outdated.
    VERSION_HINT : typing.ClassVar[str]

    #: Version constraint, if any.
    REQUIRED_VERSION : typing.ClassVar[semantic_version.SimpleSpec | None] = None

    @property
    def name(self) -> str:
        return self.NAME

    def normalize_version(self, version : semantic_version.Version) -> semantic_version.Version:
        """
        Hook to adjust the version reported by the executable before it is checked against :py:attr:`REQUIRED_VERSION`.
        """
        return version

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.NAME!r})'

class Cargo(Executable):
    """
    ``cargo`` command.
    """
    NAME : typing.ClassVar[str] = 'cargo'
    VERSION_HINT : typing.ClassVar[str] = 'Please update Rust and Cargo to latest nightly versions'
    REQUIRED_VERSION : typing.ClassVar[semantic_version.SimpleSpec | None] = semantic_version.SimpleSpec('>=1.30.0')

    @override
    def normalize_version(self, version : semantic_version.Version) -> semantic_version.Version:
        """
        Omit the Rust channel name (*e.g.* ``nightly``) because it is not really semver-correct.
        """
        return semantic_version.Version(major = version.major, minor = version.minor, patch = version.patch)

class Linker(Executable):
    """
    ``ptx-linker`` command.
    """
    NAME : typing.ClassVar[str] = 'ptx-linker'
    VERIFICATION_HINT : typing.ClassVar[str] = "You can install it with: 'cargo install ptx-linker'"
    VERSION_HINT : typing.ClassVar[str] = "You can update it with: 'cargo install -f ptx-linker'"
    REQUIRED_VERSION : typing.ClassVar[semantic_version.SimpleSpec | None] = semantic_version.SimpleSpec('>=0.9.0')
