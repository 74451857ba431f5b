"""
Errors raised while building a device crate.

Context is added by chaining, *i.e.* ``raise Outer(...) from inner``, such that the
cause chain can be rendered from the outermost to the innermost error, see
:py:class:`ptx_builder.reporter.ErrorLogPrinter`.
"""

import pathlib
import typing

import semantic_version


class PTXBuilderError(Exception):
    """
    Base class of all errors.
    """

class CommandNotFound(PTXBuilderError):
    """
    The executable cannot be found in ``PATH``.
    """
    def __init__(self, command : str, hint : str) -> None:
        self.command = command
        self.hint = hint
        super().__init__(f"Command not found in PATH: '{command}'. {hint}.")

class CommandVersionNotFulfilled(PTXBuilderError):
    """
    The executable is too old (or too new).
    """
    def __init__(self, command : str, current : semantic_version.Version, required : semantic_version.SimpleSpec, hint : str) -> None:
        self.command = command
        self.current = current
        self.required = required
        self.hint = hint
        super().__init__(f"Command version is not fulfilled: '{command}' is currently {current} but {required} is required. {hint}.")

class CommandFailed(PTXBuilderError):
    """
    The executable returned a non-zero exit code.
    """
    def __init__(self, command : str, code : int, stderr : str) -> None:
        self.command = command
        self.code = code
        self.stderr = stderr
        super().__init__(f"Command failed: '{command}' with code '{code}' and output:\n{stderr.strip()}")

class BuildFailed(PTXBuilderError):
    """
    The device crate does not compile.

    :py:attr:`diagnostics` holds the compiler diagnostics, verbatim, without noise lines.
    """
    def __init__(self, diagnostics : typing.Sequence[str]) -> None:
        self.diagnostics = list(diagnostics)
        super().__init__('\n'.join(('Unable to build a PTX crate!', *self.diagnostics)))

class InvalidCratePath(PTXBuilderError):
    def __init__(self, path : pathlib.Path) -> None:
        self.path = path
        super().__init__(f'{path} is not a valid crate path')

class MissingCrateType(PTXBuilderError):
    def __init__(self) -> None:
        super().__init__('Missing crate type. Both lib.rs and main.rs are present; please specify one.')

class InvalidCrateType(PTXBuilderError):
    def __init__(self, crate_type : str) -> None:
        self.crate_type = crate_type
        super().__init__(f"Invalid crate type: '{crate_type}' is not defined by the crate.")

class InternalError(PTXBuilderError):
    """
    An invariant is violated, *e.g.* an empty deps file or a missing build command.
    """
    def __init__(self, message : str) -> None:
        self.message = message
        super().__init__(f'Internal error: {message}')
