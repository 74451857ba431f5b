"""
Report the result of a build to the host ``cargo`` build script.
"""

import logging
import sys
import typing

import rich.text

from ptx_builder.builder import Builder, BuildStatus
from ptx_builder.error import PTXBuilderError
from ptx_builder.utils import rich_helpers

#: Prefix of every line of the error log.
PREFIX : typing.Final[str] = '[PTX]'

#: Style of :py:data:`PREFIX`.
PREFIX_STYLE : typing.Final[str] = 'bright_black'

#: Value reported instead of the assembly path when the build is not needed.
NULL_PATH : typing.Final[str] = '/dev/null'

def iter_causes(error : BaseException) -> typing.Generator[BaseException, None, None]:
    """
    Yield `error` and then its causes, from the most general to the most specific.
    """
    current : BaseException | None = error
    while current is not None:
        yield current
        current = current.__cause__

class ErrorLogPrinter:
    """
    Render an error and its causes as a prefixed log::

        [PTX] Unable to build a PTX crate!
        [PTX] error[E0425]: cannot find function `external_fn` in this scope
        [PTX]
        [PTX] caused by:
        [PTX]   Command failed: 'cargo' with code '101' and output:
        [PTX]   ...
    """
    def __init__(self, error : BaseException) -> None:
        self.error = error
        self.colors = True

    def disable_colors(self) -> 'ErrorLogPrinter':
        self.colors = False
        return self

    def to_text(self) -> rich.text.Text:
        error, *causes = iter_causes(self.error)

        lines = list(rich_helpers.prefix_each_line(str(error), f'{PREFIX} ', style = PREFIX_STYLE))

        for cause in causes:
            lines.extend(rich_helpers.prefix_each_line('\n caused by:', PREFIX, style = PREFIX_STYLE))
            lines.extend(rich_helpers.prefix_each_line(str(cause), f'{PREFIX}   ', style = PREFIX_STYLE))

        return rich.text.Text('\n').join(lines)

    def __str__(self) -> str:
        return rich_helpers.to_string(self.to_text(), colors = self.colors) + '\n'

class CargoAdapter:
    """
    Translate the result of a :py:class:`ptx_builder.builder.Builder` into ``cargo`` build script directives.

    References:

    * https://doc.rust-lang.org/cargo/reference/build-scripts.html#outputs-of-the-build-script
    """
    def __init__(self, env_name : str, *, stdout : typing.TextIO | None = None, stderr : typing.TextIO | None = None) -> None:
        """
        :param env_name: Environment variable through which the host crate receives the assembly path.
        """
        self.env_name = env_name
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def build(self, builder : Builder) -> int:
        """
        :return: The exit code, non-zero if the build failed.
        """
        try:
            for directive in self.directives(builder):
                print(directive, file = self.stdout)
        except (PTXBuilderError, OSError) as error:
            logging.debug(f'Build of {builder.crate.path} failed.', exc_info = error)
            printer = ErrorLogPrinter(error)
            if not builder.colors:
                printer.disable_colors()
            print(printer, file = self.stderr, end = '')
            return 1
        return 0

    def directives(self, builder : Builder) -> list[str]:
        result = builder.build()

        if result.status is BuildStatus.NOT_NEEDED:
            return [f'cargo:rustc-env={self.env_name}={NULL_PATH}']

        assert result.output is not None

        dependencies = result.output.dependencies()

        return [
            f'cargo:rustc-env={self.env_name}={result.output.get_assembly_path()}',
            *(f'cargo:rerun-if-changed={path}' for path in dependencies),
        ]
