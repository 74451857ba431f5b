import typing

import rich.console
import rich.style
import rich.text

def to_string(
    ro: rich.console.RenderableType,
    *,
    colors: bool = False,
    width: int = 200,
    **kwargs,
) -> str:
    """
    Use :py:class:`rich.console.Console` in capture mode to render a :py:mod:`rich`
    object to a string.

    Lines are never wrapped, and styles are only emitted if `colors` is set.
    """
    with rich.console.Console(
        width = width,
        color_system = 'standard' if colors else None,
        force_terminal = colors,
        highlight = False,
        **kwargs,
    ) as console, console.capture() as capture:
        console.print(ro, soft_wrap = True, end = '')
    return capture.get()

def prefix_each_line(
    text: str,
    prefix: str,
    *,
    style: str | rich.style.Style = '',
) -> typing.Generator[rich.text.Text, None, None]:
    """
    Yield each line of `text` prefixed with `prefix`, without trailing whitespace.
    """
    for line in text.split('\n'):
        prefixed = rich.text.Text.assemble((prefix, style), line)
        prefixed.rstrip()
        yield prefixed
