"""
Parser for the Makefile-like dep-info files emitted by ``cargo`` and ``rustc``.

A dep-info file starts with a rule::

    /path/to/target/libfoo.rlib: /path/to/src/lib.rs /path/to/src/with\\ space.rs

References:

* https://doc.rust-lang.org/cargo/reference/build-cache.html#dep-info-files
"""

import pathlib
import re
import typing

from ptx_builder.error import InternalError

#: The rule separator is a colon followed by whitespace or by the end of the line.
#: It cannot be mistaken for the colon of a drive letter, *e.g.* ``C:\``.
SEPARATOR : typing.Final[re.Pattern[str]] = re.compile(r':(?=\s|$)')

def logical_lines(content : str) -> typing.Generator[str, None, None]:
    """
    Join physical lines that end with a line continuation.
    """
    current : list[str] = []
    for line in content.splitlines():
        if line.endswith('\\'):
            current.append(line[:-1])
            continue
        current.append(line)
        yield ' '.join(current)
        current.clear()
    if current:
        yield ' '.join(current)

def split_paths(prerequisites : str) -> list[str]:
    """
    Split on unescaped whitespace. ``\\ `` is an escaped space, any other backslash is kept as is,
    *e.g.* in ``\\\\server\\share`` or ``\\\\?\\C:\\``.
    """
    paths : list[str] = []
    current : list[str] = []
    index = 0
    while index < len(prerequisites):
        char = prerequisites[index]
        if char == '\\' and prerequisites[index + 1:index + 2] == ' ':
            current.append(' ')
            index += 2
            continue
        if char.isspace():
            if current:
                paths.append(''.join(current))
                current.clear()
        else:
            current.append(char)
        index += 1
    if current:
        paths.append(''.join(current))
    return paths

def parse(content : str) -> tuple[str, list[pathlib.Path]]:
    """
    Parse the first rule of a dep-info file.

    :return: The target and its prerequisites.

    Other rules (*e.g.* the empty ``path:`` rules emitted by ``rustc``) are ignored.

    >>> from ptx_builder.utils.depfile import parse
    >>> parse('/out/libfoo.rlib: /src/lib.rs /src/mod1.rs\\n')
    ('/out/libfoo.rlib', [PosixPath('/src/lib.rs'), PosixPath('/src/mod1.rs')])
    """
    first = next((line for line in logical_lines(content) if line.strip()), None)

    if first is None:
        raise InternalError('Empty deps file')

    if (matched := SEPARATOR.search(first)) is None:
        raise InternalError('Malformed deps file')

    target = first[:matched.start()].strip()
    prerequisites = first[matched.end():]

    return target, [pathlib.Path(p) for p in split_paths(prerequisites)]
