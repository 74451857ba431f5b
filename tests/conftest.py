import pathlib
import threading
import typing

import pytest

#: Builds of the same crate share an output directory, they must not run concurrently.
BUILD_LOCK : typing.Final[threading.Lock] = threading.Lock()

@pytest.fixture
def temp_root(tmp_path, monkeypatch) -> pathlib.Path:
    """
    Isolated shared temporary root for build outputs.
    """
    root = tmp_path / 'tmp'
    monkeypatch.setenv('PTX_BUILDER_TEMP_DIR', str(root))
    monkeypatch.delenv('PTX_CRATE_BUILDING', raising = False)
    monkeypatch.delenv('CARGO', raising = False)
    return root

@pytest.fixture
def build_lock() -> typing.Generator[None, None, None]:
    with BUILD_LOCK:
        yield
