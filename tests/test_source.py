import pathlib
import tempfile

import pytest

from ptx_builder.error import InternalError, InvalidCratePath, InvalidCrateType, MissingCrateType
from ptx_builder.source import OUTPUT_ROOT_NAME, Crate, CrateShape, CrateType, get_temp_root

from tests.toolchain import FIXTURES


class TestAnalyse:
    """
    Tests for :py:meth:`ptx_builder.source.Crate.analyse`.
    """
    def test_library(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'sample-crate')

        assert crate.name == 'sample-ptx_crate'
        assert crate.shape is CrateShape.LIBRARY
        assert crate.output_file_prefix == 'sample_ptx_crate'
        assert crate.get_deps_file_prefix() == 'libsample_ptx_crate'

    def test_binary(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'app-crate')

        assert crate.shape is CrateShape.BINARY
        assert crate.output_file_prefix == 'sample_app_ptx_crate'
        assert crate.get_deps_file_prefix() == 'sample_app_ptx_crate'

    def test_mixed(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'mixed-crate')

        assert crate.shape is CrateShape.MIXED
        assert crate.output_file_prefix == 'mixed_ptx_crate'

    def test_relative_path(self, temp_root, monkeypatch) -> None:
        """
        The path is resolved against the current working directory.
        """
        monkeypatch.chdir(FIXTURES.parent.parent)

        crate = Crate.analyse('tests/fixtures/sample-crate')

        assert crate.path.is_absolute()
        assert crate.path == FIXTURES / 'sample-crate'

    def test_non_existing_crate(self) -> None:
        with pytest.raises(InvalidCratePath) as exc:
            Crate.analyse('tests/fixtures/non-existing-crate')

        assert exc.value.path.is_absolute()
        assert exc.value.path.as_posix().endswith('tests/fixtures/non-existing-crate')

    def test_not_a_directory(self) -> None:
        with pytest.raises(InvalidCratePath) as exc:
            Crate.analyse(pathlib.Path(__file__))

        assert exc.value.path == pathlib.Path(__file__)

    def test_manifest_is_a_directory(self, tmp_path) -> None:
        (tmp_path / 'Cargo.toml').mkdir()

        with pytest.raises(InvalidCratePath):
            Crate.analyse(tmp_path)

    def test_no_entry_point(self, tmp_path) -> None:
        (tmp_path / 'Cargo.toml').write_text('[package]\nname = "empty"\n', encoding = 'utf-8')

        with pytest.raises(InternalError, match = 'Unable to find neither lib.rs nor main.rs'):
            Crate.analyse(tmp_path)

    def test_no_name(self, tmp_path) -> None:
        (tmp_path / 'Cargo.toml').write_text('[workspace]\nmembers = []\n', encoding = 'utf-8')

        with pytest.raises(InternalError, match = 'Cannot get crate name'):
            Crate.analyse(tmp_path)

    def test_invalid_manifest(self, tmp_path) -> None:
        (tmp_path / 'Cargo.toml').write_text('[package\n', encoding = 'utf-8')

        with pytest.raises(InternalError, match = 'Unable to parse') as exc:
            Crate.analyse(tmp_path)

        assert exc.value.__cause__ is not None

class TestDepsFilePrefix:
    """
    Tests for :py:meth:`ptx_builder.source.Crate.get_deps_file_prefix`.
    """
    def test_library(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'sample-crate')

        assert crate.get_deps_file_prefix(CrateType.LIBRARY) == 'libsample_ptx_crate'

        with pytest.raises(InvalidCrateType) as exc:
            crate.get_deps_file_prefix(CrateType.BINARY)

        assert exc.value.crate_type == 'Binary'

    def test_binary(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'app-crate')

        assert crate.get_deps_file_prefix(CrateType.BINARY) == 'sample_app_ptx_crate'

        with pytest.raises(InvalidCrateType) as exc:
            crate.get_deps_file_prefix(CrateType.LIBRARY)

        assert exc.value.crate_type == 'Library'

    def test_mixed(self, temp_root) -> None:
        """
        The crate type is only required when the prefix is asked for.
        """
        crate = Crate.analyse(FIXTURES / 'mixed-crate')

        with pytest.raises(MissingCrateType):
            crate.get_deps_file_prefix()

        assert crate.get_deps_file_prefix(CrateType.LIBRARY) == 'libmixed_ptx_crate'
        assert crate.get_deps_file_prefix(CrateType.BINARY) == 'mixed_ptx_crate'

class TestOutputPath:
    """
    Tests for :py:meth:`ptx_builder.source.Crate.get_output_path`.
    """
    def test_location(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'sample-crate')

        path = crate.get_output_path()

        assert path.is_dir()
        assert path.parent == temp_root / OUTPUT_ROOT_NAME / 'sample_ptx_crate'
        assert path.name == crate.get_hash()

    def test_consistent(self, temp_root) -> None:
        """
        The same crate always gets the same directory.
        """
        first = Crate.analyse(FIXTURES / 'sample-crate')
        second = Crate.analyse(FIXTURES / 'sample-crate')

        assert first.get_hash() == second.get_hash()
        assert first.get_output_path() == first.get_output_path() == second.get_output_path()

    def test_distinct(self, temp_root) -> None:
        """
        Crates with the same name at different locations do not collide.
        """
        crate = Crate.analyse(FIXTURES / 'sample-crate')
        other = Crate(path = pathlib.Path('/elsewhere'), name = crate.name, shape = crate.shape, temp_root = temp_root)

        assert crate.get_hash() != other.get_hash()
        assert crate.get_output_path() != other.get_output_path()

    def test_default_temp_root(self, monkeypatch) -> None:
        monkeypatch.delenv('PTX_BUILDER_TEMP_DIR', raising = False)

        assert get_temp_root() == pathlib.Path(tempfile.gettempdir())
        assert get_temp_root({'PTX_BUILDER_TEMP_DIR': '/custom'}) == pathlib.Path('/custom')

    def test_manifest_paths(self, temp_root) -> None:
        crate = Crate.analyse(FIXTURES / 'sample-crate')

        assert crate.manifest_paths == (FIXTURES / 'sample-crate' / 'Cargo.toml', FIXTURES / 'sample-crate' / 'Cargo.lock')
