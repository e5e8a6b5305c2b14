#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import io
import pathlib
from typing import Callable

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from mpfloat import config
from mpfloat.io import redirect_stdin


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def restore_defaults():
    """Restore the process-wide precision and rounding after every test."""
    saved = config.get_defaults()
    yield saved
    config.set_default_precision(saved.precision)
    config.set_default_rounding(saved.rounding)


@pytest.fixture
def temp_file(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Fixture to create a temporary file with the given bytes."""

    def _create_file(content: bytes = b"", name: str = "value.txt") -> pathlib.Path:
        file_path = tmp_path / name
        file_path.write_bytes(content)
        return file_path

    return _create_file


@pytest.fixture
def closed_file(tmp_path: pathlib.Path):
    """A binary file object that has already been closed."""
    file_path = tmp_path / "closed.txt"
    file_path.write_bytes(b"1.5\n")
    f = open(file_path, "rb")
    f.close()
    return f


@pytest.fixture
def stdin_with():
    """Fixture returning a context manager that redirects stdin to the given bytes."""

    def _redirect(data: bytes):
        return redirect_stdin(io.TextIOWrapper(io.BytesIO(data), encoding="utf-8"))

    return _redirect
