import random
import sys

import pytest

from tests.repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tests.fakes import write_item  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def library(tmp_path):
    root = tmp_path / "Demo.library"
    (root / "images").mkdir(parents=True)
    return root


@pytest.fixture
def scenario_library(library):
    """Items A(10 bytes, tags [x]), B(20, [x, y]), C(5, [y])."""
    write_item(library, "A", {"name": "A", "ext": "png", "tags": ["x"]}, b"a" * 10)
    write_item(library, "B", {"name": "B", "ext": "png", "tags": ["x", "y"]}, b"b" * 20)
    write_item(library, "C", {"name": "C", "ext": "png", "tags": ["y"]}, b"c" * 5)
    return library
