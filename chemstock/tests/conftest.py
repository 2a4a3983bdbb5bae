import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so that "chemstock" can be imported
# structure: <root>/chemstock/tests/conftest.py
current_dir = Path(__file__).parent.absolute()
root_dir = current_dir.parent.parent
sys.path.insert(0, str(root_dir))

from chemstock.tests.fakes import FakeStore  # noqa: E402


@pytest.fixture
def fake_store():
    """Factory for FakeStore instances."""
    return FakeStore
