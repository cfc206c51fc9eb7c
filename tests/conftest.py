import pytest

from minirouter import Group
from minirouter.testing import TestClient


@pytest.fixture
def root():
    return Group.new()


@pytest.fixture
def client(root):
    return TestClient(root)
