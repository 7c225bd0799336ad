"""Pytest configuration for repository-relative imports."""

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hypotest.datasets import iris, mtcars


@pytest.fixture
def flowers():
    return iris()


@pytest.fixture
def cars():
    return mtcars()
