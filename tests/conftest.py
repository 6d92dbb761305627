"""Shared pytest fixtures for digit_training tests."""

from pathlib import Path

import pytest
from idx_fakes import write_mnist_dir


@pytest.fixture()
def mnist_dir(tmp_path: Path) -> Path:
    """Minimal MNIST directory: 100 train and 40 test 28x28 samples.

    File names and binary layout mirror the real distribution; pixels are
    random and labels cycle through 0-9.
    """
    return write_mnist_dir(tmp_path / "mnist")
