"""MNIST digit classifier training harness."""

__version__ = "0.1.0"
