"""Exception hierarchy for the digit dataset pipeline."""

from __future__ import annotations


class DigitDataError(Exception):
    """Base error for fetching, decoding and batching digit data."""


class DownloadError(DigitDataError, OSError):
    """A remote transfer or the destination filesystem failed."""


class FormatError(DigitDataError, ValueError):
    """Binary data is structurally invalid (bad magic, truncated, mismatched)."""


class ExhaustedError(DigitDataError, StopIteration):
    """``next()`` was called on a batch iterator that has served every sample.

    Subclasses ``StopIteration`` so a plain ``for`` loop ends the epoch.
    """


__all__ = ["DigitDataError", "DownloadError", "ExhaustedError", "FormatError"]
