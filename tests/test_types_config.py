"""Unit tests for digit_training.types, digit_training.config and errors."""

import pytest
import torch
from pydantic import ValidationError

from digit_training.config import DataModuleConfig
from digit_training.constants import MNIST_URL
from digit_training.errors import (
    DigitDataError,
    DownloadError,
    ExhaustedError,
    FormatError,
)
from digit_training.types import ClassificationBatch

# Dummy path: satisfies data_root: str type; never accessed as a real filesystem path.
_DUMMY_ROOT = "/data/mnist"


class TestDataModuleConfig:
    def test_defaults(self) -> None:
        cfg = DataModuleConfig(data_root=_DUMMY_ROOT)
        assert cfg.batch_size == 128
        assert cfg.seed == 123
        assert cfg.shuffle_train is True
        assert cfg.download is True
        assert cfg.base_url == MNIST_URL
        assert cfg.retries == 0

    def test_frozen_raises_on_mutation(self) -> None:
        cfg = DataModuleConfig(data_root=_DUMMY_ROOT)
        with pytest.raises(ValidationError):
            cfg.batch_size = 64  # type: ignore[misc]

    @pytest.mark.parametrize("batch_size", [0, -5])
    def test_batch_size_must_be_positive(self, batch_size: int) -> None:
        with pytest.raises(ValidationError):
            DataModuleConfig(data_root=_DUMMY_ROOT, batch_size=batch_size)

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DataModuleConfig(data_root=_DUMMY_ROOT, retries=-1)

    def test_seed_may_be_none(self) -> None:
        assert DataModuleConfig(data_root=_DUMMY_ROOT, seed=None).seed is None


class TestErrors:
    def test_download_error_is_io_error(self) -> None:
        assert issubclass(DownloadError, OSError)
        assert issubclass(DownloadError, DigitDataError)

    def test_format_error_is_value_error(self) -> None:
        assert issubclass(FormatError, ValueError)
        assert issubclass(FormatError, DigitDataError)

    def test_exhausted_error_stops_iteration(self) -> None:
        assert issubclass(ExhaustedError, StopIteration)
        assert issubclass(ExhaustedError, DigitDataError)


class TestClassificationBatchType:
    def test_typed_dict_keys(self) -> None:
        batch: ClassificationBatch = {
            "images": torch.zeros(4, 1, 28, 28),
            "labels": torch.zeros(4, dtype=torch.long),
        }
        assert batch["images"].shape == (4, 1, 28, 28)
        assert batch["labels"].shape == (4,)
