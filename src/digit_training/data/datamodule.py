"""LightningDataModule for the MNIST handwritten-digit dataset."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import lightning as L
import torch
from loguru import logger

from digit_training.config import DataModuleConfig
from digit_training.constants import MNIST_URL, NUM_CLASSES
from digit_training.data.fetcher import download_mnist, mnist_files_present
from digit_training.data.idx import DigitSplit, load_split
from digit_training.data.iterator import DigitBatchIterator
from digit_training.types import ClassificationBatch
from digit_training.utils.hydra import register


class TorchBatchLoader:
    """Iterable adapter turning numpy batches into ClassificationBatch dicts.

    Lightning calls ``iter()`` once per epoch, which resets the wrapped
    iterator (and reshuffles it when it was built with ``shuffle=True``).
    Images gain a channel axis: ``(B, H, W)`` -> ``(B, 1, H, W)``.
    """

    def __init__(self, batches: DigitBatchIterator) -> None:
        self.batches = batches

    def __len__(self) -> int:
        return len(self.batches)

    def __iter__(self) -> Iterator[ClassificationBatch]:
        for batch in self.batches:
            yield {
                "images": torch.from_numpy(batch.features).unsqueeze(1),
                "labels": torch.from_numpy(batch.labels),
            }


@register(
    group="data",
    name="mnist",
    data_root="data/mnist",
    batch_size=128,
    seed=123,
    shuffle_train=True,
    download=True,
    base_url=MNIST_URL,
    timeout_seconds=60.0,
    retries=0,
)
class MnistDataModule(L.LightningDataModule):
    """DataModule serving the MNIST train and test partitions.

    ``prepare_data`` fetches the four IDX archives into ``data_root`` when any
    of them is missing. ``setup`` decodes them once; every dataloader hook
    then builds a fresh :class:`DigitBatchIterator` over the shared arrays.

    The training partition is shuffled with ``seed``; the test partition is
    served in file order and doubles as the validation set, matching how the
    networks were originally evaluated after each epoch.

    Args:
        config: DataModuleConfig frozen model. If provided, flat kwargs are ignored.
        data_root: Directory holding (or receiving) the ``*.gz`` files.
        batch_size: Samples per batch.
        seed: Shuffle seed for the training partition.
        shuffle_train: Reshuffle the training partition every epoch.
        download: Fetch missing files in ``prepare_data``.
        base_url: Remote base URL for the four files.
        timeout_seconds: HTTP timeout per request.
        retries: Extra attempts per file after a failed download.
        **kwargs: Absorbs extra Hydra-injected keys (_target_, _recursive_, etc.).
    """

    def __init__(
        self,
        config: DataModuleConfig | None = None,
        *,
        data_root: str = "data/mnist",
        batch_size: int = 128,
        seed: int | None = 123,
        shuffle_train: bool = True,
        download: bool = True,
        base_url: str = MNIST_URL,
        timeout_seconds: float = 60.0,
        retries: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__()
        if config is not None:
            self._config = config
        else:
            self._config = DataModuleConfig(
                data_root=data_root,
                batch_size=batch_size,
                seed=seed,
                shuffle_train=shuffle_train,
                download=download,
                base_url=base_url,
                timeout_seconds=timeout_seconds,
                retries=retries,
            )
        self._data_root = Path(self._config.data_root)
        self._batch_size = self._config.batch_size

        self._train_split: DigitSplit | None = None
        self._test_split: DigitSplit | None = None

    @property
    def config(self) -> DataModuleConfig:
        return self._config

    @property
    def class_to_idx(self) -> dict[str, int]:
        """Digit name to class index: ``{"0": 0, ..., "9": 9}``."""
        return {str(i): i for i in range(NUM_CLASSES)}

    @property
    def num_classes(self) -> int:
        return NUM_CLASSES

    # ------------------------------------------------------------------
    # LightningDataModule lifecycle
    # ------------------------------------------------------------------

    def prepare_data(self) -> None:
        """Download the archives unless they are already on disk."""
        if mnist_files_present(self._data_root):
            logger.info(f"MNIST files found in {self._data_root}, skipping download")
            return
        if not self._config.download:
            raise FileNotFoundError(
                f"MNIST files missing from {self._data_root} and download=False"
            )
        download_mnist(
            self._data_root,
            base_url=self._config.base_url,
            retries=self._config.retries,
            timeout_seconds=self._config.timeout_seconds,
        )

    def setup(self, stage: str | None = None) -> None:
        """Decode the partitions needed for ``stage``.

        Args:
            stage: "fit" loads train + test (test is also the validation
                set). "validate", "test" and "predict" load test only.
                None loads both.
        """
        if stage in ("fit", None) and self._train_split is None:
            self._train_split = load_split(self._data_root, "train")
            logger.info(f"Setup fit: train={len(self._train_split)} samples")

        if self._test_split is None:
            self._test_split = load_split(self._data_root, "test")
            logger.info(f"Setup {stage or 'all'}: test={len(self._test_split)} samples")

    # ------------------------------------------------------------------
    # Batch iterators
    # ------------------------------------------------------------------

    def train_batches(self) -> DigitBatchIterator:
        """Shuffled iterator over the training partition."""
        if self._train_split is None:
            raise RuntimeError("Call setup('fit') first")
        return DigitBatchIterator(
            self._train_split.images,
            self._train_split.labels,
            self._batch_size,
            shuffle=self._config.shuffle_train,
            seed=self._config.seed,
        )

    def test_batches(self) -> DigitBatchIterator:
        """In-order iterator over the test partition."""
        if self._test_split is None:
            raise RuntimeError("Call setup('test') first")
        return DigitBatchIterator(
            self._test_split.images,
            self._test_split.labels,
            self._batch_size,
        )

    def train_dataloader(self) -> TorchBatchLoader:
        return TorchBatchLoader(self.train_batches())

    def val_dataloader(self) -> TorchBatchLoader:
        return TorchBatchLoader(self.test_batches())

    def test_dataloader(self) -> TorchBatchLoader:
        return TorchBatchLoader(self.test_batches())

    def predict_dataloader(self) -> TorchBatchLoader:
        return TorchBatchLoader(self.test_batches())
