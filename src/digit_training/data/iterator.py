"""Epoch-based batch iterator over a decoded digit partition.

The iterator is a two-state machine::

    READY --next()--> READY ... --next() on last batch--> EXHAUSTED
      ^                                                      |
      +------------------------ reset() ---------------------+

It only depends on numpy; :class:`~digit_training.data.datamodule.TorchBatchLoader`
adapts it to torch tensors for Lightning.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from typing import NamedTuple

import numpy as np
from loguru import logger

from digit_training.errors import ExhaustedError
from digit_training.transforms.normalize import normalize_batch

__all__ = ["Batch", "DigitBatchIterator", "IteratorState"]


class IteratorState(enum.Enum):
    READY = "ready"
    EXHAUSTED = "exhausted"


class Batch(NamedTuple):
    """One training step's worth of samples.

    features: float32 array ``(B, rows, columns)`` scaled to ``[0, 1]``.
    labels: int64 array ``(B,)`` of class indices.
    """

    features: np.ndarray
    labels: np.ndarray


class DigitBatchIterator:
    """Serve fixed-size batches from index-aligned images and labels.

    Each iterator owns its cursor and random generator, so several
    iterators may share the same read-only arrays.

    Args:
        images: ``uint8`` array ``(N, rows, columns)``.
        labels: Integer array ``(N,)``.
        batch_size: Nominal batch size. The last batch of an epoch holds the
            remainder when ``N`` is not a multiple of it.
        shuffle: Draw a fresh permutation on construction and on every
            :meth:`reset`. Leave False for the test partition.
        seed: Seed for the permutation sequence. Same seed, same batches.
    """

    def __init__(
        self,
        images: np.ndarray,
        labels: np.ndarray,
        batch_size: int,
        *,
        shuffle: bool = False,
        seed: int | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if len(images) != len(labels):
            raise ValueError(
                f"images and labels differ in length: {len(images)} != {len(labels)}"
            )
        self._images = images
        self._labels = labels
        self.batch_size = batch_size
        self.shuffle = shuffle
        self.seed = seed
        self._rng = np.random.default_rng(seed)
        self._order: np.ndarray = np.arange(len(labels))
        self._cursor = 0
        self._state = IteratorState.READY
        self.epoch = 0
        self._reorder()

    @property
    def num_examples(self) -> int:
        return len(self._labels)

    @property
    def state(self) -> IteratorState:
        return self._state

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        """Number of batches per epoch."""
        return -(-self.num_examples // self.batch_size)

    def _reorder(self) -> None:
        if self.shuffle:
            self._order = self._rng.permutation(self.num_examples)
        if self.num_examples == 0:
            self._state = IteratorState.EXHAUSTED

    def has_next(self) -> bool:
        return self._state is IteratorState.READY

    def next(self) -> Batch:
        """Return the next batch and advance the cursor.

        Raises:
            ExhaustedError: Every sample of this epoch has been served.
        """
        if self._state is IteratorState.EXHAUSTED:
            raise ExhaustedError(
                f"Epoch {self.epoch} exhausted after {self.num_examples} samples; "
                "call reset() to start another"
            )
        end = min(self._cursor + self.batch_size, self.num_examples)
        idx = self._order[self._cursor : end]
        self._cursor = end
        if self._cursor >= self.num_examples:
            self._state = IteratorState.EXHAUSTED
        return Batch(
            features=normalize_batch(self._images[idx]),
            labels=self._labels[idx].astype(np.int64),
        )

    def reset(self) -> None:
        """Rewind to the first batch, reshuffling in shuffle mode."""
        self._cursor = 0
        self._state = IteratorState.READY
        self.epoch += 1
        self._reorder()
        logger.trace(f"Batch iterator reset (epoch {self.epoch}, shuffle={self.shuffle})")

    def __iter__(self) -> Iterator[Batch]:
        """Start a fresh epoch. Resets unless nothing has been served yet."""
        if self._cursor > 0 or self._state is IteratorState.EXHAUSTED:
            self.reset()
        return self

    def __next__(self) -> Batch:
        return self.next()
