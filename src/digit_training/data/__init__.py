"""Data pipeline for digit_training: fetch, decode, batch."""

from digit_training.data.datamodule import MnistDataModule, TorchBatchLoader
from digit_training.data.fetcher import download, download_mnist, mnist_files_present
from digit_training.data.idx import DigitSplit, load_split, read_images, read_labels
from digit_training.data.iterator import Batch, DigitBatchIterator, IteratorState

__all__ = [
    "Batch",
    "DigitBatchIterator",
    "DigitSplit",
    "IteratorState",
    "MnistDataModule",
    "TorchBatchLoader",
    "download",
    "download_mnist",
    "load_split",
    "mnist_files_present",
    "read_images",
    "read_labels",
]
