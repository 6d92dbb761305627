"""Fixed facts about the MNIST distribution files."""

from typing import Final

# The historic yann.lecun.com host no longer serves the archives; this is the
# mirror torchvision downloads from.
MNIST_URL: Final[str] = "https://ossci-datasets.s3.amazonaws.com/mnist/"

TRAIN_IMAGES: Final[str] = "train-images-idx3-ubyte.gz"
TRAIN_LABELS: Final[str] = "train-labels-idx1-ubyte.gz"
TEST_IMAGES: Final[str] = "t10k-images-idx3-ubyte.gz"
TEST_LABELS: Final[str] = "t10k-labels-idx1-ubyte.gz"

# Download order: training pair first, then test pair.
MNIST_FILES: Final[tuple[str, ...]] = (
    TRAIN_IMAGES,
    TRAIN_LABELS,
    TEST_IMAGES,
    TEST_LABELS,
)

# (images, labels) file names per partition.
SPLIT_FILES: Final[dict[str, tuple[str, str]]] = {
    "train": (TRAIN_IMAGES, TRAIN_LABELS),
    "test": (TEST_IMAGES, TEST_LABELS),
}

# IDX magic numbers: 0x08 (unsigned byte) followed by the tensor rank.
IMAGES_MAGIC: Final[int] = 0x00000803
LABELS_MAGIC: Final[int] = 0x00000801

NUM_CLASSES: Final[int] = 10
IMAGE_ROWS: Final[int] = 28
IMAGE_COLUMNS: Final[int] = 28
