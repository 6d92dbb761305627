"""Pydantic frozen configuration models for digit_training."""

from pydantic import BaseModel, Field

from digit_training.constants import MNIST_URL


class DataModuleConfig(BaseModel, frozen=True):
    """Configuration for MnistDataModule.

    All fields are validated at construction time. Frozen after creation.
    """

    data_root: str
    batch_size: int = Field(default=128, gt=0)
    seed: int | None = 123
    shuffle_train: bool = True
    download: bool = True
    base_url: str = MNIST_URL
    timeout_seconds: float = Field(default=60.0, gt=0)
    retries: int = Field(default=0, ge=0)
