"""Training entrypoint for digit_training.

Usage:
    digit-train                                     # MLP defaults
    digit-train --config-name train_mnist_lenet     # convolutional network
    digit-train data.batch_size=256                 # override batch size
    digit-train trainer.max_epochs=3 evaluate=false # override epochs, skip test
"""

import sys
from typing import Any

import hydra
import lightning as L
from hydra.utils import to_absolute_path
from loguru import logger
from omegaconf import DictConfig, OmegaConf

# @register side effects must run before Hydra composes the config.
import digit_training.data  # noqa: F401
import digit_training.models  # noqa: F401
from digit_training.errors import DigitDataError


def build_callbacks(cfg: DictConfig) -> list[L.Callback]:
    """Instantiate every ``_target_`` entry under ``cfg.callbacks``."""
    callbacks: list[L.Callback] = []
    if cfg.get("callbacks"):
        for v in cfg.callbacks.values():
            if v is not None and "_target_" in v:
                callbacks.append(hydra.utils.instantiate(v))
    return callbacks


def build_loggers(cfg: DictConfig) -> list[Any]:
    """Instantiate every ``_target_`` entry under ``cfg.logging``."""
    loggers: list[Any] = []
    if cfg.get("logging"):
        for v in cfg.logging.values():
            if v is not None and "_target_" in v:
                loggers.append(hydra.utils.instantiate(v))
    return loggers


def run(cfg: DictConfig) -> dict[str, float]:
    """Fit the configured model and, unless ``evaluate`` is false, test it.

    Returns:
        The test metrics, or an empty dict when evaluation is skipped.
    """
    L.seed_everything(cfg.get("seed", 123), workers=True)

    # Hydra may chdir into its output directory; resolve data against the
    # launch directory.
    logger.info("Load data....")
    datamodule: L.LightningDataModule = hydra.utils.instantiate(
        cfg.data, data_root=to_absolute_path(cfg.data.data_root)
    )

    logger.info("Build model....")
    model: L.LightningModule = hydra.utils.instantiate(cfg.model)

    loggers = build_loggers(cfg)
    trainer = L.Trainer(
        **dict(cfg.trainer),
        callbacks=build_callbacks(cfg),
        logger=loggers or False,
    )

    logger.info("Train model....")
    trainer.fit(model, datamodule=datamodule)

    if not cfg.get("evaluate", True):
        return {}

    logger.info("Evaluate model....")
    results = trainer.test(model, datamodule=datamodule)
    metrics = {k: float(v) for k, v in results[0].items()} if results else {}
    logger.info("****************Example finished********************")
    return metrics


@hydra.main(version_base=None, config_path="conf", config_name="train_mnist_mlp")
def main(cfg: DictConfig) -> None:
    """Run training with the given Hydra config."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))

    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    try:
        run(cfg)
    except DigitDataError as e:
        logger.error(f"Dataset error: {e}")
        raise


if __name__ == "__main__":
    main()
