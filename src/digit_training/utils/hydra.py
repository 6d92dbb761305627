"""Hydra ConfigStore registration for models and data modules."""

from __future__ import annotations

from typing import Any

from hydra.core.config_store import ConfigStore
from loguru import logger


def register(
    cls: type[Any] | None = None,
    *,
    group: str | None = None,
    name: str | None = None,
    **defaults: Any,
) -> type[Any] | Any:
    """Class decorator storing a ``_target_`` node in Hydra's ConfigStore.

    The node points at the decorated class and carries ``defaults`` as its
    overridable keys, so ``model=lenet model.learning_rate=0.02`` works
    without a YAML file per class.

    Arguments:
        cls: The class to register (when used without parentheses).
        group: ConfigStore group. Defaults to the parent package name with a
            trailing ``s`` removed (``digit_training.models.mlp`` -> ``model``).
        name: Config name. Defaults to the lowercased class name.
        **defaults: Default values for the configuration node.
    """

    def _process_class(target_cls: type[Any]) -> type[Any]:
        config_group = group
        if config_group is None:
            config_group = target_cls.__module__.split(".")[-2].removesuffix("s")
        config_name = name or target_cls.__name__.lower()

        node: dict[str, Any] = {
            "_target_": f"{target_cls.__module__}.{target_cls.__name__}"
        }
        node.update(defaults)
        ConfigStore.instance().store(group=config_group, name=config_name, node=node)
        logger.debug(
            f"Registered {target_cls.__name__} as '{config_group}/{config_name}'"
        )
        return target_cls

    if cls is None:
        return _process_class
    return _process_class(cls)
