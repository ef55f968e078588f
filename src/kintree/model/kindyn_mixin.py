from __future__ import annotations

from typing import Any, Iterable


class KinDynFactoryMixin:
    """Shared helpers to instantiate KinDyn* classes from different model sources."""

    @classmethod
    def from_descriptions(
        cls: type[KinDynFactoryMixin], descriptions: Iterable[Any], *args, **kwargs
    ):
        """Instantiate using a sequence of node descriptions.

        Args:
            descriptions (Iterable[NodeDescription | dict]): the nodes of the tree

        Returns:
            KinDynFactoryMixin: An instance of the class initialized with the provided nodes and arguments.
        """
        return cls(list(descriptions), *args, **kwargs)

    @classmethod
    def from_factory(cls: type[KinDynFactoryMixin], factory: Any, *args, **kwargs):
        """Instantiate using a ModelFactory. The factory math must belong to the same backend.

        Args:
            factory (ModelFactory): the model factory

        Returns:
            KinDynFactoryMixin: An instance of the class initialized with the provided factory and arguments.
        """
        return cls(factory, *args, **kwargs)
