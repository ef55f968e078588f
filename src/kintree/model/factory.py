from __future__ import annotations

from typing import Any

from kintree.model.abc_factories import ModelFactory
from kintree.model.description import NodeDescription
from kintree.model.std_factories.std_model import DescriptionModelFactory


def build_model_factory(description: Any, math) -> ModelFactory:
    """Return a ModelFactory from a ModelFactory or a sequence of node descriptions/dicts."""

    if isinstance(description, ModelFactory):
        return description

    if not isinstance(description, (str, bytes, dict)):
        try:
            items = list(description)
        except TypeError:
            items = None
        if items is not None and all(
            isinstance(item, (NodeDescription, dict)) for item in items
        ):
            return DescriptionModelFactory(descriptions=items, math=math)

    raise ValueError(
        f"Unsupported model description. Expected a ModelFactory or a sequence of NodeDescription/dict. "
        f"Got: {type(description)!r}"
    )
