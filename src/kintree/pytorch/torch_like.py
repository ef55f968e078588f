# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from dataclasses import dataclass

import torch

from kintree.core.array_api_math import (
    ArrayAPIFactory,
    ArrayAPILike,
    ArrayAPISpatialMath,
    ArraySpec,
)


@dataclass
class TorchLike(ArrayAPILike):
    """Class wrapping pyTorch types"""

    array: torch.Tensor


class TorchLikeFactory(ArrayAPIFactory):

    def __init__(self, spec: ArraySpec | None = None):
        if spec is None:
            super().__init__(
                TorchLike, torch, dtype=torch.float64, device=torch.device("cpu")
            )
        else:
            super().__init__(TorchLike, spec.xp, dtype=spec.dtype, device=spec.device)


class SpatialMath(ArrayAPISpatialMath):
    def __init__(self, spec: ArraySpec | None = None):
        super().__init__(TorchLikeFactory(spec=spec))
