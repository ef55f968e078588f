# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Optional

import array_api_compat as aac

from kintree.core.spatial_math import ArrayLike, ArrayLikeFactory, SpatialMath


@dataclass(frozen=True)
class ArraySpec:
    xp: ModuleType  # array API namespace (compat-wrapped if needed)
    dtype: Optional[Any]  # xp.float64, torch.float64, jnp.float64, etc.
    device: Optional[Any]  # xp device object (torch device, jax device, "cpu", ...)


def xp_getter(*xs: Any):
    return aac.array_namespace(*xs)


def _unwrap(x: Any) -> Any:
    # python scalars and raw arrays pass through
    return x.array if isinstance(x, ArrayLike) else x


@dataclass
class ArrayAPILike(ArrayLike):
    """Generic Array-API-style wrapper used by NumPy/JAX/Torch backends."""

    array: Any

    def __getitem__(self, idx) -> "ArrayAPILike":
        return self.__class__(self.array[idx])

    @property
    def shape(self):
        return self.array.shape

    @property
    def ndim(self):
        return self.array.ndim

    @property
    def T(self) -> "ArrayAPILike":
        if getattr(self.array, "ndim", 0) < 2:
            return self.__class__(self.array)
        xp = xp_getter(self.array)
        return self.__class__(xp.swapaxes(self.array, -1, -2))

    def __matmul__(self, other) -> "ArrayAPILike":
        xp = xp_getter(self.array)
        return self.__class__(xp.matmul(self.array, _unwrap(other)))

    def __rmatmul__(self, other) -> "ArrayAPILike":
        xp = xp_getter(self.array)
        return self.__class__(xp.matmul(_unwrap(other), self.array))

    def __mul__(self, other) -> "ArrayAPILike":
        return self.__class__(self.array * _unwrap(other))

    def __rmul__(self, other) -> "ArrayAPILike":
        return self.__class__(_unwrap(other) * self.array)

    def __truediv__(self, other) -> "ArrayAPILike":
        return self.__class__(self.array / _unwrap(other))

    def __add__(self, other) -> "ArrayAPILike":
        return self.__class__(self.array + _unwrap(other))

    def __radd__(self, other) -> "ArrayAPILike":
        return self.__class__(_unwrap(other) + self.array)

    def __sub__(self, other) -> "ArrayAPILike":
        return self.__class__(self.array - _unwrap(other))

    def __rsub__(self, other) -> "ArrayAPILike":
        return self.__class__(_unwrap(other) - self.array)

    def __neg__(self) -> "ArrayAPILike":
        return self.__class__(-self.array)


class ArrayAPIFactory(ArrayLikeFactory):
    """
    Generic factory. Give it (a) a Like class and (b) an xp namespace
    (array_api_compat.* if available; otherwise the library module).
    """

    def __init__(self, like_cls, xp, *, dtype=None, device=None):
        self._like = like_cls
        self._xp = xp
        self._dtype = dtype
        self._device = device

    @property
    def xp(self):
        return self._xp

    @property
    def dtype(self):
        return self._dtype

    def zeros(self, *shape) -> ArrayAPILike:
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        x = self._xp.zeros(shape, dtype=self._dtype, device=self._device)
        return self._like(x)

    def eye(self, x: int) -> ArrayAPILike:
        return self._like(self._xp.eye(x, dtype=self._dtype, device=self._device))

    def asarray(self, x) -> ArrayAPILike:
        x = _unwrap(x)
        # preserve the gradient if x is a torch tensor
        if getattr(x, "requires_grad_", False):
            return self._like(x.to(device=self._device, dtype=self._dtype))
        return self._like(self._xp.asarray(x, dtype=self._dtype, device=self._device))

    def zeros_like(self, x: ArrayAPILike) -> ArrayAPILike:
        return self._like(self._xp.zeros_like(x.array))

    def ones_like(self, x: ArrayAPILike) -> ArrayAPILike:
        return self._like(self._xp.ones_like(x.array))


class ArrayAPISpatialMath(SpatialMath):
    """A SpatialMath implementing the backend primitives with the Array API.

    Works for NumPy, PyTorch, and JAX.
    """

    def __init__(self, factory, xp_getter: Callable[..., Any] = xp_getter):
        super().__init__(factory)
        self._xp_getter = xp_getter

    def _xp(self, *xs: Any):
        return self._xp_getter(*xs)

    def sin(self, x):
        x = self.factory.asarray(x)
        xp = self._xp(x.array)
        return self.factory.asarray(xp.sin(x.array))

    def cos(self, x):
        x = self.factory.asarray(x)
        xp = self._xp(x.array)
        return self.factory.asarray(xp.cos(x.array))

    def skew(self, x):
        x = self.factory.asarray(x)
        xp = self._xp(x.array)
        a = x.array
        x0, x1, x2 = a[0], a[1], a[2]
        z = x0 * 0
        row0 = xp.stack([z, -x2, x1], axis=-1)
        row1 = xp.stack([x2, z, -x0], axis=-1)
        row2 = xp.stack([-x1, x0, z], axis=-1)
        return self.factory.asarray(xp.stack([row0, row1, row2], axis=-2))

    def stack(self, x, axis=0):
        arrays = [self.factory.asarray(xi).array for xi in x]
        xp = self._xp(*arrays)
        return self.factory.asarray(xp.stack(arrays, axis=axis))

    def concatenate(self, x, axis=0):
        arrays = [_unwrap(xi) for xi in x]
        xp = self._xp(*arrays)
        return self.factory.asarray(xp.concatenate(arrays, axis=axis))

    def swapaxes(self, x: ArrayAPILike, axis1: int, axis2: int) -> ArrayAPILike:
        xp = self._xp(x.array)
        return self.factory.asarray(xp.swapaxes(x.array, axis1, axis2))

    def inv(self, x: ArrayAPILike) -> ArrayAPILike:
        xp = self._xp(x.array)
        return self.factory.asarray(xp.linalg.inv(x.array))

    def solve(self, A: ArrayAPILike, B: ArrayAPILike) -> ArrayAPILike:
        xp = self._xp(A.array, B.array)
        return self.factory.asarray(xp.linalg.solve(A.array, B.array))

    def reciprocal_condition(
        self, x: ArrayAPILike, reference: Optional[ArrayAPILike] = None
    ) -> float:
        xp = self._xp(x.array)
        magnitudes = xp.abs(xp.linalg.eigvalsh(x.array))
        largest = float(xp.max(magnitudes))
        if reference is not None:
            scale = xp.abs(xp.linalg.eigvalsh(_unwrap(reference)))
            largest = max(largest, float(xp.max(scale)))
        if largest == 0.0:
            return 0.0
        return float(xp.min(magnitudes)) / largest
