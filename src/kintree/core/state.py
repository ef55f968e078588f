# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import dataclasses
from typing import Any, Dict, Mapping, Optional, Union

import numpy.typing as npt

from kintree.core.errors import DimensionMismatchError
from kintree.core.spatial_math import SpatialMath
from kintree.model.tree import KinematicTree


def checked_array(
    math: SpatialMath, name: str, x: npt.ArrayLike, expected: tuple
) -> npt.ArrayLike:
    """Converts x to the backend array type and checks its shape. Inputs are never reshaped.

    Args:
        math (SpatialMath): the backend math
        name (str): the input name, used in the error message
        x (npt.ArrayLike): the input
        expected (tuple): the expected shape

    Returns:
        npt.ArrayLike: the converted array
    """
    array = math.asarray(x)
    if tuple(array.shape) != tuple(expected):
        raise DimensionMismatchError(name, expected, tuple(array.shape))
    return array


@dataclasses.dataclass(frozen=True)
class JointState:
    """Per-call joint positions, velocities and accelerations, following the tree dof layout"""

    q: npt.ArrayLike
    qd: Optional[npt.ArrayLike] = None
    qdd: Optional[npt.ArrayLike] = None

    @staticmethod
    def build(
        tree: KinematicTree,
        math: SpatialMath,
        q: npt.ArrayLike,
        qd: Optional[npt.ArrayLike] = None,
        qdd: Optional[npt.ArrayLike] = None,
    ) -> "JointState":
        """
        Args:
            tree (KinematicTree): the tree
            math (SpatialMath): the backend math
            q (npt.ArrayLike): joint positions
            qd (Optional[npt.ArrayLike]): joint velocities
            qdd (Optional[npt.ArrayLike]): joint accelerations

        Returns:
            JointState: the validated state
        """
        shape = (tree.NDoF,)
        return JointState(
            q=checked_array(math, "joint_positions", q, shape),
            qd=None if qd is None else checked_array(math, "joint_velocities", qd, shape),
            qdd=None
            if qdd is None
            else checked_array(math, "joint_accelerations", qdd, shape),
        )


def checked_external_forces(
    tree: KinematicTree,
    math: SpatialMath,
    external_forces: Optional[Mapping[Union[int, str], Any]],
) -> Dict[int, npt.ArrayLike]:
    """
    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        external_forces (Optional[Mapping[Union[int, str], Any]]): 6D forces [force; torque] by node index or name

    Returns:
        Dict[int, npt.ArrayLike]: the validated forces by node index
    """
    if not external_forces:
        return {}
    forces = {}
    for key, f in external_forces.items():
        idx = tree.resolve(key)
        if idx in forces:
            raise ValueError(f"Two external forces are given for node {idx}")
        forces[idx] = checked_array(math, f"external_forces[{key!r}]", f, (6,))
    return forces
