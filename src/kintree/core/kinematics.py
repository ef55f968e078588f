# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from typing import Dict, Optional

import numpy.typing as npt

from kintree.core.constants import Representations
from kintree.core.spatial_math import SpatialMath
from kintree.core.traversal import ForwardVisitor, run_forward
from kintree.model.tree import KinematicTree, Node


class ForwardKinematicsVisitor(ForwardVisitor[npt.ArrayLike]):
    """Composes the joint transforms from the root: W_H_i = W_H_parent @ parent_H_i(q_i)

    Args:
        math (SpatialMath): the backend math
        joint_positions (npt.ArrayLike): the joint positions
        base_transform (npt.ArrayLike): the pose of the root parent frame in the world
    """

    def __init__(
        self,
        math: SpatialMath,
        joint_positions: npt.ArrayLike,
        base_transform: npt.ArrayLike,
    ):
        self.math = math
        self.joint_positions = joint_positions
        self.base_transform = base_transform

    def visit(self, node: Node, parent_result: Optional[npt.ArrayLike]) -> npt.ArrayLike:
        W_H_p = self.base_transform if parent_result is None else parent_result
        q = self.joint_positions[node.dof_slice]
        return W_H_p @ node.joint.homogeneous(q)


class JacobianVisitor(ForwardVisitor[npt.ArrayLike]):
    """Accumulates the body fixed Jacobians: J_i = X_i @ J_parent + [0 ... S_i ... 0]

    Args:
        math (SpatialMath): the backend math
        joint_positions (npt.ArrayLike): the joint positions
        NDoF (int): the number of degrees of freedom of the tree
    """

    def __init__(self, math: SpatialMath, joint_positions: npt.ArrayLike, NDoF: int):
        self.math = math
        self.joint_positions = joint_positions
        self.NDoF = NDoF

    def _own_columns(self, node: Node, S: npt.ArrayLike) -> npt.ArrayLike:
        before = self.math.zeros(6, node.dof_offset)
        after = self.math.zeros(6, self.NDoF - node.dof_offset - node.dof)
        return self.math.concatenate([before, S, after], axis=-1)

    def visit(self, node: Node, parent_result: Optional[npt.ArrayLike]) -> npt.ArrayLike:
        q = self.joint_positions[node.dof_slice]
        S = node.joint.motion_subspace(q)
        E = self._own_columns(node, S)
        if parent_result is None:
            return E
        X = node.joint.spatial_transform(q)
        return X @ parent_result + E


def forward_kinematics(
    tree: KinematicTree,
    math: SpatialMath,
    joint_positions: npt.ArrayLike,
    base_transform: npt.ArrayLike,
) -> Dict[int, npt.ArrayLike]:
    """
    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        joint_positions (npt.ArrayLike): the validated joint positions
        base_transform (npt.ArrayLike): the pose of the root parent frame in the world

    Returns:
        Dict[int, npt.ArrayLike]: the world pose of every body
    """
    return run_forward(
        tree, ForwardKinematicsVisitor(math, joint_positions, base_transform)
    )


def velocity_transform(
    math: SpatialMath, W_H_B: npt.ArrayLike, representation: Representations
) -> Optional[npt.ArrayLike]:
    """
    Args:
        math (SpatialMath): the backend math
        W_H_B (npt.ArrayLike): the world pose of the body
        representation (Representations): the target representation

    Returns:
        Optional[npt.ArrayLike]: the 6x6 matrix mapping a body fixed velocity to the representation,
                                 None for the body fixed representation
    """
    if representation == Representations.BODY_FIXED_REPRESENTATION:
        return None
    if representation == Representations.MIXED_REPRESENTATION:
        return math.adjoint_mixed(W_H_B)
    if representation == Representations.INERTIAL_FIXED_REPRESENTATION:
        return math.adjoint(W_H_B)
    raise ValueError(f"Unknown frame velocity representation: {representation}")


def jacobians(
    tree: KinematicTree,
    math: SpatialMath,
    joint_positions: npt.ArrayLike,
    base_transform: npt.ArrayLike,
    representation: Representations,
    transforms: Optional[Dict[int, npt.ArrayLike]] = None,
) -> Dict[int, npt.ArrayLike]:
    """
    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        joint_positions (npt.ArrayLike): the validated joint positions
        base_transform (npt.ArrayLike): the pose of the root parent frame in the world
        representation (Representations): the frame velocity representation
        transforms (Optional[Dict[int, npt.ArrayLike]]): the forward kinematics, if already computed

    Returns:
        Dict[int, npt.ArrayLike]: the 6 x NDoF Jacobian of every body
    """
    J_body = run_forward(tree, JacobianVisitor(math, joint_positions, tree.NDoF))
    if representation == Representations.BODY_FIXED_REPRESENTATION:
        return J_body
    if transforms is None:
        transforms = forward_kinematics(tree, math, joint_positions, base_transform)
    return {
        idx: velocity_transform(math, transforms[idx], representation) @ J
        for idx, J in J_body.items()
    }
