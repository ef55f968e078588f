# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import dataclasses
from typing import Dict, Optional, Sequence

import numpy.typing as npt

from kintree.core.spatial_math import SpatialMath
from kintree.core.traversal import (
    BackwardVisitor,
    ForwardVisitor,
    run_backward,
    run_forward,
)
from kintree.model.tree import KinematicTree, Node


@dataclasses.dataclass(frozen=True)
class BodyMotion:
    """Motion of a body, in body coordinates"""

    X: npt.ArrayLike  # parent to body motion transform
    S: npt.ArrayLike  # motion subspace
    v: npt.ArrayLike  # spatial velocity
    c: npt.ArrayLike  # velocity product acceleration c_J + v x S qd
    a: Optional[npt.ArrayLike]  # spatial acceleration, None if no acceleration was given


@dataclasses.dataclass(frozen=True)
class BodyForce:
    f: npt.ArrayLike  # net force transmitted by the joint, body coordinates
    tau: npt.ArrayLike  # generalized force of the joint
    f_parent: npt.ArrayLike  # f expressed in parent coordinates


class MotionVisitor(ForwardVisitor[BodyMotion]):
    """Propagates velocities and accelerations from the root:

    v_i = X_i v_p + S_i qd_i
    a_i = X_i a_p + S_i qdd_i + c_J + v_i x S_i qd_i

    Args:
        math (SpatialMath): the backend math
        q (npt.ArrayLike): joint positions
        qd (npt.ArrayLike): joint velocities
        qdd (Optional[npt.ArrayLike]): joint accelerations. Accelerations are skipped if None
        root_acceleration (Optional[npt.ArrayLike]): acceleration of the root parent frame
    """

    def __init__(
        self,
        math: SpatialMath,
        q: npt.ArrayLike,
        qd: npt.ArrayLike,
        qdd: Optional[npt.ArrayLike] = None,
        root_acceleration: Optional[npt.ArrayLike] = None,
    ):
        self.math = math
        self.q = q
        self.qd = qd
        self.qdd = qdd
        self.root_acceleration = (
            math.zeros(6) if root_acceleration is None else root_acceleration
        )

    def visit(self, node: Node, parent_result: Optional[BodyMotion]) -> BodyMotion:
        math = self.math
        joint = node.joint
        q = self.q[node.dof_slice]
        qd = self.qd[node.dof_slice]

        X = joint.spatial_transform(q)
        S = joint.motion_subspace(q)
        vJ = math.mxv(S, qd)
        if parent_result is None:
            v = vJ
            a_p = self.root_acceleration
        else:
            v = math.mxv(X, parent_result.v) + vJ
            a_p = parent_result.a
        c = joint.velocity_bias(q, qd) + math.mxv(math.spatial_skew(v), vJ)

        a = None
        if self.qdd is not None:
            qdd = self.qdd[node.dof_slice]
            a = math.mxv(X, a_p) + math.mxv(S, qdd) + c
        return BodyMotion(X=X, S=S, v=v, c=c, a=a)


class ForceVisitor(BackwardVisitor[BodyForce]):
    """Collects the forces from the leaves:

    f_i = I_i a_i + v_i x* I_i v_i - f_ext_i + sum_c X_c^T f_c
    tau_i = S_i^T f_i

    Args:
        math (SpatialMath): the backend math
        motions (Dict[int, BodyMotion]): the result of the motion pass
        external_forces (Dict[int, npt.ArrayLike]): external forces in body coordinates
    """

    def __init__(
        self,
        math: SpatialMath,
        motions: Dict[int, BodyMotion],
        external_forces: Dict[int, npt.ArrayLike],
    ):
        self.math = math
        self.motions = motions
        self.external_forces = external_forces

    def combine(self, node: Node, child_results: Sequence[BodyForce]) -> BodyForce:
        math = self.math
        motion = self.motions[node.index]
        I = node.link.spatial_inertia()
        Iv = math.mxv(I, motion.v)
        f = math.mxv(I, motion.a) + math.mxv(math.spatial_skew_star(motion.v), Iv)
        if node.index in self.external_forces:
            f = f - self.external_forces[node.index]
        for child in child_results:
            f = f + child.f_parent
        tau = math.mxv(math.swapaxes(motion.S, -1, -2), f)
        f_parent = math.mxv(math.swapaxes(motion.X, -1, -2), f)
        return BodyForce(f=f, tau=tau, f_parent=f_parent)


def gravity_acceleration(
    math: SpatialMath, base_transform: npt.ArrayLike, gravity: npt.ArrayLike
) -> npt.ArrayLike:
    """
    Args:
        math (SpatialMath): the backend math
        base_transform (npt.ArrayLike): the pose of the root parent frame in the world
        gravity (npt.ArrayLike): the gravity acceleration in the world frame

    Returns:
        npt.ArrayLike: the fictitious acceleration of the root parent frame that accounts for gravity
    """
    R_T = math.swapaxes(base_transform[:3, :3], -1, -2)
    return math.concatenate([-math.mxv(R_T, gravity), math.zeros(3)], axis=0)


def rnea(
    tree: KinematicTree,
    math: SpatialMath,
    q: npt.ArrayLike,
    qd: npt.ArrayLike,
    qdd: npt.ArrayLike,
    root_acceleration: npt.ArrayLike,
    external_forces: Dict[int, npt.ArrayLike],
) -> npt.ArrayLike:
    """Recursive Newton-Euler algorithm

    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        q (npt.ArrayLike): validated joint positions
        qd (npt.ArrayLike): validated joint velocities
        qdd (npt.ArrayLike): validated joint accelerations
        root_acceleration (npt.ArrayLike): acceleration of the root parent frame (minus gravity)
        external_forces (Dict[int, npt.ArrayLike]): external forces in body coordinates

    Returns:
        npt.ArrayLike: the generalized forces
    """
    motions = run_forward(tree, MotionVisitor(math, q, qd, qdd, root_acceleration))
    forces = run_backward(tree, ForceVisitor(math, motions, external_forces))
    return joint_vector(tree, math, {idx: forces[idx].tau for idx in forces})


def joint_vector(
    tree: KinematicTree, math: SpatialMath, per_node: Dict[int, npt.ArrayLike]
) -> npt.ArrayLike:
    """
    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        per_node (Dict[int, npt.ArrayLike]): the joint quantities of every node

    Returns:
        npt.ArrayLike: the quantities stacked following the dof layout
    """
    parts = [per_node[i] for i in range(len(tree)) if tree.nodes[i].dof > 0]
    if not parts:
        return math.zeros(0)
    return math.concatenate(parts, axis=0)
