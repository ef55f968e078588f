# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import dataclasses
import logging
from typing import Dict, Optional, Sequence

import numpy.typing as npt

from kintree.core.errors import NumericError
from kintree.core.inverse_dynamics import BodyMotion, MotionVisitor, joint_vector
from kintree.core.spatial_math import SpatialMath
from kintree.core.traversal import (
    BackwardVisitor,
    ForwardVisitor,
    run_backward,
    run_forward,
)
from kintree.model.tree import KinematicTree, Node


@dataclasses.dataclass(frozen=True)
class ArticulatedBody:
    """Articulated quantities of a body, in body coordinates"""

    U: npt.ArrayLike  # IA S
    D_inv: Optional[npt.ArrayLike]  # (S^T IA S)^-1, None for fixed joints
    u: npt.ArrayLike  # tau - S^T pA
    IA_parent: npt.ArrayLike  # contribution to the parent articulated inertia
    Ic_parent: npt.ArrayLike  # contribution to the parent composite rigid inertia
    pA_parent: npt.ArrayLike  # contribution to the parent bias force


@dataclasses.dataclass(frozen=True)
class BodyAcceleration:
    a: npt.ArrayLike
    qdd: npt.ArrayLike


class ArticulatedInertiaVisitor(BackwardVisitor[ArticulatedBody]):
    """Builds the articulated-body inertias and bias forces from the leaves

    Args:
        math (SpatialMath): the backend math
        motions (Dict[int, BodyMotion]): the result of the velocity pass
        tau (npt.ArrayLike): the generalized forces
        external_forces (Dict[int, npt.ArrayLike]): external forces in body coordinates
        tolerance (float): minimum reciprocal condition number of S^T IA S, measured against S^T Ic S
    """

    def __init__(
        self,
        math: SpatialMath,
        motions: Dict[int, BodyMotion],
        tau: npt.ArrayLike,
        external_forces: Dict[int, npt.ArrayLike],
        tolerance: float,
    ):
        self.math = math
        self.motions = motions
        self.tau = tau
        self.external_forces = external_forces
        self.tolerance = tolerance

    def _checked_inverse(
        self, node: Node, D: npt.ArrayLike, reference: npt.ArrayLike
    ) -> npt.ArrayLike:
        rcond = self.math.reciprocal_condition(D, reference)
        if not rcond >= self.tolerance:
            logging.debug(
                f"Articulated inertia of node {node.name} has reciprocal condition number {rcond}"
            )
            raise NumericError(node.index, node.name, rcond)
        return self.math.inv(D)

    def combine(
        self, node: Node, child_results: Sequence[ArticulatedBody]
    ) -> ArticulatedBody:
        math = self.math
        motion = self.motions[node.index]
        I = node.link.spatial_inertia()
        IA = I
        Ic = I
        pA = math.mxv(
            math.spatial_skew_star(motion.v), math.mxv(I, motion.v)
        )
        if node.index in self.external_forces:
            pA = pA - self.external_forces[node.index]
        for child in child_results:
            IA = IA + child.IA_parent
            Ic = Ic + child.Ic_parent
            pA = pA + child.pA_parent

        S = motion.S
        S_T = math.swapaxes(S, -1, -2)
        U = IA @ S
        u = self.tau[node.dof_slice] - math.mxv(S_T, pA)
        if node.dof > 0:
            # S^T Ic S bounds S^T IA S from above
            D_inv = self._checked_inverse(node, S_T @ U, S_T @ Ic @ S)
            U_T = math.swapaxes(U, -1, -2)
            Ia = IA - U @ D_inv @ U_T
            pa = pA + math.mxv(Ia, motion.c) + math.mxv(U @ D_inv, u)
        else:
            D_inv = None
            Ia = IA
            pa = pA + math.mxv(Ia, motion.c)

        X_T = math.swapaxes(motion.X, -1, -2)
        return ArticulatedBody(
            U=U,
            D_inv=D_inv,
            u=u,
            IA_parent=X_T @ Ia @ motion.X,
            Ic_parent=X_T @ Ic @ motion.X,
            pA_parent=math.mxv(X_T, pa),
        )


class AccelerationVisitor(ForwardVisitor[BodyAcceleration]):
    """Solves the joint accelerations from the root:

    a'_i = X_i a_p + c_i
    qdd_i = D_i^-1 (u_i - U_i^T a'_i)
    a_i = a'_i + S_i qdd_i

    Args:
        math (SpatialMath): the backend math
        motions (Dict[int, BodyMotion]): the result of the velocity pass
        articulated (Dict[int, ArticulatedBody]): the result of the articulated inertia pass
        root_acceleration (npt.ArrayLike): acceleration of the root parent frame (minus gravity)
    """

    def __init__(
        self,
        math: SpatialMath,
        motions: Dict[int, BodyMotion],
        articulated: Dict[int, ArticulatedBody],
        root_acceleration: npt.ArrayLike,
    ):
        self.math = math
        self.motions = motions
        self.articulated = articulated
        self.root_acceleration = root_acceleration

    def visit(
        self, node: Node, parent_result: Optional[BodyAcceleration]
    ) -> BodyAcceleration:
        math = self.math
        motion = self.motions[node.index]
        body = self.articulated[node.index]
        a_p = self.root_acceleration if parent_result is None else parent_result.a
        a = math.mxv(motion.X, a_p) + motion.c
        if body.D_inv is None:
            return BodyAcceleration(a=a, qdd=math.zeros(0))
        U_T = math.swapaxes(body.U, -1, -2)
        qdd = math.mxv(body.D_inv, body.u - math.mxv(U_T, a))
        return BodyAcceleration(a=a + math.mxv(motion.S, qdd), qdd=qdd)


def aba(
    tree: KinematicTree,
    math: SpatialMath,
    q: npt.ArrayLike,
    qd: npt.ArrayLike,
    tau: npt.ArrayLike,
    root_acceleration: npt.ArrayLike,
    external_forces: Dict[int, npt.ArrayLike],
    tolerance: float,
) -> npt.ArrayLike:
    """Articulated-body algorithm

    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        q (npt.ArrayLike): validated joint positions
        qd (npt.ArrayLike): validated joint velocities
        tau (npt.ArrayLike): validated generalized forces
        root_acceleration (npt.ArrayLike): acceleration of the root parent frame (minus gravity)
        external_forces (Dict[int, npt.ArrayLike]): external forces in body coordinates
        tolerance (float): minimum reciprocal condition number of the joint space articulated inertias

    Returns:
        npt.ArrayLike: the joint accelerations
    """
    motions = run_forward(tree, MotionVisitor(math, q, qd))
    articulated = run_backward(
        tree, ArticulatedInertiaVisitor(math, motions, tau, external_forces, tolerance)
    )
    accelerations = run_forward(
        tree, AccelerationVisitor(math, motions, articulated, root_acceleration)
    )
    return joint_vector(
        tree, math, {idx: accelerations[idx].qdd for idx in accelerations}
    )
