# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import dataclasses
from typing import Sequence

import numpy.typing as npt

from kintree.core.spatial_math import SpatialMath
from kintree.core.traversal import BackwardVisitor, run_backward
from kintree.model.tree import KinematicTree, Node


@dataclasses.dataclass(frozen=True)
class CompositeBody:
    X: npt.ArrayLike  # parent to body motion transform
    S: npt.ArrayLike  # motion subspace
    Ic: npt.ArrayLike  # inertia of the subtree rooted at the body
    Ic_parent: npt.ArrayLike  # Ic expressed in parent coordinates


class CompositeInertiaVisitor(BackwardVisitor[CompositeBody]):
    """Accumulates the composite inertias: Ic_i = I_i + sum_c X_c^T Ic_c X_c

    Args:
        math (SpatialMath): the backend math
        joint_positions (npt.ArrayLike): the joint positions
    """

    def __init__(self, math: SpatialMath, joint_positions: npt.ArrayLike):
        self.math = math
        self.joint_positions = joint_positions

    def combine(self, node: Node, child_results: Sequence[CompositeBody]) -> CompositeBody:
        q = self.joint_positions[node.dof_slice]
        X = node.joint.spatial_transform(q)
        Ic = node.link.spatial_inertia()
        for child in child_results:
            Ic = Ic + child.Ic_parent
        return CompositeBody(
            X=X,
            S=node.joint.motion_subspace(q),
            Ic=Ic,
            Ic_parent=self.math.swapaxes(X, -1, -2) @ Ic @ X,
        )


def crba(
    tree: KinematicTree, math: SpatialMath, joint_positions: npt.ArrayLike
) -> npt.ArrayLike:
    """Composite Rigid Body Algorithm

    Args:
        tree (KinematicTree): the tree
        math (SpatialMath): the backend math
        joint_positions (npt.ArrayLike): the validated joint positions

    Returns:
        npt.ArrayLike: the NDoF x NDoF joint space mass matrix
    """
    if tree.NDoF == 0:
        return math.zeros(0, 0)
    bodies = run_backward(tree, CompositeInertiaVisitor(math, joint_positions))
    actuated = [node for node in tree.nodes if node.dof > 0]
    blocks = {}
    for node in actuated:
        body = bodies[node.index]
        F = body.Ic @ body.S
        blocks[node.index, node.index] = math.swapaxes(body.S, -1, -2) @ F
        current = node
        while current.parent is not None:
            F = math.swapaxes(bodies[current.index].X, -1, -2) @ F
            current = tree.nodes[current.parent]
            if current.dof == 0:
                continue
            B = math.swapaxes(bodies[current.index].S, -1, -2) @ F
            blocks[current.index, node.index] = B
            blocks[node.index, current.index] = math.swapaxes(B, -1, -2)

    rows = []
    for r in actuated:
        row = [
            blocks.get((r.index, c.index), math.zeros(r.dof, c.dof)) for c in actuated
        ]
        rows.append(math.concatenate(row, axis=-1))
    return math.concatenate(rows, axis=-2)
