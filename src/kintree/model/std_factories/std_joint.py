from typing import List, Tuple

import numpy.typing as npt

from kintree.core.constants import JointType
from kintree.core.spatial_math import SpatialMath
from kintree.model.abc_factories import Joint, Pose
from kintree.model.description import JointDescription

_UNIT_AXES = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


class StdJoint(Joint):
    """Standard Joint class

    Every joint is the composition of its fixed origin and a sequence of elementary
    rotations and translations, one per dof:

    - revolute: a rotation about `axis`
    - prismatic: a translation along `axis`
    - spherical: rotations about the local x, y and z axes (intrinsic XYZ angles)
    - free: translations along the local x, y and z axes, then a spherical motion
    """

    def __init__(self, name: str, joint: JointDescription, math: SpatialMath) -> None:
        self.math = math
        self.name = name
        self.type = joint.joint_type
        self.axis = self.math.asarray(joint.axis)
        self.origin = Pose.build(xyz=joint.xyz, rpy=joint.rpy, math=self.math)
        self._motions = self._set_motions(joint)

    def _set_motions(self, joint: JointDescription) -> List[Tuple[bool, npt.ArrayLike]]:
        """
        Args:
            joint (JointDescription): the joint description

        Returns:
            List[Tuple[bool, npt.ArrayLike]]: the elementary motions as (is_rotation, axis)
        """
        if self.type == JointType.REVOLUTE:
            motions = [(True, joint.axis)]
        elif self.type == JointType.PRISMATIC:
            motions = [(False, joint.axis)]
        elif self.type == JointType.SPHERICAL:
            motions = [(True, e) for e in _UNIT_AXES]
        elif self.type == JointType.FREE:
            motions = [(False, e) for e in _UNIT_AXES] + [(True, e) for e in _UNIT_AXES]
        else:
            motions = []
        return [(rotation, self.math.asarray(axis)) for rotation, axis in motions]

    def _elementary_homogeneous(
        self, k: int, q: npt.ArrayLike, xyz: npt.ArrayLike, rpy: npt.ArrayLike
    ) -> npt.ArrayLike:
        rotation, axis = self._motions[k]
        if rotation:
            return self.math.H_revolute_joint(xyz, rpy, axis, q)
        return self.math.H_prismatic_joint(xyz, rpy, axis, q)

    def _elementary_transforms(self, q: npt.ArrayLike) -> List[npt.ArrayLike]:
        """
        Returns:
            List[npt.ArrayLike]: the homogeneous transform of each elementary motion,
                                 the first one including the joint origin
        """
        zero = self.math.zeros(3)
        return [
            self._elementary_homogeneous(
                k,
                q[k],
                self.origin.xyz if k == 0 else zero,
                self.origin.rpy if k == 0 else zero,
            )
            for k in range(self.dof)
        ]

    def _subspace_column(self, k: int) -> npt.ArrayLike:
        rotation, axis = self._motions[k]
        zero = self.math.zeros(3)
        parts = [zero, axis] if rotation else [axis, zero]
        return self.math.concatenate(parts, axis=0)

    def homogeneous(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions

        Returns:
            npt.ArrayLike: the homogenous transform of a joint, given q
        """
        if self.type == JointType.FIXED:
            return self.math.H_from_Pos_RPY(self.origin.xyz, self.origin.rpy)
        H = None
        for H_k in self._elementary_transforms(q):
            H = H_k if H is None else H @ H_k
        return H

    def spatial_transform(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions

        Returns:
            npt.ArrayLike: spatial transform of the joint given q
        """
        return self.math.X_from_H(self.homogeneous(q))

    def motion_subspace(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions

        Returns:
            npt.ArrayLike: motion subspace of the joint, in child coordinates
        """
        if self.type == JointType.FIXED:
            return self.math.zeros(6, 0)
        if self.dof == 1:
            return self.math.stack([self._subspace_column(0)], axis=-1)
        columns = []
        for k, H_k in enumerate(self._elementary_transforms(q)):
            X_k = self.math.X_from_H(H_k)
            columns = [self.math.mxv(X_k, c) for c in columns]
            columns.append(self._subspace_column(k))
        return self.math.stack(columns, axis=-1)

    def velocity_bias(self, q: npt.ArrayLike, qd: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions
            qd (npt.ArrayLike): joint velocities

        Returns:
            npt.ArrayLike: the velocity product acceleration of the joint, in child coordinates.
                           It vanishes for single dof joints.
        """
        c = self.math.zeros(6)
        if self.dof <= 1:
            return c
        v = self.math.zeros(6)
        for k, H_k in enumerate(self._elementary_transforms(q)):
            X_k = self.math.X_from_H(H_k)
            v_k = self._subspace_column(k) * qd[k]
            v = self.math.mxv(X_k, v) + v_k
            c = self.math.mxv(X_k, c) + self.math.mxv(self.math.spatial_skew(v), v_k)
        return c
