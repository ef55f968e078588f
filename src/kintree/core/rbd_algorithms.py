# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import dataclasses
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

import numpy.typing as npt

from kintree.core.constants import DEFAULT_TOLERANCE, GRAVITY, Representations
from kintree.core.forward_dynamics import aba
from kintree.core.inverse_dynamics import gravity_acceleration, rnea
from kintree.core.kinematics import forward_kinematics, jacobians, velocity_transform
from kintree.core.mass_matrix import crba
from kintree.core.spatial_math import SpatialMath
from kintree.core.state import JointState, checked_array, checked_external_forces
from kintree.model.tree import KinematicTree


@dataclasses.dataclass(frozen=True)
class PerBodyResult:
    """One value per body, accessible by node index or name"""

    tree: KinematicTree = dataclasses.field(repr=False)
    values: Tuple[Any, ...]

    def __getitem__(self, key: Union[int, str]) -> Any:
        return self.values[self.tree.resolve(key)]

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        yield from self.values

    def items(self) -> Iterator[Tuple[str, Any]]:
        for node, value in zip(self.tree.nodes, self.values):
            yield node.name, value

    def map(self, fn: Callable[[Any], Any]) -> "PerBodyResult":
        return PerBodyResult(self.tree, tuple(fn(v) for v in self.values))

    @staticmethod
    def from_dict(tree: KinematicTree, results: Dict[int, Any]) -> "PerBodyResult":
        return PerBodyResult(tree, tuple(results[i] for i in range(len(tree))))


class RBDAlgorithms:
    """This is a small class that implements Rigid body algorithms on a kinematic tree."""

    def __init__(
        self,
        tree: KinematicTree,
        math: SpatialMath,
        gravity: npt.ArrayLike = GRAVITY,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        """
        Args:
            tree (KinematicTree): the kinematic tree
            math (SpatialMath): the spatial math.
            gravity (npt.ArrayLike, optional): the gravity acceleration in the world frame
            tolerance (float, optional): minimum reciprocal condition number accepted when
                                         inverting the joint space articulated inertias
        """
        self.tree = tree
        self.NDoF = tree.NDoF
        self.math = math
        self.g = checked_array(math, "gravity", gravity, (3,))
        if not tolerance >= 0.0:
            raise ValueError(f"The tolerance must be non negative, got {tolerance}")
        self.tolerance = tolerance
        self.frame_velocity_representation = (
            Representations.MIXED_REPRESENTATION
        )  # default

    def set_frame_velocity_representation(self, representation: Representations):
        """Sets the frame velocity representation

        Args:
            representation (Representations): The representation of the frame velocity
        """
        if representation not in list(Representations):
            raise ValueError(f"Unknown frame velocity representation: {representation}")
        self.frame_velocity_representation = Representations(representation)

    def _base_transform(self, base_transform: Optional[npt.ArrayLike]) -> npt.ArrayLike:
        if base_transform is None:
            return self.math.factory.eye(4)
        return checked_array(self.math, "base_transform", base_transform, (4, 4))

    def _body_forces(
        self,
        external_forces: Optional[Mapping[Union[int, str], npt.ArrayLike]],
        q: npt.ArrayLike,
        base_transform: npt.ArrayLike,
    ) -> Dict[int, npt.ArrayLike]:
        """Expresses the external forces, given in the current representation, in body coordinates"""
        forces = checked_external_forces(self.tree, self.math, external_forces)
        representation = self.frame_velocity_representation
        if not forces or representation == Representations.BODY_FIXED_REPRESENTATION:
            return forces
        transforms = forward_kinematics(self.tree, self.math, q, base_transform)
        return {
            idx: self.math.mxv(
                self.math.swapaxes(
                    velocity_transform(self.math, transforms[idx], representation),
                    -1,
                    -2,
                ),
                f,
            )
            for idx, f in forces.items()
        }

    def forward_kinematics(
        self,
        joint_positions: npt.ArrayLike,
        base_transform: Optional[npt.ArrayLike] = None,
    ) -> PerBodyResult:
        """Computes the world pose of every body

        Args:
            joint_positions (npt.ArrayLike): The joints position
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world.
                                                      Identity if None

        Returns:
            PerBodyResult: the 4x4 homogeneous transforms
        """
        state = JointState.build(self.tree, self.math, joint_positions)
        base_transform = self._base_transform(base_transform)
        return PerBodyResult.from_dict(
            self.tree,
            forward_kinematics(self.tree, self.math, state.q, base_transform),
        )

    def jacobians(
        self,
        joint_positions: npt.ArrayLike,
        base_transform: Optional[npt.ArrayLike] = None,
    ) -> PerBodyResult:
        """Computes the Jacobian of every body, in the current frame velocity representation

        Args:
            joint_positions (npt.ArrayLike): The joints position
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world

        Returns:
            PerBodyResult: the 6 x NDoF Jacobians
        """
        state = JointState.build(self.tree, self.math, joint_positions)
        base_transform = self._base_transform(base_transform)
        return PerBodyResult.from_dict(
            self.tree,
            jacobians(
                self.tree,
                self.math,
                state.q,
                base_transform,
                self.frame_velocity_representation,
            ),
        )

    def rnea(
        self,
        joint_positions: npt.ArrayLike,
        joint_velocities: npt.ArrayLike,
        joint_accelerations: npt.ArrayLike,
        external_forces: Optional[Mapping[Union[int, str], npt.ArrayLike]] = None,
        base_transform: Optional[npt.ArrayLike] = None,
        gravity: Optional[npt.ArrayLike] = None,
    ) -> npt.ArrayLike:
        """Recursive Newton-Euler inverse dynamics

        Args:
            joint_positions (npt.ArrayLike): The joints position
            joint_velocities (npt.ArrayLike): The joints velocity
            joint_accelerations (npt.ArrayLike): The joints acceleration
            external_forces (Optional[Mapping]): 6D forces applied to the bodies, by index or name,
                                                 in the current frame velocity representation
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world
            gravity (Optional[npt.ArrayLike]): overrides the gravity acceleration

        Returns:
            npt.ArrayLike: the generalized forces
        """
        state = JointState.build(
            self.tree, self.math, joint_positions, joint_velocities, joint_accelerations
        )
        base_transform = self._base_transform(base_transform)
        g = self.g if gravity is None else checked_array(self.math, "gravity", gravity, (3,))
        forces = self._body_forces(external_forces, state.q, base_transform)
        return rnea(
            self.tree,
            self.math,
            state.q,
            state.qd,
            state.qdd,
            gravity_acceleration(self.math, base_transform, g),
            forces,
        )

    def bias_force(
        self,
        joint_positions: npt.ArrayLike,
        joint_velocities: npt.ArrayLike,
        external_forces: Optional[Mapping[Union[int, str], npt.ArrayLike]] = None,
        base_transform: Optional[npt.ArrayLike] = None,
    ) -> npt.ArrayLike:
        """Returns the generalized forces at zero acceleration: Coriolis, gravity and external terms

        Args:
            joint_positions (npt.ArrayLike): The joints position
            joint_velocities (npt.ArrayLike): The joints velocity
            external_forces (Optional[Mapping]): 6D forces applied to the bodies
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world

        Returns:
            npt.ArrayLike: the bias force
        """
        return self.rnea(
            joint_positions,
            joint_velocities,
            self.math.zeros(self.NDoF),
            external_forces=external_forces,
            base_transform=base_transform,
        )

    def gravity_term(
        self,
        joint_positions: npt.ArrayLike,
        base_transform: Optional[npt.ArrayLike] = None,
    ) -> npt.ArrayLike:
        """
        Args:
            joint_positions (npt.ArrayLike): The joints position
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world

        Returns:
            npt.ArrayLike: the generalized gravity forces
        """
        zeros = self.math.zeros(self.NDoF)
        return self.rnea(joint_positions, zeros, zeros, base_transform=base_transform)

    def coriolis_term(
        self,
        joint_positions: npt.ArrayLike,
        joint_velocities: npt.ArrayLike,
    ) -> npt.ArrayLike:
        """
        Args:
            joint_positions (npt.ArrayLike): The joints position
            joint_velocities (npt.ArrayLike): The joints velocity

        Returns:
            npt.ArrayLike: the generalized Coriolis and centrifugal forces
        """
        return self.rnea(
            joint_positions,
            joint_velocities,
            self.math.zeros(self.NDoF),
            gravity=self.math.zeros(3),
        )

    def aba(
        self,
        joint_positions: npt.ArrayLike,
        joint_velocities: npt.ArrayLike,
        joint_torques: npt.ArrayLike,
        external_forces: Optional[Mapping[Union[int, str], npt.ArrayLike]] = None,
        base_transform: Optional[npt.ArrayLike] = None,
    ) -> npt.ArrayLike:
        """Articulated-body forward dynamics

        Args:
            joint_positions (npt.ArrayLike): The joints position
            joint_velocities (npt.ArrayLike): The joints velocity
            joint_torques (npt.ArrayLike): The generalized forces
            external_forces (Optional[Mapping]): 6D forces applied to the bodies, by index or name,
                                                 in the current frame velocity representation
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world

        Returns:
            npt.ArrayLike: the joint accelerations

        Raises:
            NumericError: if a joint space articulated inertia is singular
        """
        state = JointState.build(self.tree, self.math, joint_positions, joint_velocities)
        tau = checked_array(self.math, "joint_torques", joint_torques, (self.NDoF,))
        base_transform = self._base_transform(base_transform)
        forces = self._body_forces(external_forces, state.q, base_transform)
        return aba(
            self.tree,
            self.math,
            state.q,
            state.qd,
            tau,
            gravity_acceleration(self.math, base_transform, self.g),
            forces,
            self.tolerance,
        )

    def mass_matrix(self, joint_positions: npt.ArrayLike) -> npt.ArrayLike:
        """Returns the joint space mass matrix computed with the CRBA

        Args:
            joint_positions (npt.ArrayLike): The joints position

        Returns:
            npt.ArrayLike: the NDoF x NDoF mass matrix
        """
        state = JointState.build(self.tree, self.math, joint_positions)
        return crba(self.tree, self.math, state.q)

    def CoM_position(
        self,
        joint_positions: npt.ArrayLike,
        base_transform: Optional[npt.ArrayLike] = None,
    ) -> npt.ArrayLike:
        """Returns the CoM position in the world frame

        Args:
            joint_positions (npt.ArrayLike): The joints position
            base_transform (Optional[npt.ArrayLike]): The pose of the root parent frame in the world

        Returns:
            npt.ArrayLike: The CoM position
        """
        total_mass = self.get_total_mass()
        if total_mass <= 0.0:
            raise ValueError(f"The CoM of the massless tree {self.tree.name} is undefined")
        transforms = self.forward_kinematics(joint_positions, base_transform)
        com = self.math.zeros(3)
        for node, W_H_B in zip(self.tree.nodes, transforms):
            W_H_C = W_H_B @ node.link.homogeneous()
            com = com + node.link.inertial.mass * W_H_C[:3, 3]
        return com / total_mass

    def get_total_mass(self) -> float:
        """Returns the total mass of the tree

        Returns:
            float: The total mass
        """
        return self.tree.get_total_mass()
