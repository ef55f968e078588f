# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import logging
from typing import Any, Mapping, Optional, Union

import jax.numpy as jnp

from kintree.core.array_api_math import ArraySpec
from kintree.core.constants import DEFAULT_TOLERANCE, GRAVITY, Representations
from kintree.core.rbd_algorithms import PerBodyResult, RBDAlgorithms
from kintree.model import KinDynFactoryMixin, KinematicTree, build_model_factory
from kintree.jax.jax_like import SpatialMath


class KinDynComputations(KinDynFactoryMixin):
    """This is a small class that retrieves kinematic tree quantities using Jax. The ABA needs concrete arrays: it cannot be traced by jax.jit."""

    def __init__(
        self,
        description: Any,
        gravity: jnp.ndarray = GRAVITY,
        spec: Optional[ArraySpec] = None,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        """
        Args:
            description (Any): a sequence of NodeDescription (or dicts), or a ModelFactory
            gravity (jnp.ndarray, optional): the gravity acceleration in the world frame
            spec (ArraySpec, optional): the array namespace, dtype and device. Defaults to float64 jax.numpy
            tolerance (float, optional): minimum reciprocal condition number accepted by the ABA
        """
        math = SpatialMath(spec)
        factory = build_model_factory(description=description, math=math)
        self.tree = KinematicTree.build(factory)
        self.rbdalgos = RBDAlgorithms(
            tree=self.tree, math=factory.math, gravity=gravity, tolerance=tolerance
        )
        self.NDoF = self.rbdalgos.NDoF
        logging.info(f"Jax KinDynComputations on the tree {self.tree.name}, NDoF={self.NDoF}")

    def set_frame_velocity_representation(
        self, representation: Representations
    ) -> None:
        """Sets the representation of the velocity of the frames

        Args:
            representation (Representations): The representation of the velocity
        """
        self.rbdalgos.set_frame_velocity_representation(representation)

    def forward_kinematics(
        self, joint_positions: jnp.ndarray, base_transform: jnp.ndarray = None
    ) -> PerBodyResult:
        """Computes the forward kinematics of every body

        Args:
            joint_positions (jnp.ndarray): The joints position
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            PerBodyResult: the homogeneous transforms, by body index or name
        """
        return self.rbdalgos.forward_kinematics(joint_positions, base_transform).map(
            lambda H: H.array
        )

    def jacobians(
        self, joint_positions: jnp.ndarray, base_transform: jnp.ndarray = None
    ) -> PerBodyResult:
        """Returns the Jacobian of every body, in the frame velocity representation

        Args:
            joint_positions (jnp.ndarray): The joints position
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            PerBodyResult: the 6 x NDoF Jacobians, by body index or name
        """
        return self.rbdalgos.jacobians(joint_positions, base_transform).map(
            lambda J: J.array
        )

    def rnea(
        self,
        joint_positions: jnp.ndarray,
        joint_velocities: jnp.ndarray,
        joint_accelerations: jnp.ndarray,
        external_forces: Optional[Mapping[Union[int, str], jnp.ndarray]] = None,
        base_transform: jnp.ndarray = None,
    ) -> jnp.ndarray:
        """Returns the generalized forces computed with the RNEA

        Args:
            joint_positions (jnp.ndarray): The joints position
            joint_velocities (jnp.ndarray): The joints velocity
            joint_accelerations (jnp.ndarray): The joints acceleration
            external_forces (Mapping, optional): 6D forces on the bodies, in the frame velocity representation
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            tau (jnp.ndarray): the generalized forces
        """
        return self.rbdalgos.rnea(
            joint_positions,
            joint_velocities,
            joint_accelerations,
            external_forces=external_forces,
            base_transform=base_transform,
        ).array

    def aba(
        self,
        joint_positions: jnp.ndarray,
        joint_velocities: jnp.ndarray,
        joint_torques: jnp.ndarray,
        external_forces: Optional[Mapping[Union[int, str], jnp.ndarray]] = None,
        base_transform: jnp.ndarray = None,
    ) -> jnp.ndarray:
        """Returns the joint accelerations computed with the ABA

        Args:
            joint_positions (jnp.ndarray): The joints position
            joint_velocities (jnp.ndarray): The joints velocity
            joint_torques (jnp.ndarray): The generalized forces
            external_forces (Mapping, optional): 6D forces on the bodies, in the frame velocity representation
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            qdd (jnp.ndarray): the joint accelerations
        """
        return self.rbdalgos.aba(
            joint_positions,
            joint_velocities,
            joint_torques,
            external_forces=external_forces,
            base_transform=base_transform,
        ).array

    def mass_matrix(self, joint_positions: jnp.ndarray) -> jnp.ndarray:
        """Returns the Mass Matrix computed with the CRBA

        Args:
            joint_positions (jnp.ndarray): The joints position

        Returns:
            M (jnp.ndarray): Mass Matrix
        """
        return self.rbdalgos.mass_matrix(joint_positions).array

    def bias_force(
        self,
        joint_positions: jnp.ndarray,
        joint_velocities: jnp.ndarray,
        base_transform: jnp.ndarray = None,
    ) -> jnp.ndarray:
        """Returns the generalized forces at zero joint accelerations

        Args:
            joint_positions (jnp.ndarray): The joints position
            joint_velocities (jnp.ndarray): The joints velocity
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            h (jnp.ndarray): the bias force
        """
        return self.rbdalgos.bias_force(
            joint_positions, joint_velocities, base_transform=base_transform
        ).array

    def coriolis_term(
        self, joint_positions: jnp.ndarray, joint_velocities: jnp.ndarray
    ) -> jnp.ndarray:
        """Returns the coriolis term

        Args:
            joint_positions (jnp.ndarray): The joints position
            joint_velocities (jnp.ndarray): The joints velocity

        Returns:
            C (jnp.ndarray): the Coriolis term
        """
        return self.rbdalgos.coriolis_term(joint_positions, joint_velocities).array

    def gravity_term(
        self, joint_positions: jnp.ndarray, base_transform: jnp.ndarray = None
    ) -> jnp.ndarray:
        """Returns the gravity term

        Args:
            joint_positions (jnp.ndarray): The joints position
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            G (jnp.ndarray): the gravity term
        """
        return self.rbdalgos.gravity_term(joint_positions, base_transform).array

    def CoM_position(
        self, joint_positions: jnp.ndarray, base_transform: jnp.ndarray = None
    ) -> jnp.ndarray:
        """Returns the CoM positon

        Args:
            joint_positions (jnp.ndarray): The joints position
            base_transform (jnp.ndarray, optional): The pose of the root parent frame in the world

        Returns:
            CoM (jnp.ndarray): The CoM position
        """
        return self.rbdalgos.CoM_position(joint_positions, base_transform).array

    def get_total_mass(self) -> float:
        """Returns the total mass of the tree

        Returns:
            mass: The total mass
        """
        return self.rbdalgos.get_total_mass()
