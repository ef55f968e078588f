# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import abc
from typing import Optional

import numpy.typing as npt


class ArrayLike(abc.ABC):
    """Abstract class for a generic Array wrapper. Every method should be implemented for every data type."""

    """This class has to implemented the following operators: """

    @abc.abstractmethod
    def __add__(self, other):
        pass

    @abc.abstractmethod
    def __radd__(self, other):
        pass

    @abc.abstractmethod
    def __sub__(self, other):
        pass

    @abc.abstractmethod
    def __rsub__(self, other):
        pass

    @abc.abstractmethod
    def __mul__(self, other):
        pass

    @abc.abstractmethod
    def __rmul__(self, other):
        pass

    @abc.abstractmethod
    def __matmul__(self, other):
        pass

    @abc.abstractmethod
    def __rmatmul__(self, other):
        pass

    @abc.abstractmethod
    def __neg__(self):
        pass

    @abc.abstractmethod
    def __getitem__(self, item):
        pass

    @abc.abstractmethod
    def __truediv__(self, other):
        pass

    @property
    @abc.abstractmethod
    def T(self):
        """
        Returns: Transpose of the array
        """
        pass

    @property
    @abc.abstractmethod
    def shape(self) -> tuple:
        pass

    def __len__(self):
        return len(self.array)

    def __repr__(self):
        return self.array.__repr__()


class ArrayLikeFactory(abc.ABC):
    """Abstract class for a generic Array wrapper. Every method should be implemented for every data type."""

    @abc.abstractmethod
    def zeros(self, *x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): matrix dimension

        Returns:
            npt.ArrayLike: zero matrix of dimension x
        """
        pass

    @abc.abstractmethod
    def eye(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): matrix dimension

        Returns:
            npt.ArrayLike: identity matrix of dimension x
        """
        pass

    @abc.abstractmethod
    def asarray(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): array

        Returns:
            npt.ArrayLike: array
        """
        pass

    @abc.abstractmethod
    def ones_like(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): array

        Returns:
            npt.ArrayLike: one array with the same shape as x
        """
        pass

    @abc.abstractmethod
    def zeros_like(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): array

        Returns:
            npt.ArrayLike: zero array with the same shape as x
        """
        pass


class SpatialMath(abc.ABC):
    """Class implementing the main geometric functions used for computing rigid-body algorithm

    Spatial motion vectors are ordered [linear; angular], spatial force vectors [force; torque].

    Args:
        factory (ArrayLikeFactory): the factory creating the arrays of the backend
    """

    def __init__(self, factory: ArrayLikeFactory):
        self._factory = factory

    @property
    def factory(self) -> ArrayLikeFactory:
        return self._factory

    @abc.abstractmethod
    def concatenate(self, x: npt.ArrayLike, axis: int) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): elements
            axis (int): axis along which to concatenate

        Returns:
            npt.ArrayLike: concatenation of elements x along axis
        """
        pass

    @abc.abstractmethod
    def stack(self, x: npt.ArrayLike, axis: int) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): elements
            axis (int): axis along which to stack

        Returns:
            npt.ArrayLike: stacked elements x along axis
        """
        pass

    @abc.abstractmethod
    def swapaxes(self, x: npt.ArrayLike, axis1: int, axis2: int) -> npt.ArrayLike:
        pass

    @abc.abstractmethod
    def inv(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): input array

        Returns:
            npt.ArrayLike: inverse of the array
        """
        pass

    @abc.abstractmethod
    def solve(self, A: npt.ArrayLike, B: npt.ArrayLike) -> npt.ArrayLike:
        pass

    @abc.abstractmethod
    def sin(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): angle value

        Returns:
            npt.ArrayLike: sin value of x
        """
        pass

    @abc.abstractmethod
    def cos(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): angle value

        Returns:
            npt.ArrayLike: cos value of angle x
        """
        pass

    @abc.abstractmethod
    def skew(self, x):
        pass

    @abc.abstractmethod
    def reciprocal_condition(
        self, x: npt.ArrayLike, reference: Optional[npt.ArrayLike] = None
    ) -> float:
        """
        Args:
            x (npt.ArrayLike): symmetric positive semi-definite matrix
            reference (npt.ArrayLike, optional): symmetric matrix of the same size setting the scale of x

        Returns:
            float: ratio between the smallest eigenvalue magnitude of x and the largest eigenvalue
            magnitude of x and reference (0 if both are null)
        """
        pass

    def R_from_axis_angle(self, axis: npt.ArrayLike, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            axis (npt.ArrayLike): normalized axis vector
            q (npt.ArrayLike): rotation angle

        Returns:
            npt.ArrayLike: rotation matrix (Rodrigues formula)
        """
        c = self.cos(q)
        s = self.sin(q)
        K = self.skew(axis)
        return self.factory.eye(3) + s * K + (1.0 - c) * (K @ K)

    def Rx(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): angle value

        Returns:
            npt.ArrayLike: rotation matrix around x axis
        """
        c, s = self.cos(q), self.sin(q)
        one = self.factory.ones_like(c)
        zero = self.factory.zeros_like(c)
        row0 = self.stack([one, zero, zero], axis=-1)
        row1 = self.stack([zero, c, -s], axis=-1)
        row2 = self.stack([zero, s, c], axis=-1)
        return self.stack([row0, row1, row2], axis=-2)

    def Ry(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): angle value

        Returns:
            npt.ArrayLike: rotation matrix around y axis
        """
        c, s = self.cos(q), self.sin(q)
        one = self.factory.ones_like(c)
        zero = self.factory.zeros_like(c)
        row0 = self.stack([c, zero, s], axis=-1)
        row1 = self.stack([zero, one, zero], axis=-1)
        row2 = self.stack([-s, zero, c], axis=-1)
        return self.stack([row0, row1, row2], axis=-2)

    def Rz(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): angle value

        Returns:
            npt.ArrayLike: rotation matrix around z axis
        """
        c, s = self.cos(q), self.sin(q)
        one = self.factory.ones_like(c)
        zero = self.factory.zeros_like(c)
        row0 = self.stack([c, -s, zero], axis=-1)
        row1 = self.stack([s, c, zero], axis=-1)
        row2 = self.stack([zero, zero, one], axis=-1)
        return self.stack([row0, row1, row2], axis=-2)

    def R_from_RPY(self, rpy: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
           rpy (npt.ArrayLike): rotation as rpy angles

        Returns:
            npt.ArrayLike: Rotation matrix
        """
        return self.Rz(rpy[2]) @ self.Ry(rpy[1]) @ self.Rx(rpy[0])

    def homogeneous(self, R: npt.ArrayLike, p: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            R (npt.ArrayLike): rotation matrix
            p (npt.ArrayLike): translation vector

        Returns:
            npt.ArrayLike: the 4x4 homogeneous transform
        """
        p = self.factory.asarray(p)
        top = self.concatenate([R, p[:, None]], axis=-1)  # (3,4)
        bottom = self.factory.asarray([[0.0, 0.0, 0.0, 1.0]])  # (1,4)
        return self.concatenate([top, bottom], axis=-2)  # (4,4)

    def H_from_Pos_RPY(self, xyz: npt.ArrayLike, rpy: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            xyz (npt.ArrayLike): translation vector
            rpy (npt.ArrayLike): rotation as rpy angles

        Returns:
            npt.ArrayLike: Homegeneous transform
        """
        return self.homogeneous(self.R_from_RPY(rpy), xyz)

    def H_revolute_joint(
        self,
        xyz: npt.ArrayLike,
        rpy: npt.ArrayLike,
        axis: npt.ArrayLike,
        q: npt.ArrayLike,
    ) -> npt.ArrayLike:
        """
        Args:
            xyz (npt.ArrayLike): joint origin
            rpy (npt.ArrayLike): joint orientation
            axis (npt.ArrayLike): joint axis, in the joint frame
            q (npt.ArrayLike): joint angle value

        Returns:
            npt.ArrayLike: Homogeneous transform
        """
        R = self.R_from_RPY(rpy) @ self.R_from_axis_angle(axis, q)
        return self.homogeneous(R, xyz)

    def H_prismatic_joint(
        self,
        xyz: npt.ArrayLike,
        rpy: npt.ArrayLike,
        axis: npt.ArrayLike,
        q: npt.ArrayLike,
    ) -> npt.ArrayLike:
        """
        Args:
            xyz (npt.ArrayLike): joint origin
            rpy (npt.ArrayLike): joint orientation
            axis (npt.ArrayLike): joint axis, in the joint frame
            q (npt.ArrayLike): joint displacement

        Returns:
            npt.ArrayLike: Homogeneous transform
        """
        R = self.R_from_RPY(rpy)
        p = xyz + self.mxv(R, axis * q)
        return self.homogeneous(R, p)

    def X_from_H(self, H: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            H (npt.ArrayLike): pose of the frame B in the frame A

        Returns:
            npt.ArrayLike: the spatial transform mapping motion vectors from A to B coordinates
        """
        R = self.swapaxes(H[:3, :3], -1, -2)
        p = -self.mxv(R, H[:3, 3])
        return self.spatial_transform(R, p)

    def spatial_transform(self, R: npt.ArrayLike, p: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            R (npt.ArrayLike): Rotation matrix
            p (npt.ArrayLike): translation vector

        Returns:
            npt.ArrayLike: spatial transform
        """
        Sp = self.skew(p)
        zeros = self.factory.zeros_like(R)
        top = self.concatenate([R, Sp @ R], axis=-1)  # (3,6)
        bottom = self.concatenate([zeros, R], axis=-1)  # (3,6)
        return self.concatenate([top, bottom], axis=-2)  # (6,6)

    def spatial_inertia(
        self,
        inertia_matrix: npt.ArrayLike,
        mass: npt.ArrayLike,
        c: npt.ArrayLike,
        rpy: npt.ArrayLike,
    ) -> npt.ArrayLike:
        """
        Args:
            inertia_matrix (npt.ArrayLike): inertia about the center of mass
            mass (npt.ArrayLike): mass value
            c (npt.ArrayLike): center of mass in the body frame
            rpy (npt.ArrayLike): orientation of the inertia frame in the body frame

        Returns:
            npt.ArrayLike: the 6x6 inertia matrix expressed at the origin of the body (with rotation)
        """
        Sc = self.skew(c)
        R = self.R_from_RPY(rpy)
        mass_I3 = mass * self.factory.eye(3)
        mass_Sc = mass * Sc
        mass_Sc_T = self.swapaxes(mass_Sc, -1, -2)

        rotated_inertia = R @ inertia_matrix @ self.swapaxes(R, -1, -2)
        Sc_squared = Sc @ self.swapaxes(Sc, -1, -2)
        bottom_right = rotated_inertia + mass * Sc_squared

        top = self.concatenate([mass_I3, mass_Sc_T], axis=-1)  # (3,6)
        bottom = self.concatenate([mass_Sc, bottom_right], axis=-1)  # (3,6)
        return self.concatenate([top, bottom], axis=-2)  # (6,6)

    def spatial_skew(self, v: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            v (npt.ArrayLike): 6D vector

        Returns:
            npt.ArrayLike: spatial skew matrix
        """
        omega = v[3:]  # Angular part
        vel = v[:3]  # Linear part

        skew_omega = self.skew(omega)
        skew_vel = self.skew(vel)
        zeros = self.factory.zeros_like(skew_omega)

        top = self.concatenate([skew_omega, skew_vel], axis=-1)  # (3,6)
        bottom = self.concatenate([zeros, skew_omega], axis=-1)  # (3,6)
        return self.concatenate([top, bottom], axis=-2)  # (6,6)

    def spatial_skew_star(self, v: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            v (npt.ArrayLike): 6D vector

        Returns:
            npt.ArrayLike: negative spatial skew matrix traspose
        """
        return -self.swapaxes(self.spatial_skew(v), -1, -2)

    def adjoint(self, H: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            H (npt.ArrayLike): Homogeneous transform
        Returns:
            npt.ArrayLike: adjoint matrix
        """
        return self.spatial_transform(H[:3, :3], H[:3, 3])

    def adjoint_mixed(self, H: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            H (npt.ArrayLike): Homogeneous transform
        Returns:
            npt.ArrayLike: adjoint matrix
        """
        R = H[:3, :3]
        Z = self.factory.zeros_like(R)
        return self.concatenate(
            [
                self.concatenate([R, Z], axis=-1),
                self.concatenate([Z, R], axis=-1),
            ],
            axis=-2,
        )

    def homogeneous_inverse(self, H: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            H (npt.ArrayLike): Homogeneous transform
        Returns:
            npt.ArrayLike: inverse of the homogeneous transform
        """
        R_T = self.swapaxes(H[:3, :3], -1, -2)
        return self.homogeneous(R_T, -self.mxv(R_T, H[:3, 3]))

    def mxv(self, m: npt.ArrayLike, v: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            m (npt.ArrayLike): Matrix
            v (npt.ArrayLike): Vector
        Returns:
            npt.ArrayLike: Result of matrix-vector multiplication
        """
        res = m @ v[:, None]
        return res[:, 0]  # Remove the extra dimension

    def zeros(self, *x: int) -> npt.ArrayLike:
        """
        Args:
            x (int): dimension
        Returns:
            npt.ArrayLike: zero matrix of dimension x
        """
        return self.factory.zeros(*x)

    def eye(self, x: int) -> npt.ArrayLike:
        """
        Args:
            x (int): dimension
        Returns:
            npt.ArrayLike: identity matrix of dimension x
        """
        return self.factory.eye(x)

    def asarray(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): array
        Returns:
            npt.ArrayLike: array
        """
        return self.factory.asarray(x)

    def zeros_like(self, x: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            x (npt.ArrayLike): array
        Returns:
            npt.ArrayLike: zero array with the same shape as x
        """
        return self.factory.zeros_like(x)
