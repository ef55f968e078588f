import abc
import dataclasses
from typing import List, Optional

import numpy.typing as npt

from kintree.core.constants import JointType
from kintree.core.spatial_math import SpatialMath


@dataclasses.dataclass(frozen=True, slots=True)
class Pose:
    """Pose class"""

    xyz: npt.ArrayLike
    rpy: npt.ArrayLike

    @staticmethod
    def build(xyz: npt.ArrayLike, rpy: npt.ArrayLike, math: SpatialMath) -> "Pose":
        xyz = math.asarray(xyz)
        rpy = math.asarray(rpy)
        return Pose(xyz, rpy)

    @staticmethod
    def zero(math: SpatialMath) -> "Pose":
        return Pose.build([0.0, 0.0, 0.0], [0.0, 0.0, 0.0], math)


@dataclasses.dataclass(frozen=True, slots=True)
class Inertia:
    matrix: npt.ArrayLike
    ixx: float
    ixy: float
    ixz: float
    iyy: float
    iyz: float
    izz: float

    @staticmethod
    def build(
        ixx: float,
        ixy: float,
        ixz: float,
        iyy: float,
        iyz: float,
        izz: float,
        math: SpatialMath,
    ) -> "Inertia":
        matrix = math.asarray(
            [
                [ixx, ixy, ixz],
                [ixy, iyy, iyz],
                [ixz, iyz, izz],
            ]
        )
        return Inertia(matrix, ixx, ixy, ixz, iyy, iyz, izz)

    @staticmethod
    def zero(math: SpatialMath) -> "Inertia":
        return Inertia.build(
            ixx=0.0, ixy=0.0, ixz=0.0, iyy=0.0, iyz=0.0, izz=0.0, math=math
        )


@dataclasses.dataclass(frozen=True, slots=True)
class Inertial:
    """Inertial description"""

    mass: float
    inertia: Inertia
    origin: Pose

    @staticmethod
    def zero(math: SpatialMath) -> "Inertial":
        """Returns an Inertial object with zero mass and inertia"""
        return Inertial(mass=0.0, inertia=Inertia.zero(math), origin=Pose.zero(math))


@dataclasses.dataclass
class Joint(abc.ABC):
    """Base Joint class. You need to fill at least these fields"""

    math: SpatialMath
    name: str
    type: JointType
    axis: npt.ArrayLike
    origin: Pose
    """
    Abstract base class for all joints.
    """

    @property
    def dof(self) -> int:
        return self.type.dof

    @abc.abstractmethod
    def homogeneous(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions, one entry per dof

        Returns:
            npt.ArrayLike: the pose of the child frame in the parent frame
        """
        pass

    @abc.abstractmethod
    def spatial_transform(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions, one entry per dof

        Returns:
            npt.ArrayLike: the 6x6 motion transform from parent to child coordinates
        """
        pass

    @abc.abstractmethod
    def motion_subspace(self, q: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions, one entry per dof

        Returns:
            npt.ArrayLike: the 6 x dof motion subspace in child coordinates
        """
        pass

    @abc.abstractmethod
    def velocity_bias(self, q: npt.ArrayLike, qd: npt.ArrayLike) -> npt.ArrayLike:
        """
        Args:
            q (npt.ArrayLike): joint positions
            qd (npt.ArrayLike): joint velocities

        Returns:
            npt.ArrayLike: the velocity product acceleration of the joint, in child coordinates
        """
        pass


@dataclasses.dataclass
class Link(abc.ABC):
    """Base Link class. You need to fill at least these fields"""

    math: SpatialMath
    name: str
    inertial: Inertial

    @abc.abstractmethod
    def spatial_inertia(self) -> npt.ArrayLike:
        """
        Returns:
            npt.ArrayLike: the 6x6 inertia matrix expressed at
                           the origin of the link (with rotation)
        """
        pass

    @abc.abstractmethod
    def homogeneous(self) -> npt.ArrayLike:
        """
        Returns:
            npt.ArrayLike: the pose of the center of mass frame in the link frame
        """
        pass


@dataclasses.dataclass
class ModelFactory(abc.ABC):
    """The abstract class of the model factory.

    The model factory is responsible for creating the elements of the tree.
    The i-th link is attached to its parent by the i-th joint.

    You need to implement all the methods in your concrete implementation
    """

    math: SpatialMath
    name: str

    @abc.abstractmethod
    def build_link(self, *args, **kwargs) -> Link:
        """build the single link
        Returns:
            Link
        """
        pass

    @abc.abstractmethod
    def build_joint(self, *args, **kwargs) -> Joint:
        """build the single joint

        Returns:
            Joint
        """
        pass

    @abc.abstractmethod
    def get_links(self) -> List[Link]:
        """
        Returns:
            List[Link]: the list of the links
        """
        pass

    @abc.abstractmethod
    def get_joints(self) -> List[Joint]:
        """
        Returns:
            List[Joint]: the list of the joints, one per link
        """
        pass

    @abc.abstractmethod
    def get_parents(self) -> List[Optional[int]]:
        """
        Returns:
            List[Optional[int]]: the parent index of each link, None for the root
        """
        pass
