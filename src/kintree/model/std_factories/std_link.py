import numpy.typing as npt

from kintree.core.spatial_math import SpatialMath
from kintree.model.abc_factories import Inertia, Inertial, Link, Pose
from kintree.model.description import BodyDescription


class StdLink(Link):
    """Standard Link class"""

    def __init__(self, name: str, body: BodyDescription, math: SpatialMath):
        self.math = math
        self.name = name
        self.inertial = self._set_inertia(body)

    def _set_inertia(self, body: BodyDescription) -> Inertial:
        """
        Args:
            body (BodyDescription): the inertial parameters

        Returns:
            Inertial: the inertial of the link
        """
        ixx, ixy, ixz, iyy, iyz, izz = body.inertia
        inertia = Inertia.build(
            ixx=ixx, ixy=ixy, ixz=ixz, iyy=iyy, iyz=iyz, izz=izz, math=self.math
        )
        pose = Pose.build(body.com, body.rpy, self.math)
        return Inertial(mass=body.mass, inertia=inertia, origin=pose)

    def spatial_inertia(self) -> npt.ArrayLike:
        """
        Returns:
            npt.ArrayLike: the 6x6 inertia matrix expressed at
                           the origin of the link (with rotation)
        """
        inertia_matrix = self.inertial.inertia.matrix
        mass = self.inertial.mass
        o = self.inertial.origin.xyz
        rpy = self.inertial.origin.rpy
        return self.math.spatial_inertia(inertia_matrix, mass, o, rpy)

    def homogeneous(self) -> npt.ArrayLike:
        """
        Returns:
            npt.ArrayLike: the pose of the center of mass frame in the link frame
        """
        return self.math.H_from_Pos_RPY(
            self.inertial.origin.xyz,
            self.inertial.origin.rpy,
        )
