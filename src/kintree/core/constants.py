# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from enum import Enum, IntEnum


class Representations(IntEnum):
    """Frame velocity representations used for Jacobians and external forces"""

    BODY_FIXED_REPRESENTATION = 1
    MIXED_REPRESENTATION = 2
    INERTIAL_FIXED_REPRESENTATION = 3


class JointType(Enum):
    """Supported joint types. `dof` gives the number of degrees of freedom"""

    FIXED = "fixed"
    REVOLUTE = "revolute"
    PRISMATIC = "prismatic"
    SPHERICAL = "spherical"
    FREE = "free"

    @property
    def dof(self) -> int:
        return _DOF_COUNT[self]

    @staticmethod
    def from_string(value: "str | JointType") -> "JointType":
        """
        Args:
            value (str | JointType): the joint type or one of its names

        Returns:
            JointType: the joint type
        """
        if isinstance(value, JointType):
            return value
        key = str(value).strip().lower()
        if key not in _ALIASES:
            raise ValueError(
                f"{value} is not a valid joint type. Valid types are {sorted(_ALIASES)}"
            )
        return _ALIASES[key]


_DOF_COUNT = {
    JointType.FIXED: 0,
    JointType.REVOLUTE: 1,
    JointType.PRISMATIC: 1,
    JointType.SPHERICAL: 3,
    JointType.FREE: 6,
}

_ALIASES = {
    "fixed": JointType.FIXED,
    "revolute": JointType.REVOLUTE,
    "continuous": JointType.REVOLUTE,
    "prismatic": JointType.PRISMATIC,
    "spherical": JointType.SPHERICAL,
    "ball": JointType.SPHERICAL,
    "free": JointType.FREE,
    "floating": JointType.FREE,
}

GRAVITY = (0.0, 0.0, -9.80665)

DEFAULT_TOLERANCE = 1e-12
