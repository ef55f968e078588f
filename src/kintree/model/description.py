import dataclasses
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from kintree.core.constants import JointType


def _as_triplet(value: Sequence[float], what: str) -> tuple:
    values = tuple(float(v) for v in value)
    if len(values) != 3:
        raise ValueError(f"{what} must have 3 components, got {len(values)}")
    return values


@dataclasses.dataclass(frozen=True, slots=True)
class JointDescription:
    """Plain description of the joint connecting a body to its parent

    Args:
        type (str): joint type ("fixed", "revolute", "continuous", "prismatic", "spherical", "free")
        xyz (Sequence[float]): position of the joint frame in the parent body frame
        rpy (Sequence[float]): orientation of the joint frame in the parent body frame
        axis (Sequence[float]): motion axis of revolute and prismatic joints, normalized at build time
        name (str, optional): joint name
    """

    type: str = "fixed"
    xyz: Sequence[float] = (0.0, 0.0, 0.0)
    rpy: Sequence[float] = (0.0, 0.0, 0.0)
    axis: Sequence[float] = (1.0, 0.0, 0.0)
    name: Optional[str] = None

    def __post_init__(self):
        joint_type = JointType.from_string(self.type)
        object.__setattr__(self, "xyz", _as_triplet(self.xyz, "xyz"))
        object.__setattr__(self, "rpy", _as_triplet(self.rpy, "rpy"))
        axis = _as_triplet(self.axis, "axis")
        norm = math.sqrt(sum(a * a for a in axis))
        if joint_type in (JointType.REVOLUTE, JointType.PRISMATIC):
            if norm == 0.0:
                raise ValueError(f"The axis of the {self.type} joint {self.name} is null")
            axis = tuple(a / norm for a in axis)
        object.__setattr__(self, "axis", axis)

    @property
    def joint_type(self) -> JointType:
        return JointType.from_string(self.type)


@dataclasses.dataclass(frozen=True, slots=True)
class BodyDescription:
    """Plain description of the inertial parameters of a rigid body

    Args:
        mass (float): body mass
        com (Sequence[float]): center of mass in the body frame
        inertia (Sequence[float]): ixx, ixy, ixz, iyy, iyz, izz about the center of mass
        rpy (Sequence[float]): orientation of the inertia frame in the body frame
    """

    mass: float = 0.0
    com: Sequence[float] = (0.0, 0.0, 0.0)
    inertia: Sequence[float] = (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    rpy: Sequence[float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        if not self.mass >= 0.0:
            raise ValueError(f"The mass must be non negative, got {self.mass}")
        object.__setattr__(self, "mass", float(self.mass))
        object.__setattr__(self, "com", _as_triplet(self.com, "com"))
        object.__setattr__(self, "rpy", _as_triplet(self.rpy, "rpy"))
        inertia = tuple(float(i) for i in self.inertia)
        if len(inertia) != 6:
            raise ValueError(
                f"inertia must be given as (ixx, ixy, ixz, iyy, iyz, izz), got {len(inertia)} values"
            )
        object.__setattr__(self, "inertia", inertia)

    @staticmethod
    def massless() -> "BodyDescription":
        return BodyDescription()


@dataclasses.dataclass(frozen=True, slots=True)
class NodeDescription:
    """Description of one node of the tree: a body and the joint to its parent

    Args:
        name (str): body name, unique in the tree
        parent (int, optional): index of the parent node, None for the root
        joint (JointDescription): the joint connecting the body to the parent
        body (BodyDescription): the inertial parameters of the body
    """

    name: str
    parent: Optional[int] = None
    joint: JointDescription = dataclasses.field(default_factory=JointDescription)
    body: BodyDescription = dataclasses.field(default_factory=BodyDescription)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "NodeDescription":
        """
        Args:
            d (Dict[str, Any]): dictionary with the keys "name", "parent", "joint" and "body",
                                the last two being dictionaries of the description fields

        Returns:
            NodeDescription: the node description
        """
        unknown = set(d) - {"name", "parent", "joint", "body"}
        if unknown:
            raise ValueError(f"Unknown node description keys: {sorted(unknown)}")
        joint = d.get("joint", {})
        body = d.get("body", {})
        return NodeDescription(
            name=d["name"],
            parent=d.get("parent"),
            joint=joint if isinstance(joint, JointDescription) else JointDescription(**joint),
            body=body if isinstance(body, BodyDescription) else BodyDescription(**body),
        )


def as_descriptions(
    descriptions: Iterable[Union[NodeDescription, Dict[str, Any]]]
) -> List[NodeDescription]:
    """Normalizes a sequence of node descriptions or dictionaries

    Args:
        descriptions (Iterable[Union[NodeDescription, Dict[str, Any]]]): the nodes

    Returns:
        List[NodeDescription]: the node descriptions
    """
    return [
        d if isinstance(d, NodeDescription) else NodeDescription.from_dict(d)
        for d in descriptions
    ]
