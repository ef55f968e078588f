import dataclasses
import logging

import numpy as np
import pytest

from kintree import BodyDescription, JointDescription, NodeDescription
from kintree.numpy.numpy_like import SpatialMath

JOINT_TYPES = ["fixed", "revolute", "prismatic", "spherical", "free"]


@dataclasses.dataclass
class State:
    H: np.ndarray
    joints_pos: np.ndarray
    joints_vel: np.ndarray
    joints_acc: np.ndarray


def body(mass, com=(0.0, 0.0, 0.0), inertia=(0.01, 0.0, 0.0, 0.01, 0.0, 0.01), rpy=(0.0, 0.0, 0.0)):
    return BodyDescription(mass=mass, com=com, inertia=inertia, rpy=rpy)


def pendulum_descriptions(mass=1.5, length=0.7, iyy=0.0):
    """A massless fixed base and a link rotating about y, its CoM at (length, 0, 0)"""
    return [
        NodeDescription(name="base", parent=None),
        NodeDescription(
            name="link",
            parent=0,
            joint=JointDescription(type="revolute", axis=(0.0, 1.0, 0.0)),
            body=body(mass, com=(length, 0.0, 0.0), inertia=(0.0, 0.0, 0.0, iyy, 0.0, 0.0)),
        ),
    ]


def branched_descriptions():
    """A floating tree using every joint type. l_hand has a parent with a higher index."""
    return [
        NodeDescription(
            name="base",
            parent=None,
            joint=JointDescription(type="free", xyz=(0.1, 0.0, 0.2)),
            body=body(3.0, com=(0.01, 0.0, 0.02), inertia=(0.05, 0.001, 0.0, 0.06, 0.002, 0.04)),
        ),
        NodeDescription(
            name="torso",
            parent=0,
            joint=JointDescription(type="spherical", xyz=(0.0, 0.0, 0.3), rpy=(0.1, 0.2, 0.3)),
            body=body(2.0, com=(0.0, 0.01, 0.15), inertia=(0.03, 0.0, 0.001, 0.02, 0.0, 0.025)),
        ),
        NodeDescription(
            name="l_arm",
            parent=1,
            joint=JointDescription(type="revolute", xyz=(0.0, 0.2, 0.1), axis=(0.0, 1.0, 0.0)),
            body=body(0.8, com=(0.1, 0.0, 0.0), inertia=(0.002, 0.0, 0.0, 0.01, 0.0, 0.01)),
        ),
        NodeDescription(
            name="r_arm",
            parent=1,
            joint=JointDescription(
                type="prismatic", xyz=(0.0, -0.2, 0.1), rpy=(0.0, 0.0, 0.4), axis=(1.0, 1.0, 0.0)
            ),
            body=body(0.7, com=(0.0, -0.05, 0.0), rpy=(0.2, 0.0, 0.1)),
        ),
        NodeDescription(
            name="sensor",
            parent=2,
            joint=JointDescription(type="fixed", xyz=(0.05, 0.0, 0.0), rpy=(0.0, 0.5, 0.0)),
        ),
        NodeDescription(
            name="l_hand",
            parent=6,
            joint=JointDescription(type="continuous", xyz=(0.15, 0.0, 0.0), axis=(1.0, 0.0, 0.0)),
            body=body(0.3, com=(0.03, 0.0, 0.0), inertia=(0.001, 0.0, 0.0, 0.001, 0.0, 0.001)),
        ),
        NodeDescription(
            name="l_forearm",
            parent=2,
            joint=JointDescription(type="revolute", xyz=(0.2, 0.0, 0.0), axis=(0.0, 0.0, 1.0)),
            body=body(0.5, com=(0.08, 0.0, 0.0), inertia=(0.001, 0.0, 0.0, 0.004, 0.0, 0.004)),
        ),
    ]


def random_descriptions(rng: np.random.Generator, n_nodes: int):
    """A random tree. Node indices are shuffled so that parents may follow their children."""
    labels = rng.permutation(n_nodes)
    parents = [None] * n_nodes
    for k in range(1, n_nodes):
        parents[labels[k]] = int(labels[rng.integers(0, k)])

    descriptions = []
    for i in range(n_nodes):
        joint_type = JOINT_TYPES[rng.integers(0, len(JOINT_TYPES))]
        inertia = rng.uniform(0.01, 0.05, 3)
        descriptions.append(
            NodeDescription(
                name=f"body_{i}",
                parent=parents[i],
                joint=JointDescription(
                    type=joint_type,
                    xyz=rng.uniform(-0.3, 0.3, 3),
                    rpy=rng.uniform(-1.0, 1.0, 3),
                    axis=rng.uniform(0.2, 1.0, 3),
                ),
                body=BodyDescription(
                    mass=rng.uniform(0.5, 2.0),
                    com=rng.uniform(-0.1, 0.1, 3),
                    inertia=(inertia[0], 0.001, 0.0, inertia[1], 0.0, inertia[2]),
                    rpy=rng.uniform(-1.0, 1.0, 3),
                ),
            )
        )
    return descriptions


def random_state(n_dof: int, seed: int = 42) -> State:
    np.random.seed(seed)
    xyz = (np.random.rand(3) - 0.5) * 2
    rpy = (np.random.rand(3) - 0.5) * 2
    H_b = SpatialMath().H_from_Pos_RPY(xyz, rpy).array
    return State(
        H=H_b,
        joints_pos=(np.random.rand(n_dof) - 0.5) * 2,
        joints_vel=(np.random.rand(n_dof) - 0.5) * 2,
        joints_acc=(np.random.rand(n_dof) - 0.5) * 2,
    )


@pytest.fixture(scope="module")
def branched():
    logging.basicConfig(level=logging.DEBUG)
    return branched_descriptions()


@pytest.fixture(scope="module")
def branched_state() -> State:
    return random_state(n_dof=13)


@pytest.fixture
def math() -> SpatialMath:
    return SpatialMath()
