import numpy as np
import pytest
from conftest import body, pendulum_descriptions
from scipy.spatial.transform import Rotation

from kintree import JointDescription, KinDynComputations, NodeDescription, Representations

REPRESENTATIONS = [
    Representations.BODY_FIXED_REPRESENTATION,
    Representations.MIXED_REPRESENTATION,
    Representations.INERTIAL_FIXED_REPRESENTATION,
]


def twist_from_transforms(H_minus, H_plus, H, eps, representation):
    """Velocity of a frame from central differences of its pose"""
    H_dot = (H_plus - H_minus) / (2 * eps)
    R, p = H[:3, :3], H[:3, 3]
    R_dot, p_dot = H_dot[:3, :3], H_dot[:3, 3]
    omega_world = np.array(
        [
            (R_dot @ R.T)[2, 1],
            (R_dot @ R.T)[0, 2],
            (R_dot @ R.T)[1, 0],
        ]
    )
    if representation == Representations.BODY_FIXED_REPRESENTATION:
        return np.concatenate([R.T @ p_dot, R.T @ omega_world])
    if representation == Representations.MIXED_REPRESENTATION:
        return np.concatenate([p_dot, omega_world])
    return np.concatenate([p_dot + np.cross(p, omega_world), omega_world])


@pytest.fixture(scope="module")
def kindyn(branched):
    return KinDynComputations(branched)


def test_pendulum_forward_kinematics():
    kindyn = KinDynComputations(pendulum_descriptions())
    H = kindyn.forward_kinematics(np.zeros(1))
    assert H["base"] == pytest.approx(np.eye(4))
    assert H["link"] == pytest.approx(np.eye(4))

    q = 0.3
    H = kindyn.forward_kinematics(np.array([q]))
    assert H[1][:3, :3] - Rotation.from_euler("y", q).as_matrix() == pytest.approx(
        0.0, abs=1e-12
    )
    assert H[1][:3, 3] == pytest.approx(np.zeros(3))


def test_forward_kinematics_is_identity_at_zero_offsets():
    kindyn = KinDynComputations(
        [
            NodeDescription(name="world"),
            NodeDescription(name="floating", parent=0, joint=JointDescription(type="free")),
            NodeDescription(
                name="ball", parent=1, joint=JointDescription(type="spherical"), body=body(1.0)
            ),
            NodeDescription(
                name="hinge",
                parent=2,
                joint=JointDescription(type="revolute", axis=(0.0, 1.0, 1.0)),
                body=body(0.5),
            ),
            NodeDescription(
                name="slider",
                parent=1,
                joint=JointDescription(type="prismatic", axis=(1.0, 0.0, 0.0)),
                body=body(0.5),
            ),
            NodeDescription(name="sensor", parent=4, joint=JointDescription(type="fixed")),
            NodeDescription(name="camera", parent=2, joint=JointDescription(type="fixed")),
        ]
    )
    assert kindyn.NDoF == 6 + 3 + 1 + 1
    H = kindyn.forward_kinematics(np.zeros(kindyn.NDoF))
    assert len(H) == 7
    for name, H_i in H.items():
        assert H_i == pytest.approx(np.eye(4)), name


def test_forward_kinematics_composes_joints(kindyn, branched_state):
    H = kindyn.forward_kinematics(branched_state.joints_pos, branched_state.H)
    tree = kindyn.tree
    q = tree.math.asarray(branched_state.joints_pos)
    for node in tree.nodes:
        parent_H = branched_state.H if node.parent is None else H[node.parent]
        local = node.joint.homogeneous(q[node.dof_slice]).array
        assert H[node.index] - parent_H @ local == pytest.approx(0.0, abs=1e-12)
    # a fixed joint only carries its origin
    sensor = np.linalg.inv(H["l_arm"]) @ H["sensor"]
    assert sensor[:3, 3] == pytest.approx(np.array([0.05, 0.0, 0.0]))
    assert sensor[:3, :3] - Rotation.from_euler("y", 0.5).as_matrix() == pytest.approx(
        0.0, abs=1e-12
    )


def test_root_pose_follows_base_transform(kindyn, branched_state):
    zero = np.zeros(kindyn.NDoF)
    H = kindyn.forward_kinematics(zero, branched_state.H)
    origin = np.eye(4)
    origin[:3, 3] = [0.1, 0.0, 0.2]
    assert H["base"] - branched_state.H @ origin == pytest.approx(0.0, abs=1e-12)


def test_forward_kinematics_items(kindyn):
    H = kindyn.forward_kinematics(np.zeros(kindyn.NDoF))
    names = [name for name, _ in H.items()]
    assert names == [node.name for node in kindyn.tree.nodes]
    assert len(H) == 7


@pytest.mark.parametrize("representation", REPRESENTATIONS)
def test_jacobians_match_finite_differences(branched, branched_state, representation):
    kindyn = KinDynComputations(branched)
    kindyn.set_frame_velocity_representation(representation)
    q, qd, H_b = branched_state.joints_pos, branched_state.joints_vel, branched_state.H
    eps = 1e-6

    J = kindyn.jacobians(q, H_b)
    H = kindyn.forward_kinematics(q, H_b)
    H_plus = kindyn.forward_kinematics(q + eps * qd, H_b)
    H_minus = kindyn.forward_kinematics(q - eps * qd, H_b)
    for idx in range(len(kindyn.tree)):
        assert J[idx].shape == (6, 13)
        expected = twist_from_transforms(H_minus[idx], H_plus[idx], H[idx], eps, representation)
        assert J[idx] @ qd - expected == pytest.approx(0.0, abs=1e-7)


def test_jacobian_columns_outside_the_path_are_zero(kindyn, branched_state):
    J = kindyn.jacobians(branched_state.joints_pos, branched_state.H)
    # l_arm owns column 9, r_arm column 10, l_hand column 11, l_forearm column 12
    assert np.all(J["l_hand"][:, 10] == 0.0)
    assert np.all(J["r_arm"][:, 9] == 0.0)
    assert np.all(J["r_arm"][:, 11:] == 0.0)
    assert np.all(J["sensor"][:, 11:] == 0.0)
    assert np.all(J["base"][:, 6:] == 0.0)
    assert np.any(J["l_hand"][:, 11] != 0.0)


def test_body_jacobian_of_the_root_free_joint(branched, branched_state):
    kindyn = KinDynComputations(branched)
    kindyn.set_frame_velocity_representation(Representations.BODY_FIXED_REPRESENTATION)
    J = kindyn.jacobians(np.zeros(kindyn.NDoF))
    # at rest the free joint maps translations and rotations onto the body axes
    assert J["base"][:, :6] == pytest.approx(np.eye(6))


def test_unknown_representation(kindyn):
    with pytest.raises(ValueError):
        kindyn.set_frame_velocity_representation(7)
