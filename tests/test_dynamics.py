import numpy as np
import pytest
from conftest import pendulum_descriptions, random_descriptions, random_state

from kintree import (
    KinDynComputations,
    NodeDescription,
    Representations,
    build_tree,
    run_forward,
)
from kintree.core.constants import GRAVITY
from kintree.core.inverse_dynamics import MotionVisitor
from kintree.numpy.numpy_like import SpatialMath

REPRESENTATIONS = [
    Representations.BODY_FIXED_REPRESENTATION,
    Representations.MIXED_REPRESENTATION,
    Representations.INERTIAL_FIXED_REPRESENTATION,
]

g = -GRAVITY[2]


@pytest.fixture(scope="module")
def kindyn(branched):
    return KinDynComputations(branched)


@pytest.fixture(scope="module")
def external_forces():
    return {
        "l_hand": np.array([1.0, -2.0, 0.5, 0.1, 0.3, -0.2]),
        3: np.array([0.0, 4.0, -1.0, 0.0, 0.2, 0.0]),
    }


def test_mass_matrix(kindyn, branched_state):
    M = kindyn.mass_matrix(branched_state.joints_pos)
    assert M.shape == (13, 13)
    assert M - M.T == pytest.approx(0.0, abs=1e-12)
    assert np.all(np.linalg.eigvalsh(M) > 0.0)
    # the floating base block carries the total mass
    assert M[:3, :3] == pytest.approx(kindyn.get_total_mass() * np.eye(3))


def test_mass_matrix_matches_kinetic_energy(branched, branched_state):
    math = SpatialMath()
    tree = build_tree(branched, math)
    kindyn = KinDynComputations(branched)
    q, qd = branched_state.joints_pos, branched_state.joints_vel
    motions = run_forward(tree, MotionVisitor(math, math.asarray(q), math.asarray(qd)))
    energy = sum(
        0.5 * motions[node.index].v.array
        @ node.link.spatial_inertia().array
        @ motions[node.index].v.array
        for node in tree.nodes
    )
    M = kindyn.mass_matrix(q)
    assert 0.5 * qd @ M @ qd == pytest.approx(energy)


def test_rnea_is_mass_matrix_plus_bias(kindyn, branched_state):
    q, qd, qdd, H = (
        branched_state.joints_pos,
        branched_state.joints_vel,
        branched_state.joints_acc,
        branched_state.H,
    )
    tau = kindyn.rnea(q, qd, qdd, base_transform=H)
    M = kindyn.mass_matrix(q)
    h = kindyn.bias_force(q, qd, base_transform=H)
    assert tau - (M @ qdd + h) == pytest.approx(0.0, abs=1e-10)


def test_bias_is_coriolis_plus_gravity(kindyn, branched_state):
    q, qd, H = branched_state.joints_pos, branched_state.joints_vel, branched_state.H
    h = kindyn.bias_force(q, qd, base_transform=H)
    C = kindyn.coriolis_term(q, qd)
    G = kindyn.gravity_term(q, base_transform=H)
    assert h - (C + G) == pytest.approx(0.0, abs=1e-10)


@pytest.mark.parametrize("representation", REPRESENTATIONS)
def test_aba_inverts_rnea(branched, branched_state, external_forces, representation):
    kindyn = KinDynComputations(branched)
    kindyn.set_frame_velocity_representation(representation)
    q, qd, qdd, H = (
        branched_state.joints_pos,
        branched_state.joints_vel,
        branched_state.joints_acc,
        branched_state.H,
    )
    tau = kindyn.rnea(q, qd, qdd, external_forces, base_transform=H)
    qdd_aba = kindyn.aba(q, qd, tau, external_forces, base_transform=H)
    assert qdd_aba - qdd == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("seed", range(5))
def test_aba_inverts_rnea_on_random_trees(seed):
    rng = np.random.default_rng(seed)
    kindyn = KinDynComputations(random_descriptions(rng, int(rng.integers(2, 12))))
    state = random_state(kindyn.NDoF, seed=seed)
    tau = kindyn.rnea(state.joints_pos, state.joints_vel, state.joints_acc, base_transform=state.H)
    qdd = kindyn.aba(state.joints_pos, state.joints_vel, tau, base_transform=state.H)
    assert qdd - state.joints_acc == pytest.approx(0.0, abs=1e-8)


@pytest.mark.parametrize("representation", REPRESENTATIONS)
def test_external_forces_map_through_the_jacobian(
    branched, branched_state, external_forces, representation
):
    kindyn = KinDynComputations(branched)
    kindyn.set_frame_velocity_representation(representation)
    q, H = branched_state.joints_pos, branched_state.H
    zero = np.zeros(kindyn.NDoF)
    J = kindyn.jacobians(q, H)
    expected = kindyn.gravity_term(q, base_transform=H)
    for key, f in external_forces.items():
        expected = expected - J[key].T @ f
    tau = kindyn.rnea(q, zero, zero, external_forces, base_transform=H)
    assert tau - expected == pytest.approx(0.0, abs=1e-10)


def test_external_forces_by_name_or_index(kindyn, branched_state, external_forces):
    q, qd, qdd = branched_state.joints_pos, branched_state.joints_vel, branched_state.joints_acc
    by_index = {kindyn.tree.resolve(k): f for k, f in external_forces.items()}
    assert kindyn.rnea(q, qd, qdd, external_forces) == pytest.approx(
        kindyn.rnea(q, qd, qdd, by_index)
    )
    with pytest.raises(ValueError):
        kindyn.rnea(q, qd, qdd, {"l_hand": np.zeros(6), 5: np.zeros(6)})


def test_body_acceleration_is_the_derivative_of_the_body_velocity(branched, branched_state):
    math = SpatialMath()
    tree = build_tree(branched, math)
    kindyn = KinDynComputations(branched)
    kindyn.set_frame_velocity_representation(Representations.BODY_FIXED_REPRESENTATION)
    q, qd, qdd = branched_state.joints_pos, branched_state.joints_vel, branched_state.joints_acc
    eps = 1e-6

    motions = run_forward(
        tree,
        MotionVisitor(math, math.asarray(q), math.asarray(qd), math.asarray(qdd)),
    )
    J = kindyn.jacobians(q)
    J_plus = kindyn.jacobians(q + eps * qd)
    J_minus = kindyn.jacobians(q - eps * qd)
    for idx in range(len(tree)):
        expected = J[idx] @ qdd + (J_plus[idx] - J_minus[idx]) @ qd / (2 * eps)
        assert motions[idx].a.array - expected == pytest.approx(0.0, abs=1e-7)
        assert motions[idx].v.array == pytest.approx(J[idx] @ qd)


@pytest.mark.parametrize("q", [0.0, 0.4, -1.2, 2.5])
def test_pendulum(q):
    mass, length, iyy = 1.5, 0.7, 0.02
    kindyn = KinDynComputations(pendulum_descriptions(mass, length, iyy))
    zero = np.zeros(1)
    tau = kindyn.rnea(np.array([q]), zero, zero)
    assert tau == pytest.approx(np.array([-mass * g * length * np.cos(q)]))

    qdd = kindyn.aba(np.array([q]), zero, zero)
    assert qdd == pytest.approx(
        np.array([mass * g * length * np.cos(q) / (iyy + mass * length**2)])
    )
    assert kindyn.mass_matrix(np.array([q])) == pytest.approx(
        np.array([[iyy + mass * length**2]])
    )
    assert kindyn.CoM_position(np.array([q])) == pytest.approx(
        np.array([length * np.cos(q), 0.0, -length * np.sin(q)])
    )


def test_pendulum_centrifugal_force_does_not_act_on_the_joint():
    kindyn = KinDynComputations(pendulum_descriptions())
    assert kindyn.coriolis_term(np.array([0.3]), np.array([2.0])) == pytest.approx(
        np.zeros(1), abs=1e-12
    )


def test_gravity_can_be_disabled():
    kindyn = KinDynComputations(pendulum_descriptions(), gravity=np.zeros(3))
    assert kindyn.gravity_term(np.array([0.3])) == pytest.approx(np.zeros(1))


def test_free_falling_base(branched, branched_state):
    kindyn = KinDynComputations(branched)
    kindyn.set_frame_velocity_representation(Representations.MIXED_REPRESENTATION)
    zero = np.zeros(kindyn.NDoF)
    qdd = kindyn.aba(zero, zero, zero)
    # with all joints at rest the floating base falls with gravity
    J = kindyn.jacobians(zero)
    assert J["base"] @ qdd == pytest.approx(np.array([0.0, 0.0, -g, 0.0, 0.0, 0.0]), abs=1e-9)


def test_center_of_mass(kindyn, branched_state):
    q, H = branched_state.joints_pos, branched_state.H
    transforms = kindyn.forward_kinematics(q, H)
    expected = np.zeros(3)
    for node in kindyn.tree.nodes:
        com = transforms[node.index] @ node.link.homogeneous().array
        expected += node.link.inertial.mass * com[:3, 3]
    expected /= kindyn.get_total_mass()
    assert kindyn.CoM_position(q, H) == pytest.approx(expected)
    assert kindyn.get_total_mass() == pytest.approx(7.3)


def test_massless_tree_has_no_center_of_mass():
    kindyn = KinDynComputations([NodeDescription(name="frame")])
    assert kindyn.NDoF == 0
    assert kindyn.rnea(np.zeros(0), np.zeros(0), np.zeros(0)).shape == (0,)
    assert kindyn.mass_matrix(np.zeros(0)).shape == (0, 0)
    with pytest.raises(ValueError):
        kindyn.CoM_position(np.zeros(0))
