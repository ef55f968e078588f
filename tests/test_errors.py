import logging

import numpy as np
import pytest
from conftest import body

from kintree import (
    BodyDescription,
    DimensionMismatchError,
    JointDescription,
    KinDynComputations,
    KinTreeError,
    NodeDescription,
    NumericError,
    StructuralError,
    build_tree,
)
from kintree.core import forward_dynamics, inverse_dynamics, kinematics, mass_matrix
from kintree.numpy.numpy_like import SpatialMath


def chain(parents):
    return [
        NodeDescription(
            name=f"n{i}",
            parent=p,
            joint=JointDescription(type="revolute", axis=(0.0, 0.0, 1.0)),
            body=body(1.0, com=(0.1, 0.0, 0.0)),
        )
        for i, p in enumerate(parents)
    ]


@pytest.mark.parametrize(
    "parents",
    [
        [1, 2, 0],  # a cycle without a root
        [None, 2, 3, 1],  # a root and a detached cycle
        [None, 0, 3, 4, 2],
    ],
)
def test_cycles(parents):
    with pytest.raises(StructuralError, match="cycle"):
        build_tree(chain(parents), SpatialMath())


@pytest.mark.parametrize("parents", [[None, 0, None], [None, None]])
def test_more_than_one_root(parents):
    with pytest.raises(StructuralError, match="root"):
        build_tree(chain(parents), SpatialMath())


@pytest.mark.parametrize("parents", [[None, 3], [None, -1], [None, 0.5], [None, "0"], [None, True]])
def test_invalid_parent_index(parents):
    with pytest.raises(StructuralError, match="parent"):
        build_tree(chain(parents), SpatialMath())


def test_self_parent():
    with pytest.raises(StructuralError, match="own parent"):
        build_tree(chain([None, 1]), SpatialMath())


def test_empty_tree():
    with pytest.raises(StructuralError):
        build_tree([], SpatialMath())


def test_duplicate_names():
    descriptions = chain([None, 0, 1])
    descriptions[2] = NodeDescription(name="n1", parent=1)
    with pytest.raises(ValueError, match="n1"):
        build_tree(descriptions, SpatialMath())


def test_structural_errors_are_value_errors():
    assert issubclass(StructuralError, ValueError)
    assert issubclass(StructuralError, KinTreeError)
    assert issubclass(DimensionMismatchError, KinTreeError)
    assert issubclass(NumericError, ArithmeticError)


def test_invalid_descriptions():
    with pytest.raises(ValueError):
        JointDescription(type="helical")
    with pytest.raises(ValueError):
        JointDescription(type="revolute", axis=(0.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        JointDescription(xyz=(0.0, 1.0))
    with pytest.raises(ValueError):
        BodyDescription(mass=-1.0)
    with pytest.raises(ValueError):
        BodyDescription(mass=1.0, inertia=(1.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        NodeDescription.from_dict({"name": "a", "joint_type": "fixed"})
    with pytest.raises(ValueError):
        KinDynComputations(42)


@pytest.fixture
def no_traversal(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("the tree was traversed")

    for module in (kinematics, inverse_dynamics, forward_dynamics, mass_matrix):
        if hasattr(module, "run_forward"):
            monkeypatch.setattr(module, "run_forward", fail)
        monkeypatch.setattr(module, "run_backward", fail, raising=False)


@pytest.fixture(scope="module")
def kindyn(branched):
    return KinDynComputations(branched)


def test_dimension_mismatch_before_traversal(kindyn, no_traversal):
    n = kindyn.NDoF
    ok = np.zeros(n)
    short = np.zeros(n - 1)

    with pytest.raises(DimensionMismatchError) as err:
        kindyn.rnea(ok, short, ok)
    assert err.value.name == "joint_velocities"
    assert err.value.expected == (n,)
    assert err.value.got == (n - 1,)

    with pytest.raises(DimensionMismatchError):
        kindyn.rnea(ok, ok, short)
    with pytest.raises(DimensionMismatchError):
        kindyn.aba(ok, short, ok)
    with pytest.raises(DimensionMismatchError):
        kindyn.aba(ok, ok, np.zeros(n + 1))
    with pytest.raises(DimensionMismatchError):
        kindyn.forward_kinematics(short)
    with pytest.raises(DimensionMismatchError):
        kindyn.jacobians(np.zeros((n, 1)))
    with pytest.raises(DimensionMismatchError):
        kindyn.mass_matrix(short)
    with pytest.raises(DimensionMismatchError):
        kindyn.gravity_term(ok, base_transform=np.eye(3))
    with pytest.raises(DimensionMismatchError):
        kindyn.rnea(ok, ok, ok, external_forces={"torso": np.zeros(3)})


def test_unknown_external_force_target(kindyn):
    ok = np.zeros(kindyn.NDoF)
    with pytest.raises(ValueError, match="r_hand"):
        kindyn.rnea(ok, ok, ok, external_forces={"r_hand": np.zeros(6)})
    with pytest.raises(ValueError):
        kindyn.rnea(ok, ok, ok, external_forces={12: np.zeros(6)})


def test_invalid_settings(branched):
    with pytest.raises(DimensionMismatchError):
        KinDynComputations(branched, gravity=np.zeros(2))
    with pytest.raises(ValueError):
        KinDynComputations(branched, tolerance=-1.0)


def test_massless_leaf_is_singular(caplog):
    kindyn = KinDynComputations(
        [
            NodeDescription(name="base", body=body(1.0)),
            NodeDescription(
                name="ghost",
                parent=0,
                joint=JointDescription(type="revolute", axis=(0.0, 0.0, 1.0)),
            ),
        ]
    )
    with caplog.at_level(logging.DEBUG), pytest.raises(NumericError) as err:
        kindyn.aba(np.zeros(1), np.zeros(1), np.zeros(1))
    assert err.value.node == 1
    assert err.value.name == "ghost"
    assert err.value.rcond == 0.0
    assert "ghost" in caplog.text
    # the other algorithms do not invert anything
    assert kindyn.rnea(np.zeros(1), np.zeros(1), np.zeros(1)) == pytest.approx(np.zeros(1))


def test_massless_body_on_coaxial_joints_is_singular():
    axis = (1.0, 1.0, 1.0)
    kindyn = KinDynComputations(
        [
            NodeDescription(name="base", body=body(1.0)),
            NodeDescription(
                name="mid",
                parent=0,
                joint=JointDescription(type="revolute", axis=axis, rpy=(0.3, 0.1, 0.7)),
            ),
            NodeDescription(
                name="tip",
                parent=1,
                joint=JointDescription(type="revolute", axis=axis),
                body=body(1.0, com=(0.2, 0.1, 0.0), inertia=(0.02, 0.0, 0.0, 0.03, 0.0, 0.025)),
            ),
        ]
    )
    q = np.array([0.4, -0.9])
    zero = np.zeros(2)
    # both columns of M are equal, D of mid is zero up to rounding
    eigenvalues = np.linalg.eigvalsh(kindyn.mass_matrix(q))
    assert eigenvalues[0] == pytest.approx(0.0, abs=1e-12)
    assert eigenvalues[1] > 1e-3
    with pytest.raises(NumericError) as err:
        kindyn.aba(q, zero, zero)
    assert err.value.node == 1
    assert err.value.name == "mid"
    assert err.value.rcond < 1e-12


def test_gimbal_lock_is_singular():
    kindyn = KinDynComputations(
        [
            NodeDescription(
                name="ball",
                joint=JointDescription(type="spherical"),
                body=body(1.0, inertia=(0.1, 0.0, 0.0, 0.2, 0.0, 0.3)),
            )
        ]
    )
    zero = np.zeros(3)
    assert kindyn.aba(np.array([0.0, 0.3, 0.0]), zero, zero) == pytest.approx(zero)
    with pytest.raises(NumericError) as err:
        kindyn.aba(np.array([0.0, np.pi / 2, 0.0]), zero, zero)
    assert err.value.node == 0


def test_tolerance_is_configurable():
    descriptions = [
        NodeDescription(name="base", body=body(1.0)),
        NodeDescription(
            name="light",
            parent=0,
            joint=JointDescription(type="revolute", axis=(0.0, 0.0, 1.0)),
            body=body(1.0, inertia=(1e-9, 0.0, 0.0, 1e-9, 0.0, 1e-9)),
        ),
    ]
    zero = np.zeros(1)
    # a small inertia is well conditioned when no heavier body hangs below it
    assert KinDynComputations(descriptions).aba(zero, zero, zero) == pytest.approx(zero)
    with pytest.raises(NumericError):
        KinDynComputations(descriptions, tolerance=2.0).aba(zero, zero, zero)
