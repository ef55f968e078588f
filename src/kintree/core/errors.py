# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from typing import Optional


class KinTreeError(Exception):
    """Base class of the errors raised by kintree"""


class StructuralError(KinTreeError, ValueError):
    """The node descriptions do not form a valid tree (bad parent, cycle, roots)"""


class DimensionMismatchError(KinTreeError, ValueError):
    """A state, torque or force vector does not match the tree layout"""

    def __init__(self, name: str, expected: tuple, got: tuple) -> None:
        self.name = name
        self.expected = tuple(expected)
        self.got = tuple(got)
        super().__init__(f"{name} has shape {self.got}, expected {self.expected}")


class NumericError(KinTreeError, ArithmeticError):
    """A matrix required by an algorithm is singular or ill-conditioned"""

    def __init__(
        self, node: int, name: Optional[str] = None, rcond: Optional[float] = None
    ) -> None:
        self.node = node
        self.name = name
        self.rcond = rcond
        label = f"{node}" if name is None else f"{node} ({name})"
        message = f"Singular articulated inertia at node {label}"
        if rcond is not None:
            message += f": reciprocal condition number {rcond:.3e}"
        super().__init__(message)
