# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from kintree.core import (
    DimensionMismatchError,
    JointType,
    KinTreeError,
    NumericError,
    Representations,
    StructuralError,
)
from kintree.core.traversal import (
    BackwardVisitor,
    ForwardVisitor,
    PathAccumulator,
    run_backward,
    run_forward,
    walk_paths,
)
from kintree.model import (
    BodyDescription,
    JointDescription,
    KinematicTree,
    NodeDescription,
    build_tree,
)
from kintree.numpy import KinDynComputations

__version__ = "0.1.0"
