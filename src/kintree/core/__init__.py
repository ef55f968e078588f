# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from .constants import JointType, Representations
from .errors import (
    DimensionMismatchError,
    KinTreeError,
    NumericError,
    StructuralError,
)
from .spatial_math import SpatialMath
