# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

from .computations import KinDynComputations
