from .abc_factories import Inertia, Inertial, Joint, Link, ModelFactory, Pose
from .description import BodyDescription, JointDescription, NodeDescription
from .factory import build_model_factory
from .kindyn_mixin import KinDynFactoryMixin
from .std_factories.std_joint import StdJoint
from .std_factories.std_link import StdLink
from .std_factories.std_model import DescriptionModelFactory
from .tree import KinematicTree, Node, build_tree
