from typing import Any, Dict, Iterable, List, Optional, Union

from kintree.core.spatial_math import SpatialMath
from kintree.model.abc_factories import Joint, Link, ModelFactory
from kintree.model.description import NodeDescription, as_descriptions
from kintree.model.std_factories.std_joint import StdJoint
from kintree.model.std_factories.std_link import StdLink


class DescriptionModelFactory(ModelFactory):
    """This factory generates the tree elements from a sequence of node descriptions

    Args:
        descriptions (Iterable[Union[NodeDescription, Dict[str, Any]]]): the nodes of the tree
        math (SpatialMath): the backend math
        name (str, optional): the model name
    """

    def __init__(
        self,
        descriptions: Iterable[Union[NodeDescription, Dict[str, Any]]],
        math: SpatialMath,
        name: str = "model",
    ):
        self.math = math
        self.name = name
        self.descriptions = as_descriptions(descriptions)

    def build_link(self, description: NodeDescription) -> Link:
        """build the single link
        Returns:
            Link
        """
        return StdLink(name=description.name, body=description.body, math=self.math)

    def build_joint(self, description: NodeDescription) -> Joint:
        """build the single joint

        Returns:
            Joint
        """
        name = description.joint.name or f"{description.name}_joint"
        return StdJoint(name=name, joint=description.joint, math=self.math)

    def get_links(self) -> List[Link]:
        """
        Returns:
            List[Link]: build the list of the links
        """
        return [self.build_link(d) for d in self.descriptions]

    def get_joints(self) -> List[Joint]:
        """
        Returns:
            List[Joint]: build the list of the joints
        """
        return [self.build_joint(d) for d in self.descriptions]

    def get_parents(self) -> List[Optional[int]]:
        """
        Returns:
            List[Optional[int]]: the parent index of each link
        """
        return [d.parent for d in self.descriptions]
