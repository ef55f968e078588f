import dataclasses
import logging
import numbers
from collections import Counter
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from prettytable import PrettyTable

from kintree.core.errors import StructuralError
from kintree.core.spatial_math import SpatialMath
from kintree.model.abc_factories import Joint, Link, ModelFactory
from kintree.model.description import NodeDescription
from kintree.model.std_factories.std_model import DescriptionModelFactory


@dataclasses.dataclass(frozen=True)
class Node:
    """The node class: a link and the joint connecting it to its parent"""

    index: int
    name: str
    link: Link
    joint: Joint
    parent: Optional[int]
    children: Tuple[int, ...]
    dof_offset: int
    depth: int

    @property
    def dof(self) -> int:
        return self.joint.dof

    @property
    def dof_slice(self) -> slice:
        return slice(self.dof_offset, self.dof_offset + self.dof)

    def is_root(self) -> bool:
        return self.parent is None

    def is_leaf(self) -> bool:
        return len(self.children) == 0


@dataclasses.dataclass(frozen=True)
class KinematicTree(Iterable):
    """The kinematic tree. Nodes are stored by index, the topology is immutable.

    Build it with `KinematicTree.build(factory)` or `build_tree(descriptions, math)`.
    """

    math: SpatialMath
    name: str
    nodes: Tuple[Node, ...]
    root: int
    order: Tuple[int, ...]
    NDoF: int
    max_depth: int
    _names: Dict[str, int] = dataclasses.field(repr=False, compare=False)

    @staticmethod
    def build(factory: ModelFactory) -> "KinematicTree":
        """generates the tree starting from the links-joints factory

        Args:
            factory (ModelFactory): the factory that generates the links and the joints

        Returns:
            KinematicTree: the tree
        """
        return KinematicTree._assemble(
            math=factory.math,
            name=factory.name,
            links=factory.get_links(),
            joints=factory.get_joints(),
            parents=factory.get_parents(),
        )

    @staticmethod
    def _assemble(
        math: SpatialMath,
        name: str,
        links: List[Link],
        joints: List[Joint],
        parents: List[Optional[int]],
    ) -> "KinematicTree":
        n = len(links)
        if n == 0:
            raise StructuralError("The tree has no nodes")
        if len(joints) != n or len(parents) != n:
            raise StructuralError(
                f"Got {n} links, {len(joints)} joints and {len(parents)} parents"
            )

        counts = Counter(link.name for link in links)
        clashes = sorted(name for name, count in counts.items() if count > 1)
        if clashes:
            raise ValueError(f"Node names must be unique, found duplicates {clashes}")
        _check_parents(links, parents)
        _check_acyclic(links, parents)
        roots = [i for i, p in enumerate(parents) if p is None]
        if len(roots) != 1:
            raise StructuralError(
                f"The tree must have exactly one root, found {[links[i].name for i in roots]}"
            )
        root = roots[0]

        children: List[List[int]] = [[] for _ in range(n)]
        for i, p in enumerate(parents):
            if p is not None:
                children[p].append(i)

        # depth-first pre-order, siblings by ascending index
        order = []
        depth = [0] * n
        stack = [root]
        while stack:
            i = stack.pop()
            order.append(i)
            for c in reversed(children[i]):
                depth[c] = depth[i] + 1
                stack.append(c)

        offsets = []
        NDoF = 0
        for joint in joints:
            offsets.append(NDoF)
            NDoF += joint.dof

        nodes = tuple(
            Node(
                index=i,
                name=links[i].name,
                link=links[i],
                joint=joints[i],
                parent=parents[i],
                children=tuple(children[i]),
                dof_offset=offsets[i],
                depth=depth[i],
            )
            for i in range(n)
        )
        tree = KinematicTree(
            math=math,
            name=name,
            nodes=nodes,
            root=root,
            order=tuple(order),
            NDoF=NDoF,
            max_depth=max(depth),
            _names={node.name: node.index for node in nodes},
        )
        if logging.getLogger().isEnabledFor(logging.DEBUG):
            logging.debug(tree.table())
        return tree

    def topological_order(self) -> Tuple[int, ...]:
        """
        Returns:
            Tuple[int, ...]: node indices, parents before children and siblings by ascending index
        """
        return self.order

    def total_dof_count(self) -> int:
        return self.NDoF

    def dof_offset_of(self, idx: int) -> int:
        return self.nodes[idx].dof_offset

    def dof_slice_of(self, idx: int) -> slice:
        return self.nodes[idx].dof_slice

    def get_idx_from_name(self, name: str) -> int:
        """
        Args:
            name (str): node name

        Returns:
            int: the index of the node
        """
        if name not in self._names:
            raise ValueError(f"{name} is not in the tree {self.name}")
        return self._names[name]

    def get_name_from_idx(self, idx: int) -> str:
        return self.nodes[idx].name

    def get_node_from_name(self, name: str) -> Node:
        return self.nodes[self.get_idx_from_name(name)]

    def resolve(self, node: Union[int, str]) -> int:
        """
        Args:
            node (Union[int, str]): node index or name

        Returns:
            int: the node index
        """
        if isinstance(node, str):
            return self.get_idx_from_name(node)
        if not 0 <= node < len(self.nodes):
            raise ValueError(f"{node} is not a valid node index")
        return int(node)

    def path_to(self, node: Union[int, str]) -> List[int]:
        """
        Args:
            node (Union[int, str]): the target node

        Returns:
            List[int]: the node indices from the root to the target, both included
        """
        idx = self.resolve(node)
        path = []
        while idx is not None:
            path.append(idx)
            idx = self.nodes[idx].parent
        return path[::-1]

    def get_total_mass(self) -> float:
        """total mass of the tree

        Returns:
            float: the total mass
        """
        return sum(node.link.inertial.mass for node in self.nodes)

    def add_nodes(
        self, descriptions: Iterable[Union[NodeDescription, Dict[str, Any]]]
    ) -> "KinematicTree":
        """returns a new tree with the described nodes appended. The current tree is unchanged.

        Args:
            descriptions (Iterable[Union[NodeDescription, Dict[str, Any]]]): the new nodes,
                their parents index the nodes of the resulting tree

        Returns:
            KinematicTree: the new tree
        """
        factory = DescriptionModelFactory(descriptions, self.math, name=self.name)
        return KinematicTree._assemble(
            math=self.math,
            name=self.name,
            links=[node.link for node in self.nodes] + factory.get_links(),
            joints=[node.joint for node in self.nodes] + factory.get_joints(),
            parents=[node.parent for node in self.nodes] + factory.get_parents(),
        )

    def table(self) -> PrettyTable:
        table = PrettyTable(["Idx", "Name", "Joint", "Type", "Parent", "DoF offset"])
        table.title = f"Tree {self.name}"
        for i in self.order:
            node = self.nodes[i]
            parent = "-" if node.parent is None else self.nodes[node.parent].name
            table.add_row(
                [
                    i,
                    node.name,
                    node.joint.name,
                    node.joint.type.value,
                    parent,
                    node.dof_offset,
                ]
            )
        return table

    def print_table(self):
        """prints the tree layout"""
        print(self.table())

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, idx: int) -> Node:
        return self.nodes[idx]

    def __iter__(self) -> Iterator[Node]:
        """This method allows to iterate on the tree in topological order

        Yields:
            Iterator[Node]: the nodes
        """
        yield from [self.nodes[i] for i in self.order]

    def __reversed__(self) -> Iterator[Node]:
        """
        Yields:
            Iterator[Node]: the nodes in reverse topological order
        """
        yield from [self.nodes[i] for i in reversed(self.order)]


def _check_parents(links: List[Link], parents: List[Optional[int]]):
    n = len(parents)
    for i, p in enumerate(parents):
        if p is None:
            continue
        if isinstance(p, bool) or not isinstance(p, numbers.Integral) or not 0 <= p < n:
            raise StructuralError(
                f"Node {i} ({links[i].name}) has an invalid parent index {p!r}"
            )
        if p == i:
            raise StructuralError(f"Node {i} ({links[i].name}) is its own parent")


def _check_acyclic(links: List[Link], parents: List[Optional[int]]):
    # 0: unvisited, 1: on the current parent chain, 2: reaches a root
    state = [0] * len(parents)
    for start in range(len(parents)):
        chain = []
        i = start
        while i is not None and state[i] == 0:
            state[i] = 1
            chain.append(i)
            i = parents[i]
        if i is not None and state[i] == 1:
            cycle = chain[chain.index(i) :]
            raise StructuralError(
                f"The nodes {[links[j].name for j in cycle]} form a cycle"
            )
        for j in chain:
            state[j] = 2


def build_tree(
    descriptions: Iterable[Union[NodeDescription, Dict[str, Any]]],
    math: SpatialMath,
    name: str = "model",
) -> KinematicTree:
    """builds the tree from node descriptions

    Args:
        descriptions (Iterable[Union[NodeDescription, Dict[str, Any]]]): the nodes
        math (SpatialMath): the backend math
        name (str, optional): the model name

    Returns:
        KinematicTree: the tree
    """
    return KinematicTree.build(DescriptionModelFactory(descriptions, math, name=name))
