# Copyright (C) Istituto Italiano di Tecnologia (IIT). All rights reserved.

import abc
from typing import Callable, Dict, Generic, Iterator, Optional, Sequence, Tuple, TypeVar

from kintree.model.tree import KinematicTree, Node

R = TypeVar("R")


class ForwardVisitor(abc.ABC, Generic[R]):
    """A visitor run from the root to the leaves"""

    @abc.abstractmethod
    def visit(self, node: Node, parent_result: Optional[R]) -> R:
        """
        Args:
            node (Node): the visited node
            parent_result (Optional[R]): the result of the parent, None for the root

        Returns:
            R: the result of the node
        """
        pass


class BackwardVisitor(abc.ABC, Generic[R]):
    """A visitor run from the leaves to the root"""

    @abc.abstractmethod
    def combine(self, node: Node, child_results: Sequence[R]) -> R:
        """
        Args:
            node (Node): the visited node
            child_results (Sequence[R]): the results of the children, by ascending index.
                                         Empty for a leaf

        Returns:
            R: the result of the node
        """
        pass


def run_forward(tree: KinematicTree, visitor: ForwardVisitor[R]) -> Dict[int, R]:
    """Visits every node once in topological order

    Args:
        tree (KinematicTree): the tree
        visitor (ForwardVisitor[R]): the visitor

    Returns:
        Dict[int, R]: the result of each node, by node index
    """
    results: Dict[int, R] = {}
    for idx in tree.order:
        node = tree.nodes[idx]
        parent_result = None if node.parent is None else results[node.parent]
        results[idx] = visitor.visit(node, parent_result)
    return results


def run_backward(tree: KinematicTree, visitor: BackwardVisitor[R]) -> Dict[int, R]:
    """Visits every node once in reverse topological order

    Args:
        tree (KinematicTree): the tree
        visitor (BackwardVisitor[R]): the visitor

    Returns:
        Dict[int, R]: the result of each node, by node index
    """
    results: Dict[int, R] = {}
    for idx in reversed(tree.order):
        node = tree.nodes[idx]
        results[idx] = visitor.combine(node, [results[c] for c in node.children])
    return results


class PathAccumulator(ForwardVisitor[R]):
    """Accumulates a per-node value along the path from the root to each node

    Args:
        neutral (R): the neutral element of `accumulate`
        local (Callable[[Node], R]): the value contributed by a node
        accumulate (Callable[[R, R], R]): combines the parent accumulation with the node value
    """

    def __init__(
        self,
        neutral: R,
        local: Callable[[Node], R],
        accumulate: Callable[[R, R], R],
    ):
        self.neutral = neutral
        self.local = local
        self.accumulate = accumulate

    def visit(self, node: Node, parent_result: Optional[R]) -> R:
        acc = self.neutral if parent_result is None else parent_result
        return self.accumulate(acc, self.local(node))


def walk_paths(
    tree: KinematicTree, max_depth: Optional[int] = None
) -> Iterator[Tuple[Node, Tuple[int, ...]]]:
    """Walks the tree depth first, siblings by ascending index

    Args:
        tree (KinematicTree): the tree
        max_depth (Optional[int]): nodes deeper than max_depth (the root has depth 0) are not visited

    Yields:
        Iterator[Tuple[Node, Tuple[int, ...]]]: each node with the indices from the root to it
    """
    stack = [(tree.root, (tree.root,))]
    while stack:
        idx, path = stack.pop()
        node = tree.nodes[idx]
        yield node, path
        if max_depth is not None and node.depth >= max_depth:
            continue
        for c in reversed(node.children):
            stack.append((c, path + (c,)))
