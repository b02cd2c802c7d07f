import logging
from abc import ABC, abstractmethod
from typing import List, Set

from StepDown.callgraph.node import CallGraphNode
from StepDown.callgraph.signature import Signature

logger = logging.getLogger(__name__)


def reachability_set(node: CallGraphNode) -> Set[Signature]:
    """Signatures reachable from ``node`` over its current callee edges, itself included."""
    reached: Set[Signature] = set()
    stack = [node]
    while stack:
        caller = stack.pop()
        if caller.signature in reached:
            continue
        reached.add(caller.signature)
        for callee in caller.callees:
            if callee.signature not in reached:
                stack.append(callee)
    return reached


class NodeOrdering(ABC):
    """Sequence builder fed by an invocation traversal."""

    def __init__(self):
        self.ordered_nodes: List[CallGraphNode] = []
        self._members: Set[Signature] = set()

    @abstractmethod
    def insert(self, node: CallGraphNode):
        ...

    def contains(self, node: CallGraphNode) -> bool:
        return node.signature in self._members

    def _place(self, index: int, node: CallGraphNode):
        self.ordered_nodes.insert(index, node)
        self._members.add(node.signature)

    def __len__(self) -> int:
        return len(self.ordered_nodes)


class NodeOrderingSimple(NodeOrdering):
    """Append if absent."""

    def insert(self, node: CallGraphNode):
        if self.contains(node):
            return
        self._place(len(self.ordered_nodes), node)


class NodeOrderingInterleaved(NodeOrdering):
    """
    Before/after aware ordering.

    A new node ``v`` goes in front of the first ordered node ``w`` it can
    reach while ``w`` cannot reach it back. Each ordered node scanned
    without a match loses its direct edge from ``v``, so later insertions
    see the pruned graph. Without a match ``v`` is appended.
    """

    def insert(self, node: CallGraphNode):
        if self.contains(node):
            return
        for i, ordered_node in enumerate(self.ordered_nodes):
            reachable = reachability_set(node)
            other_reachable = reachability_set(ordered_node)
            logger.debug(f"Node [{node}] has r-set: {sorted(map(str, reachable))}")
            if ordered_node.signature in reachable and node.signature not in other_reachable:
                self._place(i, node)
                logger.debug(f"Inserting [{node}] before [{ordered_node}].")
                return
            node.remove_callee(ordered_node)
        self._place(len(self.ordered_nodes), node)
        logger.debug(f"Inserting [{node}] at the end of the sequence.")


def get_node_ordering(before_after_relation: bool) -> NodeOrdering:
    if before_after_relation:
        return NodeOrderingInterleaved()
    return NodeOrderingSimple()
