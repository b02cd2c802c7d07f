from typing import Any, List

from StepDown.callgraph.node import CallGraphNode
from StepDown.errors import UnsupportedOperationError


def _append_unique(target: List[CallGraphNode], nodes: List[CallGraphNode]):
    for node in nodes:
        if not any(n is node for n in target):
            target.append(node)


class ClusterNode:
    """
    Super-node over a group of call graph nodes.

    Shares the ``signature``/``callers``/``callees`` interface of
    CallGraphNode. The signature is that of the first constituent at
    construction (the main signature) and does not change when the
    constituents are reordered. Edges cannot be added from outside.
    """

    def __init__(self, nodes: List[CallGraphNode]):
        if not nodes:
            raise ValueError("A cluster should comprise at least 1 node.")
        self.signature = nodes[0].signature
        self.clustered_nodes: List[CallGraphNode] = []
        self.callers: List[CallGraphNode] = []
        self.callees: List[CallGraphNode] = []
        self.set_clustered_nodes(nodes)

    def set_clustered_nodes(self, nodes: List[CallGraphNode]):
        self.clustered_nodes = list(nodes)
        for node in nodes:
            _append_unique(self.callers, node.callers)
            _append_unique(self.callees, node.callees)

    @property
    def signatures(self):
        return [n.signature for n in self.clustered_nodes]

    def add_callee(self, callee: Any):
        raise UnsupportedOperationError("Edges of a cluster node are derived from its constituents")

    def remove_callee(self, callee: CallGraphNode) -> bool:
        for i, c in enumerate(self.callees):
            if c is callee:
                del self.callees[i]
                return True
        return False

    def __len__(self) -> int:
        return len(self.clustered_nodes)

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, ClusterNode):
            return NotImplemented
        return self.signature == other.signature and self.signatures == other.signatures

    def __hash__(self) -> int:
        return hash(self.signature)

    def __repr__(self) -> str:
        return f"ClusterNode({self.signature}: {', '.join(map(str, self.signatures))})"

    def to_dict(self):
        return {"main": str(self.signature), "members": [str(s) for s in self.signatures]}
