import logging
from typing import Any, Dict, Iterator, List, Optional

from StepDown.callgraph.signature import Signature

logger = logging.getLogger(__name__)


class CallGraphNode:
    """
    A method (or synthetic initializer) of the analysed type.

    ``callees`` and ``callers`` keep insertion order and hold every
    neighbour at most once. Cycles, self loops included, are plain object
    references.
    """

    def __init__(self, signature: Signature):
        self.signature = signature
        self.callees: List["CallGraphNode"] = []
        self.callers: List["CallGraphNode"] = []

    def add_callee(self, callee: "CallGraphNode"):
        if any(c is callee for c in self.callees):
            return
        self.callees.append(callee)
        callee.callers.append(self)

    def remove_callee(self, callee: "CallGraphNode") -> bool:
        """Drop the direct edge to ``callee``; the callee keeps its callers list."""
        for i, c in enumerate(self.callees):
            if c is callee:
                del self.callees[i]
                return True
        return False

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, CallGraphNode):
            return NotImplemented
        return (self.signature == other.signature
                and [c.signature for c in self.callees] == [c.signature for c in other.callees])

    def __hash__(self) -> int:
        return hash(self.signature)

    def __repr__(self) -> str:
        return f"CallGraphNode({self.signature})"

    def __str__(self) -> str:
        return str(self.signature)


class CallGraph:
    """Insertion-ordered set of nodes with a signature index."""

    def __init__(self):
        self._nodes: Dict[Signature, CallGraphNode] = {}

    def get_or_create(self, signature: Signature) -> CallGraphNode:
        node = self._nodes.get(signature)
        if node is None:
            node = CallGraphNode(signature)
            self._nodes[signature] = node
            logger.debug(f"Created node with signature [{signature}]")
        return node

    def get(self, signature: Signature) -> Optional[CallGraphNode]:
        return self._nodes.get(signature)

    @property
    def nodes(self) -> List[CallGraphNode]:
        return list(self._nodes.values())

    @property
    def signatures(self) -> List[Signature]:
        return list(self._nodes.keys())

    @property
    def edge_count(self) -> int:
        return sum(len(n.callees) for n in self._nodes.values())

    def __contains__(self, signature: Signature) -> bool:
        return signature in self._nodes

    def __iter__(self) -> Iterator[CallGraphNode]:
        return iter(list(self._nodes.values()))

    def __len__(self) -> int:
        return len(self._nodes)

    def to_dict(self) -> Dict[str, List[str]]:
        return {str(sig): [str(c.signature) for c in node.callees] for sig, node in self._nodes.items()}
