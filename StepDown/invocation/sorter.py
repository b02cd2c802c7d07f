from collections import deque
from typing import Iterable, List

from StepDown.callgraph.node import CallGraphNode
from StepDown.errors import PreferenceError
from StepDown.invocation.ordering import NodeOrdering

DEPTH_FIRST = "depth-first"
BREADTH_FIRST = "breadth-first"
INVOCATION_STRATEGIES = (DEPTH_FIRST, BREADTH_FIRST)


class InvocationSorter:
    """Traverses the call graph from a working list and feeds a NodeOrdering."""

    def __init__(self, node_ordering: NodeOrdering):
        self.node_ordering = node_ordering

    def ordered_depth_first(self, roots: Iterable[CallGraphNode]) -> List[CallGraphNode]:
        for root in roots:
            if self.node_ordering.contains(root):
                continue
            stack = [root]
            while stack:
                node = stack.pop()
                if self.node_ordering.contains(node):
                    continue
                # reversed so the first callee is popped first
                stack.extend(reversed(node.callees))
                self.node_ordering.insert(node)
        return self.node_ordering.ordered_nodes

    def ordered_breadth_first(self, roots: Iterable[CallGraphNode]) -> List[CallGraphNode]:
        for root in roots:
            if self.node_ordering.contains(root):
                continue
            queue = deque([root])
            while queue:
                node = queue.popleft()
                if self.node_ordering.contains(node):
                    continue
                queue.extend(node.callees)
                self.node_ordering.insert(node)
        return self.node_ordering.ordered_nodes

    def ordered(self, roots: Iterable[CallGraphNode], strategy: str = DEPTH_FIRST) -> List[CallGraphNode]:
        if strategy == DEPTH_FIRST:
            return self.ordered_depth_first(roots)
        if strategy == BREADTH_FIRST:
            return self.ordered_breadth_first(roots)
        raise PreferenceError(f"Unknown invocation strategy: {strategy}")
