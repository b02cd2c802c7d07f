import logging
from collections import deque
from typing import Dict, Iterable, List, Set, Tuple

import igraph as ig

from StepDown.callgraph.signature import Signature
from StepDown.comparator.base import Comparator

logger = logging.getLogger(__name__)


def build_igraph(nodes: Iterable) -> Tuple[ig.Graph, List[Signature]]:
    """
    Directed igraph of the call edges among ``nodes``.

    Callees outside ``nodes`` are pulled in so reachability is not cut
    short. Returns the graph and the signature of every vertex id.
    """
    vlist: List[Signature] = []
    vidx: Dict[Signature, int] = {}
    pending = deque(nodes)
    edges: List[Tuple[Signature, Signature]] = []
    seen: Set[Signature] = set()

    while pending:
        node = pending.popleft()
        if node.signature in seen:
            continue
        seen.add(node.signature)
        vidx[node.signature] = len(vlist)
        vlist.append(node.signature)
        for callee in node.callees:
            edges.append((node.signature, callee.signature))
            if callee.signature not in seen:
                pending.append(callee)

    g = ig.Graph(n=len(vlist), edges=[(vidx[a], vidx[b]) for a, b in edges], directed=True)
    return g, vlist


class ReachabilityComparator(Comparator):
    """
    ``a`` before ``b`` when ``b`` is reachable from ``a`` but not the other
    way round; mutual or no reachability leaves the pair unordered.
    """

    def __init__(self, nodes: Iterable):
        self.reachability: Dict[Signature, Set[Signature]] = {}
        g, vlist = build_igraph(nodes)
        for vid, signature in enumerate(vlist):
            reached = g.subcomponent(vid, mode="out")
            self.reachability[signature] = {vlist[i] for i in reached}

    def is_reachable(self, source: Signature, target: Signature) -> bool:
        return target in self.reachability.get(source, ())

    def compare(self, signature1: Signature, signature2: Signature) -> int:
        if signature1 not in self.reachability or signature2 not in self.reachability:
            return 0
        forward = self.is_reachable(signature1, signature2)
        backward = self.is_reachable(signature2, signature1)
        if forward and not backward:
            result = -1
        elif backward and not forward:
            result = 1
        else:
            result = 0
        logger.debug(f"ReachabilityOrdering [{signature1}] : [{signature2}] = {result}")
        return result
