import logging
import math
import random
from typing import Iterable, List, Optional

from StepDown.callgraph.node import CallGraphNode
from StepDown.comparator.base import (
    Comparator,
    LexicalComparator,
    SignatureComparator,
)
from StepDown.comparator.extractors import (
    AccessLevelComparatorExtractor,
    ConstructorComparatorExtractor,
    InitializerInvocationComparatorExtractor,
    SourcePositionComparatorExtractor,
)
from StepDown.comparator.reachability import ReachabilityComparator
from StepDown.invocation.ordering import NodeOrdering
from StepDown.invocation.sorter import DEPTH_FIRST, InvocationSorter
from StepDown.syntax.ast_view import CompilationUnitNode

logger = logging.getLogger(__name__)


# -------------------- Syntax-tree criteria --------------------

def get_access_level_comparator(unit: CompilationUnitNode) -> SignatureComparator:
    return AccessLevelComparatorExtractor().extract(unit)


def get_constructor_comparator(unit: CompilationUnitNode) -> SignatureComparator:
    return ConstructorComparatorExtractor().extract(unit)


def get_initializer_invocation_comparator(unit: CompilationUnitNode) -> SignatureComparator:
    return InitializerInvocationComparatorExtractor().extract(unit)


def get_source_position_comparator(unit: CompilationUnitNode) -> SignatureComparator:
    return SourcePositionComparatorExtractor().extract(unit)


# -------------------- Call-graph criteria --------------------

def get_invocation_comparator(node_ordering: NodeOrdering, nodes: Iterable[CallGraphNode],
                              strategy: str = DEPTH_FIRST) -> SignatureComparator:
    """Ranks nodes by the order an invocation traversal of the working list inserts them."""
    sorted_nodes = InvocationSorter(node_ordering).ordered(nodes, strategy)
    comparator = SignatureComparator()
    for i, node in enumerate(sorted_nodes):
        comparator.put(node.signature, i)
    logger.debug(f"Invocation order: {[str(n.signature) for n in sorted_nodes]}")
    return comparator


def get_fan_out_comparator(nodes: Iterable) -> SignatureComparator:
    comparator = SignatureComparator()
    for node in nodes:
        comparator.put(node.signature, -len(node.callees))
    return comparator


def get_fan_in_comparator(nodes: Iterable) -> SignatureComparator:
    comparator = SignatureComparator()
    for node in nodes:
        comparator.put(node.signature, len(node.callers))
    return comparator


def get_fan_in_fan_out_ratio_comparator(nodes: Iterable) -> SignatureComparator:
    comparator = SignatureComparator()
    for node in nodes:
        callees = len(node.callees)
        ratio = math.inf if callees == 0 else len(node.callers) / callees
        comparator.put(node.signature, ratio)
    return comparator


def get_root_separation_comparator(nodes: Iterable) -> SignatureComparator:
    comparator = SignatureComparator()
    for node in nodes:
        comparator.put(node.signature, -1 if not node.callers else 0)
    return comparator


def get_leaf_separation_comparator(nodes: Iterable) -> SignatureComparator:
    comparator = SignatureComparator()
    for node in nodes:
        comparator.put(node.signature, 1 if not node.callees else 0)
    return comparator


def get_reachability_comparator(nodes: Iterable) -> ReachabilityComparator:
    return ReachabilityComparator(nodes)


def get_random_comparator(nodes: Iterable, seed: Optional[int] = None) -> SignatureComparator:
    """Uniform random ranks; for evaluation runs only."""
    rng = random.Random(seed)
    comparator = SignatureComparator()
    for node in nodes:
        comparator.put(node.signature, rng.randint(-2 ** 31, 2 ** 31 - 1))
    return comparator


# -------------------- Signature criteria --------------------

def get_lexical_comparator() -> Comparator:
    return LexicalComparator()


def describe(nodes: List) -> str:
    return ", ".join(str(n.signature) for n in nodes)
