"""
Orchestration of one compilation unit: call graph, working list,
tie-breaking stack, optional clustering, member comparator and rewrite.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from StepDown.callgraph.extractor import extract_call_graph, extract_sub_call_graph
from StepDown.callgraph.signature import Signature
from StepDown.cluster.cluster_node import ClusterNode
from StepDown.cluster.comparator import ClusterComparator
from StepDown.cluster.extractor import ClusterGraphExtractor
from StepDown.comparator import factory
from StepDown.comparator.base import Comparator, StackableSignatureComparator
from StepDown.comparator.builder import ComparatorBuilder, get_working_list_comparator
from StepDown.comparator.member_comparator import MemberComparator, MethodOnlyComparator
from StepDown.errors import MalformedDeclarationError
from StepDown.preferences import Preferences
from StepDown.rewrite import reorder_members, working_copy
from StepDown.syntax.ast_view import CompilationUnitNode
from StepDown.syntax.java_parser import JavaUnitParser

logger = logging.getLogger(__name__)


def _signature_of(node) -> Signature:
    return node.signature


@dataclass
class SortResult:
    """Outcome of sorting one compilation unit."""
    path: Optional[str]
    source: str
    sorted_source: str
    ordered_signatures: List[Signature] = field(default_factory=list)
    call_graph: Dict[str, List[str]] = field(default_factory=dict)
    clusters: List[ClusterNode] = field(default_factory=list)
    comparator: Optional[MemberComparator] = None
    skipped: Optional[str] = None
    written: bool = False

    @property
    def changed(self) -> bool:
        return self.sorted_source != self.source

    @property
    def method_count(self) -> int:
        return len(self.ordered_signatures)

    @property
    def edge_count(self) -> int:
        return sum(len(callees) for callees in self.call_graph.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "changed": self.changed,
            "written": self.written,
            "skipped": self.skipped,
            "ordering": [str(s) for s in self.ordered_signatures],
            "call_graph": self.call_graph,
            "clusters": [c.to_dict() for c in self.clusters],
        }


class MethodSorter:
    """
    Computes the stepdown ordering of the methods of a compilation unit.

    The comparator stack follows ``preferences``; with clustering enabled
    getter/setter pairs and overload groups stay together and are each
    sorted by the same pipeline on their sub-graph.
    """

    def __init__(self, preferences: Optional[Preferences] = None):
        self.preferences = preferences or Preferences()

    # -------------------- Entry points --------------------

    def sort_file(self, path: str, dry_run: bool = False) -> SortResult:
        with working_copy(path, dry_run) as copy:
            result = self.sort_source(copy.buffer, path)
            copy.buffer = result.sorted_source
        result.written = copy.committed
        return result

    def sort_source(self, source: str, path: Optional[str] = None) -> SortResult:
        """Parse ``source`` and sort it; JavaParseError propagates."""
        try:
            unit = JavaUnitParser(path).parse(source)
        except MalformedDeclarationError as e:
            logger.warning(f"Leaving {path or 'unit'} unchanged: {e}")
            return SortResult(path=path, source=source, sorted_source=source, skipped=str(e))
        return self.sort_unit(unit, path)

    def sort_unit(self, unit: CompilationUnitNode, path: Optional[str] = None) -> SortResult:
        graph = extract_call_graph(unit)
        # snapshot before the interleaved ordering drops edges
        call_graph = graph.to_dict()
        method_comparator, clusters = self.get_method_comparator(graph.nodes, unit)
        comparator = self.get_member_comparator(method_comparator, graph.signatures)
        ordered = comparator.ordered_signatures()
        logger.info(f"Final method ordering for {path or 'unit'}: {', '.join(map(str, ordered))}")

        result = SortResult(path=path, source=unit.source, sorted_source=unit.source,
                            ordered_signatures=ordered, call_graph=call_graph,
                            clusters=clusters, comparator=comparator)
        try:
            result.sorted_source = reorder_members(unit.source, unit, comparator)
        except MalformedDeclarationError as e:
            logger.warning(f"Leaving {path or 'unit'} unchanged: {e}")
            result.skipped = str(e)
        return result

    # -------------------- Comparators --------------------

    def get_method_comparator(self, nodes: List, unit: CompilationUnitNode,
                              clustering: bool = True) -> Tuple[Comparator, List[ClusterNode]]:
        working_list = self.get_working_list(nodes, unit)
        comparator: Comparator = ComparatorBuilder(
            working_list, unit, self.preferences).get_method_ordering_comparator()
        clusters: List[ClusterNode] = []
        if clustering and self.preferences.is_clustering:
            clusters = ClusterGraphExtractor(
                working_list, self.preferences.cluster_getter_setter,
                self.preferences.cluster_overloaded).extract(unit)
            self.sort_subgraphs(clusters, unit)
            comparator = ClusterComparator(comparator, clusters)
        return comparator, clusters

    def get_member_comparator(self, method_comparator: Comparator, known_signatures) -> MemberComparator:
        return MemberComparator(method_comparator, known_signatures, self.preferences.member_category_order)

    def get_working_list(self, nodes: List, unit: CompilationUnitNode) -> List:
        """Start points first: the order invocation traversals visit the roots in."""
        if self.preferences.apply_working_list_heuristics:
            comparator = get_working_list_comparator(nodes, unit)
        else:
            comparator = StackableSignatureComparator(
                (n.signature for n in nodes), factory.get_source_position_comparator(unit))
        working_list = sorted(nodes, key=comparator.key(_signature_of))
        logger.debug(f"Working list: {factory.describe(working_list)}")
        return working_list

    def sort_subgraphs(self, clusters: List[ClusterNode], unit: CompilationUnitNode):
        for cluster in clusters:
            if len(cluster) <= 1:
                continue
            sub_graph = extract_sub_call_graph(unit, cluster.clustered_nodes)
            comparator, _ = self.get_method_comparator(sub_graph.nodes, unit, clustering=False)
            ordered = sorted(sub_graph.nodes, key=comparator.key(_signature_of))
            by_signature = {n.signature: n for n in cluster.clustered_nodes}
            constituents = [by_signature[n.signature] for n in ordered if n.signature in by_signature]
            constituents.extend(n for n in cluster.clustered_nodes
                                if not any(c is n for c in constituents))
            logger.debug(f"Cluster {cluster.signature} sorted: {factory.describe(constituents)}")
            cluster.set_clustered_nodes(constituents)


class RandomMethodSorter(MethodSorter):
    """Random permutation of the methods among their own slots; for evaluation runs."""

    def __init__(self, preferences: Optional[Preferences] = None, seed: Optional[int] = None):
        super().__init__(preferences)
        self.seed = seed

    def get_method_comparator(self, nodes: List, unit: CompilationUnitNode,
                              clustering: bool = True) -> Tuple[Comparator, List[ClusterNode]]:
        comparator = StackableSignatureComparator(
            (n.signature for n in nodes), factory.get_random_comparator(nodes, self.seed))
        return comparator, []

    def get_member_comparator(self, method_comparator: Comparator, known_signatures) -> MemberComparator:
        return MethodOnlyComparator(method_comparator, known_signatures, self.preferences.member_category_order)
