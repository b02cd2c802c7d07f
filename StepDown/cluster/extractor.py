import logging
from typing import Dict, Iterable, List, Set

from StepDown.callgraph.extractor import TopLevelVisitor
from StepDown.callgraph.node import CallGraphNode
from StepDown.callgraph.signature import Signature
from StepDown.cluster.cluster_node import ClusterNode
from StepDown.syntax.ast_view import (
    CompilationUnitNode,
    FieldDeclarationNode,
    InitializerNode,
    MethodDeclarationNode,
)

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 3


def has_setter_pattern(method: MethodDeclarationNode) -> bool:
    return method.name.startswith("set") and len(method.parameters) == 1


def has_getter_pattern(method: MethodDeclarationNode) -> bool:
    return method.name.startswith("get") and len(method.parameters) == 0


def matching_getter_and_setter(getter: MethodDeclarationNode, setter: MethodDeclarationNode) -> bool:
    """Same property suffix, and the getter returns the setter's parameter type."""
    if len(getter.name) <= PREFIX_LENGTH or len(setter.name) <= PREFIX_LENGTH:
        return False
    if getter.name[PREFIX_LENGTH:] != setter.name[PREFIX_LENGTH:]:
        return False
    if not setter.parameters:
        return False
    return setter.parameters[0].type_text == getter.return_type


class ClusterGraphExtractor(TopLevelVisitor):
    """
    Groups the methods of the call graph into clusters.

    Walking the declarations in source order, each method not yet
    clustered seeds a cluster: a setter pulls in its getters and a getter
    its setters (with getter/setter clustering), any other method pulls in
    its overloads (with overload clustering) or stays alone.
    """

    def __init__(self, nodes: Iterable[CallGraphNode], cluster_getters_setters: bool,
                 cluster_overloaded: bool):
        super().__init__()
        self.cluster_getters_setters = cluster_getters_setters
        self.cluster_overloaded = cluster_overloaded
        self.signature2node: Dict[Signature, CallGraphNode] = {n.signature: n for n in nodes}
        self.methods: List[MethodDeclarationNode] = []
        self._clustered: Set[Signature] = set()
        self.clustered_graph: List[ClusterNode] = []

    def visit_method_declaration(self, node: MethodDeclarationNode):
        if Signature.from_declaration(node) in self.signature2node:
            self.methods.append(node)
        return False

    def visit_field_declaration(self, node: FieldDeclarationNode):
        return False

    def visit_initializer(self, node: InitializerNode):
        return False

    def extract(self, unit: CompilationUnitNode) -> List[ClusterNode]:
        self.walk(unit)
        for method in self.methods:
            if not self._is_not_clustered_yet(method):
                continue
            if self.cluster_getters_setters and has_setter_pattern(method):
                self._search_partners(method, has_getter_pattern, setter=method)
            elif self.cluster_getters_setters and has_getter_pattern(method):
                self._search_partners(method, has_setter_pattern, getter=method)
            else:
                self._handle_normal_and_overloaded(method)
        logger.debug(f"Clusters: {self.clustered_graph}")
        return self.clustered_graph

    # -------------------- Cluster seeding --------------------

    def _search_partners(self, seed: MethodDeclarationNode, pattern, setter=None, getter=None):
        clustered_nodes: List[CallGraphNode] = []
        self._add_to_clustered_nodes(seed, clustered_nodes)
        for candidate in self.methods:
            if not self._is_not_clustered_yet(candidate) or not pattern(candidate):
                continue
            pair = (candidate, setter) if setter is not None else (getter, candidate)
            if matching_getter_and_setter(*pair):
                logger.debug(f"Adding [{candidate.name}] to the cluster of [{seed.name}]")
                self._add_to_clustered_nodes(candidate, clustered_nodes)
        self.clustered_graph.append(ClusterNode(clustered_nodes))

    def _handle_normal_and_overloaded(self, seed: MethodDeclarationNode):
        clustered_nodes: List[CallGraphNode] = []
        self._add_to_clustered_nodes(seed, clustered_nodes)
        if self.cluster_overloaded:
            for other in self.methods:
                if self._is_not_clustered_yet(other) and other.name == seed.name:
                    logger.debug(f"clustering overloaded: {seed.name} : {Signature.from_declaration(other)}")
                    self._add_to_clustered_nodes(other, clustered_nodes)
        self.clustered_graph.append(ClusterNode(clustered_nodes))

    def _add_to_clustered_nodes(self, method: MethodDeclarationNode, clustered_nodes: List[CallGraphNode]):
        signature = Signature.from_declaration(method)
        self._clustered.add(signature)
        node = self.signature2node[signature]
        if not any(n is node for n in clustered_nodes):
            clustered_nodes.append(node)

    def _is_not_clustered_yet(self, method: MethodDeclarationNode) -> bool:
        return Signature.from_declaration(method) not in self._clustered
