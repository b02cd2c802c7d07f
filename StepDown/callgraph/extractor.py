import logging
from typing import Iterable, Optional, Set

from StepDown.callgraph.node import CallGraph, CallGraphNode
from StepDown.callgraph.signature import Signature
from StepDown.syntax.ast_view import (
    ASTVisitor,
    AnonymousClassNode,
    CompilationUnitNode,
    FieldDeclarationNode,
    InitializerNode,
    MethodDeclarationNode,
    MethodInvocationNode,
    TypeBinding,
    TypeDeclarationNode,
)

logger = logging.getLogger(__name__)


class TopLevelVisitor(ASTVisitor):
    """
    Walker restricted to the first top-level type of a compilation unit.

    Nested, local and anonymous type bodies are not entered, and neither
    are further top-level types once the first one has been captured.
    """

    def __init__(self):
        self.root: Optional[CompilationUnitNode] = None
        self.top_level_type: Optional[TypeBinding] = None

    def visit_compilation_unit(self, node: CompilationUnitNode):
        self.root = node
        return True

    def visit_type_declaration(self, node: TypeDeclarationNode):
        binding = node.binding
        if binding is None:
            return False
        if self.top_level_type is None and binding.is_top_level and not binding.is_anonymous:
            self.top_level_type = binding
            logger.debug(f"TopLevelType := {binding.name}")
            return True
        if self.top_level_type is not None and binding.key == self.top_level_type.key:
            return True
        logger.debug(f"Skipping type {binding.name}")
        return False

    def visit_anonymous_class(self, node: AnonymousClassNode):
        return False

    def is_in_top_level_type(self, binding: Optional[TypeBinding]) -> bool:
        return (binding is not None and self.top_level_type is not None
                and binding.key == self.top_level_type.key)


class CallGraphExtractor(TopLevelVisitor):
    """
    Builds the call graph of local instance invocations.

    Every method declaration and initializer block of the top-level type
    becomes a node; an unqualified invocation bound to a method of the
    same type adds an edge from the declaration being visited. Calls made
    from a field initializer are attributed to a synthetic caller of that
    field, created on the first such call.
    """

    def __init__(self):
        super().__init__()
        self.graph = CallGraph()
        self.current_caller: Optional[CallGraphNode] = None
        self._initializer_count = 0
        self._field_count = 0
        self._current_field: Optional[int] = None

    def extract(self, unit: CompilationUnitNode) -> CallGraph:
        self.walk(unit)
        logger.debug(f"{type(self).__name__} returns {len(self.graph)} nodes, {self.graph.edge_count} edges")
        return self.graph

    # -------------------- Declarations --------------------

    def visit_method_declaration(self, node: MethodDeclarationNode):
        signature = Signature.from_declaration(node)
        logger.debug(f"methodDeclaration: {signature}")
        self.current_caller = self.graph.get_or_create(signature)
        return True

    def end_visit_method_declaration(self, node: MethodDeclarationNode):
        self.current_caller = None

    def visit_initializer(self, node: InitializerNode):
        signature = Signature.for_initializer(self._initializer_count)
        self._initializer_count += 1
        self.current_caller = self.graph.get_or_create(signature)
        logger.debug(f"{signature} visited")
        return True

    def end_visit_initializer(self, node: InitializerNode):
        self.current_caller = None

    def visit_field_declaration(self, node: FieldDeclarationNode):
        self._current_field = self._field_count
        self._field_count += 1
        return True

    def end_visit_field_declaration(self, node: FieldDeclarationNode):
        self._current_field = None
        self.current_caller = None

    # -------------------- Invocations --------------------

    def visit_method_invocation(self, node: MethodInvocationNode):
        if not self.is_instance_invocation(node):
            return True
        signature = Signature.from_invocation(node)
        callee = self.graph.get_or_create(signature)
        caller = self._caller()
        if caller is None:
            logger.debug(f"Invocation of [{signature}] outside any declaration ignored")
            return True
        logger.debug(f"Caller [{caller.signature}] invokes [{signature}]")
        caller.add_callee(callee)
        return True

    def is_instance_invocation(self, node: MethodInvocationNode) -> bool:
        binding = node.binding
        if node.has_qualifier or binding is None:
            return False
        if not self.is_in_top_level_type(binding.declaring_class):
            logger.debug(f"{node.name} not declared in the top-level type")
            return False
        return True

    def _caller(self) -> Optional[CallGraphNode]:
        if self.current_caller is None and self._current_field is not None:
            self.current_caller = self.graph.get_or_create(
                Signature.for_field_initializer(self._current_field))
        return self.current_caller


class SubCallGraphExtractor(CallGraphExtractor):
    """
    Call graph restricted to a set of signatures.

    Only declarations and invocations whose signature is in the filter are
    admitted; initializer blocks and field initializers are left out.
    """

    def __init__(self, filter_signatures: Iterable[Signature]):
        super().__init__()
        self.filter_signatures: Set[Signature] = set(filter_signatures)

    def visit_method_declaration(self, node: MethodDeclarationNode):
        if Signature.from_declaration(node) in self.filter_signatures:
            return super().visit_method_declaration(node)
        return False

    def visit_initializer(self, node: InitializerNode):
        return False

    def visit_field_declaration(self, node: FieldDeclarationNode):
        return False

    def visit_method_invocation(self, node: MethodInvocationNode):
        if Signature.from_invocation(node) in self.filter_signatures:
            return super().visit_method_invocation(node)
        return True


def extract_call_graph(unit: CompilationUnitNode) -> CallGraph:
    return CallGraphExtractor().extract(unit)


def extract_sub_call_graph(unit: CompilationUnitNode, nodes: Iterable) -> CallGraph:
    """Sub-graph over the signatures of ``nodes`` (call graph or cluster nodes)."""
    return SubCallGraphExtractor(n.signature for n in nodes).extract(unit)
