"""One-pass visitors that turn a syntax-tree criterion into a SignatureComparator."""
from StepDown.callgraph.extractor import TopLevelVisitor
from StepDown.callgraph.signature import Signature
from StepDown.comparator.base import SignatureComparator
from StepDown.syntax.ast_view import (
    CompilationUnitNode,
    FieldDeclarationNode,
    InitializerNode,
    MethodDeclarationNode,
)

PUBLIC, PROTECTED, PACKAGE, PRIVATE = 0, 1, 2, 3


def access_level(modifiers) -> int:
    if "public" in modifiers:
        return PUBLIC
    if "protected" in modifiers:
        return PROTECTED
    if "private" in modifiers:
        return PRIVATE
    return PACKAGE


class ComparatorExtractor(TopLevelVisitor):
    unknown_first = False

    def __init__(self):
        super().__init__()
        self.comparator = SignatureComparator(unknown_first=self.unknown_first)

    def extract(self, unit: CompilationUnitNode) -> SignatureComparator:
        self.walk(unit)
        return self.comparator

    def visit_field_declaration(self, node: FieldDeclarationNode):
        return False

    def visit_method_declaration(self, node: MethodDeclarationNode):
        return False

    def visit_initializer(self, node: InitializerNode):
        return False


class SourcePositionComparatorExtractor(ComparatorExtractor):
    unknown_first = True

    def __init__(self):
        super().__init__()
        self.position = 0

    def visit_method_declaration(self, node: MethodDeclarationNode):
        self.comparator.put(Signature.from_declaration(node), self.position)
        self.position += 1
        return False


class AccessLevelComparatorExtractor(ComparatorExtractor):
    unknown_first = True

    def visit_method_declaration(self, node: MethodDeclarationNode):
        self.comparator.put(Signature.from_declaration(node), access_level(node.modifiers))
        return False


class ConstructorComparatorExtractor(ComparatorExtractor):
    """Constructors rank 0; everything else is unranked and sorts after them."""

    def visit_method_declaration(self, node: MethodDeclarationNode):
        if node.is_constructor:
            self.comparator.put(Signature.from_declaration(node), 0)
        return False


class InitializerInvocationComparatorExtractor(ComparatorExtractor):
    def __init__(self):
        super().__init__()
        self.initializer_count = 0

    def visit_initializer(self, node: InitializerNode):
        self.comparator.put(Signature.for_initializer(self.initializer_count), self.initializer_count)
        self.initializer_count += 1
        return False
