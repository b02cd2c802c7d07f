"""
Read-only view of one parsed Java compilation unit.

The view exposes only what method ordering consumes: the top-level type,
its body members with their source spans, method declarations (name,
textual parameter types, modifiers, return type, constructor flag),
initializer blocks and the method invocations found inside them together
with their resolved bindings.
"""
from dataclasses import dataclass, field
from typing import ClassVar, Iterator, List, Optional, Set


# -------------------- Bindings --------------------

@dataclass
class TypeBinding:
    name: str
    key: str
    is_top_level: bool = True
    is_anonymous: bool = False

    @property
    def is_nested(self) -> bool:
        return not self.is_top_level and not self.is_anonymous


@dataclass
class MethodBinding:
    """Statically resolved target of an invocation."""
    name: str
    parameter_types: List[str] = field(default_factory=list)
    declaring_class: Optional[TypeBinding] = None


# -------------------- Nodes --------------------

@dataclass(eq=False)
class ASTNode:
    kind: ClassVar[str] = "node"

    def children(self) -> List["ASTNode"]:
        return []


@dataclass(eq=False)
class MethodInvocationNode(ASTNode):
    kind: ClassVar[str] = "method_invocation"

    name: str = ""
    has_qualifier: bool = False
    binding: Optional[MethodBinding] = None
    arguments: List[ASTNode] = field(default_factory=list)

    def children(self) -> List[ASTNode]:
        return list(self.arguments)


@dataclass(eq=False)
class AnonymousClassNode(ASTNode):
    kind: ClassVar[str] = "anonymous_class"

    binding: Optional[TypeBinding] = None
    members: List[ASTNode] = field(default_factory=list)

    def children(self) -> List[ASTNode]:
        return list(self.members)


@dataclass(eq=False)
class MemberNode(ASTNode):
    """A declaration in a type body; ``start``/``end`` are source offsets."""
    start: int = 0
    end: int = 0
    index: int = 0


@dataclass(eq=False)
class ParameterNode:
    type_text: str
    name: str = ""
    varargs: bool = False


@dataclass(eq=False)
class MethodDeclarationNode(MemberNode):
    kind: ClassVar[str] = "method_declaration"

    name: str = ""
    parameters: List[ParameterNode] = field(default_factory=list)
    modifiers: Set[str] = field(default_factory=set)
    return_type: Optional[str] = None
    is_constructor: bool = False
    body: List[ASTNode] = field(default_factory=list)

    @property
    def parameter_types(self) -> List[str]:
        return [p.type_text for p in self.parameters]

    def children(self) -> List[ASTNode]:
        return list(self.body)


@dataclass(eq=False)
class InitializerNode(MemberNode):
    kind: ClassVar[str] = "initializer"

    is_static: bool = False
    body: List[ASTNode] = field(default_factory=list)

    def children(self) -> List[ASTNode]:
        return list(self.body)


@dataclass(eq=False)
class FieldDeclarationNode(MemberNode):
    kind: ClassVar[str] = "field_declaration"

    type_text: str = ""
    names: List[str] = field(default_factory=list)
    modifiers: Set[str] = field(default_factory=set)
    initializer: List[ASTNode] = field(default_factory=list)

    def children(self) -> List[ASTNode]:
        return list(self.initializer)


@dataclass(eq=False)
class EnumConstantNode(MemberNode):
    kind: ClassVar[str] = "enum_constant"

    name: str = ""
    arguments: List[ASTNode] = field(default_factory=list)
    body: Optional[AnonymousClassNode] = None

    def children(self) -> List[ASTNode]:
        nodes = list(self.arguments)
        if self.body is not None:
            nodes.append(self.body)
        return nodes


@dataclass(eq=False)
class AnnotationMemberNode(MemberNode):
    kind: ClassVar[str] = "annotation_member"

    name: str = ""
    return_type: Optional[str] = None


@dataclass(eq=False)
class TypeDeclarationNode(MemberNode):
    kind: ClassVar[str] = "type_declaration"

    name: str = ""
    type_kind: str = "class"  # class|interface|enum|annotation
    binding: Optional[TypeBinding] = None
    modifiers: Set[str] = field(default_factory=set)
    members: List[MemberNode] = field(default_factory=list)
    body_start: int = 0
    members_start: int = 0
    body_end: int = 0

    def children(self) -> List[ASTNode]:
        return list(self.members)


@dataclass(eq=False)
class CompilationUnitNode(ASTNode):
    kind: ClassVar[str] = "compilation_unit"

    source: str = ""
    package: str = ""
    types: List[TypeDeclarationNode] = field(default_factory=list)

    @property
    def top_level_type(self) -> Optional[TypeDeclarationNode]:
        for t in self.types:
            if t.binding is None or (t.binding.is_top_level and not t.binding.is_anonymous):
                return t
        return None

    def children(self) -> List[ASTNode]:
        return list(self.types)


# -------------------- Walker --------------------

class ASTVisitor:
    """
    Pre-order walker over the view.

    ``visit_<kind>`` hooks return False to skip the children of a node;
    ``end_visit_<kind>`` hooks run once the node is left, whether its
    children were visited or not. Missing hooks visit everything.
    """

    def walk(self, root: ASTNode):
        stack = [(root, False)]
        while stack:
            node, leaving = stack.pop()
            if leaving:
                self._dispatch("end_visit_", node)
                continue
            stack.append((node, True))
            if self._dispatch("visit_", node) is not False:
                for child in reversed(node.children()):
                    stack.append((child, False))

    def _dispatch(self, prefix: str, node: ASTNode):
        hook = getattr(self, prefix + node.kind, None)
        if hook is None:
            return None
        return hook(node)


def iter_nodes(root: ASTNode) -> Iterator[ASTNode]:
    """All nodes below ``root`` in pre-order, ``root`` included."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children()))
