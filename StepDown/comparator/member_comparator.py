import logging
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Set

from StepDown.callgraph.signature import Signature
from StepDown.comparator.base import Comparator
from StepDown.preferences import (
    ANNOTATION_MEMBERS,
    CONSTRUCTORS,
    DEFAULT_MEMBER_CATEGORY_ORDER,
    ENUM_CONSTANTS,
    FIELDS,
    INITIALIZERS,
    METHODS,
    STATIC_INITIALIZERS,
    TYPES,
)
from StepDown.syntax.ast_view import (
    AnnotationMemberNode,
    EnumConstantNode,
    FieldDeclarationNode,
    InitializerNode,
    MemberNode,
    MethodDeclarationNode,
    TypeDeclarationNode,
)

logger = logging.getLogger(__name__)

SORT_PRESERVED = (FieldDeclarationNode, EnumConstantNode, InitializerNode, TypeDeclarationNode)


def member_category(member: MemberNode) -> str:
    if isinstance(member, MethodDeclarationNode):
        return CONSTRUCTORS if member.is_constructor else METHODS
    if isinstance(member, FieldDeclarationNode):
        return FIELDS
    if isinstance(member, InitializerNode):
        return STATIC_INITIALIZERS if member.is_static else INITIALIZERS
    if isinstance(member, TypeDeclarationNode):
        return TYPES
    if isinstance(member, EnumConstantNode):
        return ENUM_CONSTANTS
    if isinstance(member, AnnotationMemberNode):
        return ANNOTATION_MEMBERS
    raise TypeError(f"Not a body member: {member!r}")


def preserve_relative_order(member1: MemberNode, member2: MemberNode) -> int:
    return member1.index - member2.index


def describe_member(member: MemberNode) -> str:
    if isinstance(member, MethodDeclarationNode):
        return str(Signature.from_declaration(member))
    name = getattr(member, "name", None) or ", ".join(getattr(member, "names", []))
    return f"{member.kind}:{name or member.index}"


class MemberComparator:
    """
    Final ordering over the members of a type body.

    Fields, enum constants, initializers and member types keep their
    relative order among each other. Otherwise members are ordered by
    category rank, and methods of the same category with known signatures
    by the method comparator. Everything left keeps its source order.
    """

    def __init__(self, method_comparator: Comparator, known_signatures: Iterable[Signature],
                 category_order: Optional[Dict[str, int]] = None):
        self.method_comparator = method_comparator
        self.known_signatures: Set[Signature] = set(known_signatures)
        self.category_order = dict(DEFAULT_MEMBER_CATEGORY_ORDER)
        self.category_order.update(category_order or {})

    def category(self, member: MemberNode) -> int:
        return self.category_order[member_category(member)]

    def compare(self, member1: MemberNode, member2: MemberNode) -> int:
        if isinstance(member1, SORT_PRESERVED) and isinstance(member2, SORT_PRESERVED):
            return preserve_relative_order(member1, member2)

        category1 = self.category(member1)
        category2 = self.category(member2)
        if category1 != category2:
            return category1 - category2

        if isinstance(member1, MethodDeclarationNode) and isinstance(member2, MethodDeclarationNode):
            signature1 = Signature.from_declaration(member1)
            signature2 = Signature.from_declaration(member2)
            if signature1 in self.known_signatures and signature2 in self.known_signatures:
                result = self.method_comparator.compare(signature1, signature2)
                logger.debug(f"Comparing methods [{signature1}] : [{signature2}] = {result}")
                if result != 0:
                    return result
                if signature1 != signature2:
                    logger.warning(f"No absolute compare value between [{signature1}] and [{signature2}]")
            else:
                logger.warning(f"A method signature was not known: {signature1} known="
                               f"{signature1 in self.known_signatures}, {signature2} known="
                               f"{signature2 in self.known_signatures}")
        return preserve_relative_order(member1, member2)

    def __call__(self, member1: MemberNode, member2: MemberNode) -> int:
        return self.compare(member1, member2)

    def key(self):
        return cmp_to_key(self.compare)

    def sort(self, members: Iterable[MemberNode]) -> List[MemberNode]:
        return sorted(members, key=self.key())

    def ordered_signatures(self) -> List[Signature]:
        """Known method signatures in final order, synthetic callers left out."""
        signatures = [s for s in self.known_signatures if not s.is_synthetic]
        signatures.sort()
        return sorted(signatures, key=self.method_comparator.key())


class MethodOnlyComparator(MemberComparator):
    """
    Reorders non-constructor methods with known signatures by the given
    comparator and leaves every other member where it is relative to the
    rest.
    """

    def compare(self, member1: MemberNode, member2: MemberNode) -> int:
        if self._is_non_constructor_method(member1) and self._is_non_constructor_method(member2):
            signature1 = Signature.from_declaration(member1)
            signature2 = Signature.from_declaration(member2)
            if signature1 in self.known_signatures and signature2 in self.known_signatures:
                return self.method_comparator.compare(signature1, signature2)
        return preserve_relative_order(member1, member2)

    def sort(self, members: Iterable[MemberNode]) -> List[MemberNode]:
        # methods are permuted among their own slots; other members stay put
        members = list(members)
        slots = [i for i, m in enumerate(members) if self._is_non_constructor_method(m)]
        methods = sorted((members[i] for i in slots), key=self.key())
        for slot, method in zip(slots, methods):
            members[slot] = method
        return members

    @staticmethod
    def _is_non_constructor_method(member: MemberNode) -> bool:
        return isinstance(member, MethodDeclarationNode) and not member.is_constructor
