"""
javalang front end.

Parses one Java compilation unit into the view of StepDown.syntax.ast_view:
type declarations with their body members and source spans, method
headers, and the method invocations found in every body. javalang has no
binding resolution, so unqualified invocations are bound best-effort to a
method of the innermost enclosing type declaring that name, picking among
overloads by arity and by the argument types that can be inferred locally.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import javalang
import javalang.ast
from javalang.tree import (
    AnnotationDeclaration,
    AnnotationMethod,
    ArrayCreator,
    BasicType,
    BinaryOperation,
    Cast,
    CatchClauseParameter,
    ClassCreator,
    ClassDeclaration,
    ConstructorDeclaration,
    EnumConstantDeclaration,
    EnumDeclaration,
    FieldDeclaration,
    FormalParameter,
    InnerClassCreator,
    InterfaceDeclaration,
    Literal,
    MemberReference,
    MethodDeclaration,
    MethodInvocation,
    ReferenceType,
    TernaryExpression,
    This,
    TryResource,
    TypeDeclaration,
    VariableDeclaration,
)

from StepDown.errors import JavaParseError, MalformedDeclarationError
from StepDown.syntax.ast_view import (
    AnnotationMemberNode,
    AnonymousClassNode,
    ASTNode,
    CompilationUnitNode,
    EnumConstantNode,
    FieldDeclarationNode,
    InitializerNode,
    MemberNode,
    MethodBinding,
    MethodDeclarationNode,
    MethodInvocationNode,
    ParameterNode,
    TypeBinding,
    TypeDeclarationNode,
)
from StepDown.utils import line_starts

logger = logging.getLogger(__name__)

TYPE_KINDS = (
    (AnnotationDeclaration, "annotation"),
    (EnumDeclaration, "enum"),
    (InterfaceDeclaration, "interface"),
    (ClassDeclaration, "class"),
)

PRIMITIVES = {"boolean", "byte", "char", "short", "int", "long", "float", "double"}
BOXED = {
    "boolean": "Boolean", "byte": "Byte", "char": "Character", "short": "Short",
    "int": "Integer", "long": "Long", "float": "Float", "double": "Double",
}
WIDENING = {
    "byte": {"short", "int", "long", "float", "double"},
    "short": {"int", "long", "float", "double"},
    "char": {"int", "long", "float", "double"},
    "int": {"long", "float", "double"},
    "long": {"float", "double"},
    "float": {"double"},
}
BOOLEAN_OPERATORS = {"==", "!=", "<", ">", "<=", ">=", "&&", "||", "instanceof"}

_TYPE_ARGUMENTS = re.compile(r"<[^<>]*>")


@dataclass
class _TypeScope:
    """Methods and fields visible by simple name inside one type body."""
    binding: TypeBinding
    methods: List[MethodDeclarationNode] = field(default_factory=list)
    fields: Dict[str, str] = field(default_factory=dict)

    def methods_named(self, name: str) -> List[MethodDeclarationNode]:
        return [m for m in self.methods if m.name == name and not m.is_constructor]


@dataclass
class _AnonymousBody:
    """An anonymous class body shaped like a type declaration without position."""
    body: List[Any]
    name: str = ""
    modifiers: Any = None
    position: Any = None


# -------------------- Type rendering --------------------

def _dims_count(obj) -> int:
    dim = getattr(obj, "dimensions", 0)
    if isinstance(dim, list):
        return len(dim)
    if isinstance(dim, int):
        return dim
    return 0


def _type_argument_to_str(argument: Any) -> str:
    if argument.type is None:
        return "?"
    rendered = _type_to_str(argument.type)
    if argument.pattern_type in ("extends", "super"):
        return f"? {argument.pattern_type} {rendered}"
    return rendered


def _ref_full_name(t: ReferenceType) -> str:
    parts = []
    while t is not None:
        part = t.name
        if t.arguments:
            part += "<" + ",".join(_type_argument_to_str(a) for a in t.arguments) + ">"
        parts.append(part)
        t = getattr(t, "sub_type", None)
    return ".".join(parts)


def _type_to_str(t: Any, *, varargs: bool = False) -> str:
    """Source-like text of a javalang type; varargs render as ``T...``."""
    if t is None:
        return "void"
    suffix = "..." if varargs else ""
    if isinstance(t, BasicType):
        return t.name + "[]" * _dims_count(t) + suffix
    if isinstance(t, ReferenceType):
        return _ref_full_name(t) + "[]" * _dims_count(t) + suffix
    if isinstance(t, str):
        return t
    name = getattr(t, "name", None) or "?"
    return name + ("[]" * _dims_count(t) if name != "?" else "")


def _simple_type(type_text: str) -> str:
    """``java.util.List<String>[]`` -> ``List[]``."""
    previous = None
    while previous != type_text:
        previous = type_text
        type_text = _TYPE_ARGUMENTS.sub("", type_text)
    dims = type_text.count("[]")
    base = type_text.replace("[]", "").rsplit(".", 1)[-1]
    return base + "[]" * dims


def _literal_type(value: str) -> Optional[str]:
    if value.startswith('"'):
        return "String"
    if value.startswith("'"):
        return "char"
    if value in ("true", "false"):
        return "boolean"
    if value == "null":
        return None
    lower = value.lower()
    if lower.startswith("0x") or lower.startswith("0b"):
        return "long" if lower.endswith("l") else "int"
    if lower.endswith("l"):
        return "long"
    if lower.endswith("f"):
        return "float"
    if lower.endswith("d") or "." in lower or "e" in lower:
        return "double"
    return "int"


def _argument_score(argument_type: Optional[str], parameter_type: str) -> int:
    if argument_type is None:
        return 0
    argument_type = _simple_type(argument_type)
    parameter_type = _simple_type(parameter_type)
    if argument_type == parameter_type:
        return 2
    if (BOXED.get(argument_type) == parameter_type or BOXED.get(parameter_type) == argument_type
            or parameter_type in WIDENING.get(argument_type, ()) or parameter_type == "Object"):
        return 1
    if (argument_type in PRIMITIVES or parameter_type in PRIMITIVES
            or "String" in (argument_type, parameter_type)):
        return -1
    return 0


# -------------------- Tree walking --------------------

def _walk(node: Any):
    if isinstance(node, javalang.ast.Node):
        yield node
        for attr in node.attrs:
            yield from _walk(getattr(node, attr))
    elif isinstance(node, (list, tuple)):
        for child in node:
            yield from _walk(child)


def _collect_local_variable_types(node: Any) -> Dict[str, str]:
    """Declared type of every parameter and local variable below ``node``, first declaration wins."""
    types: Dict[str, str] = {}
    for n in _walk(node):
        if isinstance(n, FormalParameter) and n.name:
            types.setdefault(n.name, _type_to_str(n.type) + ("[]" if n.varargs else ""))
        elif isinstance(n, VariableDeclaration):
            for d in n.declarators or []:
                types.setdefault(d.name, _type_to_str(n.type) + "[]" * _dims_count(d))
        elif isinstance(n, CatchClauseParameter) and n.types:
            types.setdefault(n.name, n.types[0])
        elif isinstance(n, TryResource) and n.name:
            types.setdefault(n.name, _type_to_str(n.type))
    return types


def _type_kind(decl: Any) -> str:
    for cls, kind in TYPE_KINDS:
        if isinstance(decl, cls):
            return kind
    return "class"


def _body_declarations(decl: Any) -> Tuple[List[Any], List[Any]]:
    """(enum constants, other body declarations) of a javalang type declaration."""
    body = decl.body
    if body is None:
        return [], []
    if isinstance(decl, EnumDeclaration):
        return list(body.constants or []), [d for d in body.declarations or [] if d is not None]
    return [], [d for d in body if d is not None]


class JavaUnitParser:
    """
    Builds the view of one compilation unit.

    Only the first top-level type is converted in full; further top-level
    types are represented without members. Member spans are taken from the
    token stream, so a parser instance can be reused across units.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.source = ""
        self._tokens: List[Any] = []
        self._token_at: Dict[Any, int] = {}
        self._line_starts: List[int] = []
        self._scopes: List[_TypeScope] = []
        self._locals: Dict[str, str] = {}
        self._resolved: Dict[int, Optional[Tuple[_TypeScope, MethodDeclarationNode]]] = {}
        self._anonymous_count = 0

    def parse(self, source: str) -> CompilationUnitNode:
        self.source = source
        self._line_starts = line_starts(source)
        self._scopes = []
        self._locals = {}
        self._resolved = {}
        self._anonymous_count = 0
        try:
            self._tokens = list(javalang.tokenizer.tokenize(source))
            cu = javalang.parser.Parser(self._tokens).parse()
        except javalang.tokenizer.LexerError as e:
            raise JavaParseError(f"Lexer error: {e}", self.path) from e
        except javalang.parser.JavaSyntaxError as e:
            raise JavaParseError(self._describe_syntax_error(e), self.path) from e
        except javalang.parser.JavaParserBaseException as e:
            raise JavaParseError(f"Parser error: {e}", self.path) from e
        self._token_at = {t.position: i for i, t in enumerate(self._tokens)}

        package = cu.package.name if cu.package else ""
        unit = CompilationUnitNode(source=source, package=package)
        for i, decl in enumerate(cu.types or []):
            key = f"{package}.{decl.name}" if package else decl.name
            binding = TypeBinding(name=decl.name, key=key, is_top_level=True)
            if i == 0:
                unit.types.append(self._build_type(decl, binding))
            else:
                logger.debug(f"Top-level type {decl.name} is not the primary type; members not converted")
                unit.types.append(TypeDeclarationNode(
                    name=decl.name, type_kind=_type_kind(decl), binding=binding,
                    modifiers=set(decl.modifiers or ()), index=i))
        return unit

    def _describe_syntax_error(self, error: Any) -> str:
        at = getattr(error, "at", None)
        position = getattr(at, "position", None)
        if position is not None:
            return f"Syntax error at line {position.line}, column {position.column}: {error.description}"
        return f"Syntax error: {error.description}"

    # -------------------- Types and members --------------------

    def _build_type(self, decl: Any, binding: TypeBinding, index: int = 0) -> TypeDeclarationNode:
        node = TypeDeclarationNode(name=decl.name, type_kind=_type_kind(decl), binding=binding,
                                   modifiers=set(decl.modifiers or ()), index=index)
        constants, declarations = _body_declarations(decl)
        scope = _TypeScope(binding)

        spans = self._scan_type(decl, node)
        pairs = self._pair_with_spans(decl.name, constants, declarations, spans)
        # headers first, so that every body sees the complete method table
        headers: List[Optional[MemberNode]] = []
        for i, (javalang_decl, span, is_static) in enumerate(pairs):
            member = None
            if not isinstance(javalang_decl, TypeDeclaration):
                member = self._member_header(javalang_decl, is_static, i)
                if span is not None:
                    member.start, member.end = span
            headers.append(member)
            if isinstance(member, MethodDeclarationNode):
                scope.methods.append(member)
            elif isinstance(member, FieldDeclarationNode):
                for d in javalang_decl.declarators or []:
                    scope.fields[d.name] = member.type_text + "[]" * _dims_count(d)

        outer_locals = self._locals
        self._scopes.append(scope)
        try:
            for i, (member, (javalang_decl, span, _)) in enumerate(zip(headers, pairs)):
                if member is None:
                    nested = TypeBinding(name=javalang_decl.name, key=f"{binding.key}${javalang_decl.name}",
                                         is_top_level=False)
                    member = self._build_type(javalang_decl, nested, i)
                    if span is not None:
                        member.start, member.end = span
                else:
                    self._convert_member_body(member, javalang_decl, outer_locals)
                node.members.append(member)
        finally:
            self._scopes.pop()
            self._locals = outer_locals
        return node

    def _member_header(self, decl: Any, is_static: bool, index: int) -> MemberNode:
        if decl is None or isinstance(decl, list):
            return InitializerNode(is_static=is_static, index=index)
        if isinstance(decl, MethodDeclaration):
            return MethodDeclarationNode(
                name=decl.name, parameters=self._parameters(decl), modifiers=set(decl.modifiers or ()),
                return_type=_type_to_str(decl.return_type), index=index)
        if isinstance(decl, ConstructorDeclaration):
            return MethodDeclarationNode(
                name=decl.name, parameters=self._parameters(decl), modifiers=set(decl.modifiers or ()),
                is_constructor=True, index=index)
        if isinstance(decl, FieldDeclaration):
            return FieldDeclarationNode(
                type_text=_type_to_str(decl.type), names=[d.name for d in decl.declarators or []],
                modifiers=set(decl.modifiers or ()), index=index)
        if isinstance(decl, AnnotationMethod):
            return AnnotationMemberNode(name=decl.name, return_type=_type_to_str(decl.return_type), index=index)
        if isinstance(decl, EnumConstantDeclaration):
            return EnumConstantNode(name=decl.name, index=index)
        raise MalformedDeclarationError(f"Unsupported body declaration {type(decl).__name__}",
                                        getattr(decl, "name", None))

    def _parameters(self, decl: Any) -> List[ParameterNode]:
        return [ParameterNode(type_text=_type_to_str(p.type, varargs=bool(p.varargs)),
                              name=p.name, varargs=bool(p.varargs))
                for p in decl.parameters or []]

    def _convert_member_body(self, member: MemberNode, decl: Any, outer_locals: Dict[str, str]):
        # locals of an enclosing method stay visible inside local and anonymous classes
        self._locals = dict(outer_locals)
        if isinstance(member, MethodDeclarationNode):
            self._locals.update(_collect_local_variable_types(decl))
            member.body = self._convert(decl.body)
        elif isinstance(member, InitializerNode):
            self._locals.update(_collect_local_variable_types(decl))
            member.body = self._convert(decl)
        elif isinstance(member, FieldDeclarationNode):
            member.initializer = self._convert([d.initializer for d in decl.declarators or []])
        elif isinstance(member, EnumConstantNode):
            member.arguments = self._convert(decl.arguments)
            if decl.body is not None:
                member.body = self._anonymous_class(decl.body)

    # -------------------- Member spans --------------------

    def _offset(self, token: Any) -> int:
        line, column = token.position
        return self._line_starts[line - 1] + column - 1

    def _token_end(self, index: int) -> int:
        token = self._tokens[index]
        return self._offset(token) + len(token.value)

    def _scan_type(self, decl: Any, node: TypeDeclarationNode):
        """
        Locate the body of ``decl`` in the token stream and split it into
        member token runs. Returns None when the declaration has no known
        position (anonymous and synthesized bodies).
        """
        position = getattr(decl, "position", None)
        if position is None or position not in self._token_at:
            return None
        open_index = self._token_at[position]
        while open_index < len(self._tokens) and self._tokens[open_index].value != "{":
            open_index += 1
        close_index = self._matching_brace(open_index)
        node.body_start = self._offset(self._tokens[open_index]) + 1
        node.body_end = self._offset(self._tokens[close_index])
        node.members_start = node.body_start

        i = open_index + 1
        constant_runs: List[Tuple[int, int]] = []
        if node.type_kind == "enum":
            i, constant_runs, terminator = self._scan_enum_constants(i, close_index)
            if terminator is not None:
                node.members_start = self._token_end(terminator)
            elif constant_runs:
                node.members_start = self._token_end(constant_runs[-1][1])
        runs: List[Tuple[int, int]] = []
        while i < close_index:
            if self._tokens[i].value == ";":
                i += 1
                continue
            end = self._member_end(i, close_index, node.type_kind == "annotation")
            # empty declarations directly after a member travel with it
            while end + 1 < close_index and self._tokens[end + 1].value == ";":
                end += 1
            runs.append((i, end))
            i = end + 1
        return constant_runs, runs

    def _matching_brace(self, open_index: int) -> int:
        depth = 0
        for j in range(open_index, len(self._tokens)):
            value = self._tokens[j].value
            if value == "{":
                depth += 1
            elif value == "}":
                depth -= 1
                if depth == 0:
                    return j
        raise MalformedDeclarationError("Unbalanced braces in type body")

    def _member_end(self, start: int, limit: int, annotation_type: bool) -> int:
        """A member ends at ``;`` or at the ``}`` closing its first block, unless it holds a value."""
        paren = brace = 0
        has_value = False
        previous = None
        for j in range(start, limit):
            value = self._tokens[j].value
            if value in ("(", "["):
                paren += 1
            elif value in (")", "]"):
                paren -= 1
            elif value == "{":
                brace += 1
            elif value == "}":
                brace -= 1
                if brace == 0 and paren == 0 and not has_value:
                    return j
            elif paren == 0 and brace == 0:
                if value == ";":
                    return j
                if value == "=" or (annotation_type and value == "default" and previous == ")"):
                    has_value = True
            previous = value
        raise MalformedDeclarationError(
            f"Declaration starting at line {self._tokens[start].position.line} is not terminated")

    def _scan_enum_constants(self, start: int, limit: int):
        runs: List[Tuple[int, int]] = []
        i = start
        while i < limit:
            value = self._tokens[i].value
            if value == ";":
                return i + 1, runs, i
            if value == ",":
                i += 1
                continue
            depth = 0
            j = i
            while j < limit:
                value = self._tokens[j].value
                if value in ("(", "{", "["):
                    depth += 1
                elif value in (")", "}", "]"):
                    depth -= 1
                if depth == 0 and (j + 1 == limit or self._tokens[j + 1].value in (",", ";")):
                    break
                j += 1
            runs.append((i, j))
            i = j + 1
        return i, runs, None

    def _span(self, run: Tuple[int, int]) -> Tuple[int, int]:
        start = self._offset(self._tokens[run[0]])
        return start, self._extend_over_trailing_comment(self._token_end(run[1]))

    def _extend_over_trailing_comment(self, end: int) -> int:
        source = self.source
        i = end
        while i < len(source) and source[i] in " \t":
            i += 1
        if source.startswith("//", i):
            line_end = source.find("\n", i)
            if line_end == -1:
                line_end = len(source)
            if source[line_end - 1] == "\r":
                line_end -= 1
            return line_end
        if source.startswith("/*", i):
            close = source.find("*/", i + 2)
            if close != -1 and "\n" not in source[i:close]:
                return close + 2
        return end

    def _is_initializer_run(self, run: Tuple[int, int]) -> bool:
        first = self._tokens[run[0]].value
        if first == "{":
            return True
        return first == "static" and run[0] + 1 <= run[1] and self._tokens[run[0] + 1].value == "{"

    def _is_empty_initializer_run(self, run: Tuple[int, int]) -> bool:
        if not self._is_initializer_run(run):
            return False
        closing_at = run[0] + (2 if self._tokens[run[0]].value == "static" else 1)
        return closing_at <= run[1] and self._tokens[closing_at].value == "}"

    def _pair_with_spans(self, type_name: str, constants: List[Any], declarations: List[Any], scanned):
        """
        Line up the parsed declarations with the scanned token runs.

        Yields (declaration, span, is_static) triples, enum constants first.
        Empty initializer blocks, which javalang drops, are restored from
        the token runs with a None declaration.
        """
        if scanned is None:
            return ([(c, None, False) for c in constants]
                    + [(d, None, False) for d in declarations])
        constant_runs, runs = scanned
        if len(constant_runs) != len(constants):
            raise MalformedDeclarationError(
                f"{type_name}: found {len(constant_runs)} enum constants in the source, parsed {len(constants)}",
                type_name)
        pairs = [(c, self._span(run), False) for c, run in zip(constants, constant_runs)]
        remaining = list(declarations)
        for run in runs:
            is_static = self._tokens[run[0]].value == "static" and self._is_initializer_run(run)
            if self._is_empty_initializer_run(run):
                pairs.append((None, self._span(run), is_static))
                continue
            if not remaining:
                raise MalformedDeclarationError(
                    f"{type_name}: more declarations in the source than parsed", type_name)
            decl = remaining.pop(0)
            if isinstance(decl, list) != self._is_initializer_run(run):
                raise MalformedDeclarationError(
                    f"{type_name}: declaration at line {self._tokens[run[0]].position.line} "
                    f"does not match the parsed {type(decl).__name__}", type_name)
            pairs.append((decl, self._span(run), is_static))
        if remaining:
            raise MalformedDeclarationError(
                f"{type_name}: {len(remaining)} parsed declarations not found in the source", type_name)
        return pairs

    # -------------------- Bodies --------------------

    def _convert(self, node: Any) -> List[ASTNode]:
        """View nodes for ``node`` in pre-order: invocations, anonymous and local classes."""
        if isinstance(node, (list, tuple)):
            result: List[ASTNode] = []
            for child in node:
                result.extend(self._convert(child))
            return result
        if not isinstance(node, javalang.ast.Node):
            return []
        if isinstance(node, MethodInvocation):
            return self._convert_invocation(node, bool(node.qualifier)) + self._convert_selectors(node.selectors)
        if isinstance(node, This):
            return self._convert_selectors(node.selectors, unqualified_first=not node.qualifier)
        if isinstance(node, (ClassCreator, InnerClassCreator)):
            result = self._convert(node.arguments)
            if node.body is not None:
                result.append(self._anonymous_class(node.body))
            return result + self._convert_selectors(node.selectors)
        if isinstance(node, TypeDeclaration):
            return [self._local_type(node)]
        result = []
        for attr in node.attrs:
            if attr != "selectors":
                result.extend(self._convert(getattr(node, attr)))
        return result + self._convert_selectors(getattr(node, "selectors", None))

    def _convert_selectors(self, selectors: Optional[List[Any]], unqualified_first: bool = False) -> List[ASTNode]:
        result: List[ASTNode] = []
        for i, selector in enumerate(selectors or []):
            if isinstance(selector, MethodInvocation):
                qualified = not (unqualified_first and i == 0)
                result.extend(self._convert_invocation(selector, qualified))
            else:
                result.extend(self._convert(selector))
        return result

    def _convert_invocation(self, node: MethodInvocation, qualified: bool) -> List[ASTNode]:
        binding = None
        if not qualified:
            found = self._lookup(node)
            if found is not None:
                scope, method = found
                binding = MethodBinding(name=method.name, parameter_types=list(method.parameter_types),
                                        declaring_class=scope.binding)
        invocation = MethodInvocationNode(name=node.member, has_qualifier=qualified, binding=binding)
        invocation.arguments = self._convert(node.arguments)
        return [invocation]

    def _anonymous_class(self, body: List[Any]) -> AnonymousClassNode:
        self._anonymous_count += 1
        owner = self._scopes[-1].binding if self._scopes else None
        key = f"{owner.key if owner else ''}${self._anonymous_count}"
        binding = TypeBinding(name="", key=key, is_top_level=False, is_anonymous=True)
        decl = _AnonymousBody(body)
        type_node = self._build_type(decl, binding)
        return AnonymousClassNode(binding=binding, members=type_node.members)

    def _local_type(self, decl: Any) -> TypeDeclarationNode:
        owner = self._scopes[-1].binding if self._scopes else None
        key = f"{owner.key if owner else ''}$local${decl.name}"
        return self._build_type(decl, TypeBinding(name=decl.name, key=key, is_top_level=False))

    # -------------------- Binding resolution --------------------

    def _lookup(self, node: MethodInvocation) -> Optional[Tuple[_TypeScope, MethodDeclarationNode]]:
        if id(node) in self._resolved:
            return self._resolved[id(node)]
        found = None
        arguments = node.arguments or []
        for scope in reversed(self._scopes):
            candidates = scope.methods_named(node.member)
            if not candidates:
                continue
            argument_types = [self._infer_type(a) for a in arguments]
            best, best_score = None, None
            for method in candidates:
                score = self._applicability(method, argument_types)
                if score is not None and (best_score is None or score > best_score):
                    best, best_score = method, score
            if best is not None:
                found = (scope, best)
            else:
                logger.debug(f"No applicable overload of {node.member} for {len(arguments)} arguments")
            break
        self._resolved[id(node)] = found
        return found

    def _applicability(self, method: MethodDeclarationNode, argument_types: List[Optional[str]]):
        parameters = method.parameters
        varargs = bool(parameters) and parameters[-1].varargs
        if varargs:
            if len(argument_types) < len(parameters) - 1:
                return None
        elif len(argument_types) != len(parameters):
            return None
        score = 0
        for i, argument_type in enumerate(argument_types):
            if varargs and i >= len(parameters) - 1:
                element = parameters[-1].type_text[:-3]
                if len(argument_types) == len(parameters) and argument_type is not None \
                        and _simple_type(argument_type) == _simple_type(element + "[]"):
                    score += 2
                else:
                    score += _argument_score(argument_type, element)
            else:
                score += _argument_score(argument_type, parameters[i].type_text)
        # fixed arity wins ties
        return score, not varargs

    def _variable_type(self, name: str) -> Optional[str]:
        if name in self._locals:
            return self._locals[name]
        for scope in reversed(self._scopes):
            if name in scope.fields:
                return scope.fields[name]
        return None

    def _infer_type(self, expr: Any) -> Optional[str]:
        if isinstance(expr, Literal):
            return _literal_type(expr.value)
        if getattr(expr, "selectors", None):
            return None
        if isinstance(expr, MemberReference) and not expr.qualifier:
            return self._variable_type(expr.member)
        if isinstance(expr, Cast):
            return _type_to_str(expr.type)
        if isinstance(expr, ClassCreator):
            return _type_to_str(expr.type)
        if isinstance(expr, ArrayCreator):
            return _type_to_str(expr.type) + "[]" * _dims_count(expr)
        if isinstance(expr, MethodInvocation) and not expr.qualifier:
            found = self._lookup(expr)
            return found[1].return_type if found else None
        if isinstance(expr, This) and not expr.qualifier and self._scopes:
            return self._scopes[-1].binding.name or None
        if isinstance(expr, BinaryOperation):
            if expr.operator in BOOLEAN_OPERATORS:
                return "boolean"
            if expr.operator == "+":
                operands = (self._infer_type(expr.operandl), self._infer_type(expr.operandr))
                if "String" in operands:
                    return "String"
            return None
        if isinstance(expr, TernaryExpression):
            return self._infer_type(expr.if_true)
        return None
