"""
Tests for signatures, call graph nodes and the call graph extractors.
"""
import pytest

from StepDown.callgraph.extractor import extract_call_graph, extract_sub_call_graph
from StepDown.callgraph.node import CallGraph, CallGraphNode
from StepDown.callgraph.signature import Signature, strip_type_arguments
from StepDown.syntax.ast_view import MethodDeclarationNode, ParameterNode


SERVICE = """
    package demo;

    import java.util.List;

    public class Service {
        private final Helper helper = new Helper();
        private int cached = compute();

        static {
            bootstrap();
        }

        public Service() {
            init();
        }

        public void run(List<String> names) {
            this.validate(names);
            helper.validate(names);
            format(1);
            format("x");
            Runnable r = () -> log();
            new Thread(new Runnable() {
                public void run() {
                    cleanup();
                }
            });
        }

        private void init() {}
        private static void bootstrap() {}
        private int compute() { return 0; }
        private void validate(List<String> names) {}
        private void format(int value) {}
        private void format(String value) {}
        private void log() {}
        private void cleanup() {}

        static class Helper {
            void validate(List<String> names) { log(); }
            void log() {}
        }
    }
"""


def callees(graph, key):
    return [str(c.signature) for c in graph.get(Signature(key)).callees]


class TestSignature:
    """Tests for Signature."""

    def test_declaration_key_strips_generics(self):
        """Test that parameter types lose everything from the first '<'."""
        method = MethodDeclarationNode(name="put", parameters=[
            ParameterNode("Map<String, List<Integer>>"), ParameterNode("int")])
        assert str(Signature.from_declaration(method)) == "put(Map, int)"

    def test_no_parameters(self):
        method = MethodDeclarationNode(name="run")
        assert Signature.from_declaration(method).key == "run()"

    def test_strip_type_arguments(self):
        assert strip_type_arguments("List<String>[]") == "List"
        assert strip_type_arguments("int[]") == "int[]"

    def test_equality_hash_and_order(self):
        """Test that equality, hashing and ordering are all on the key."""
        assert Signature("a()") == Signature("a()")
        assert len({Signature("a()"), Signature("a()")}) == 1
        assert sorted([Signature("b()"), Signature("a(int)"), Signature("a()")]) == [
            Signature("a()"), Signature("a(int)"), Signature("b()")]

    def test_synthetic_signatures(self):
        assert str(Signature.for_initializer(2)) == "#INITIALIZER#_2"
        assert Signature.for_initializer(0).is_synthetic
        assert Signature.for_field_initializer(1).is_synthetic
        assert not Signature("run()").is_synthetic

    def test_name(self):
        assert Signature("format(int)").name == "format"


class TestCallGraphNode:
    """Tests for CallGraphNode and CallGraph."""

    def test_add_callee_is_idempotent(self):
        """Test that an edge is stored once and the caller is registered on the callee."""
        a = CallGraphNode(Signature("a()"))
        b = CallGraphNode(Signature("b()"))
        a.add_callee(b)
        a.add_callee(b)
        assert a.callees == [b]
        assert b.callers == [a]

    def test_self_loop(self):
        a = CallGraphNode(Signature("a()"))
        a.add_callee(a)
        assert a.callees == [a]
        assert a.callers == [a]

    def test_equality_compares_callee_signatures(self):
        a1, b1 = CallGraphNode(Signature("a()")), CallGraphNode(Signature("b()"))
        a2, b2 = CallGraphNode(Signature("a()")), CallGraphNode(Signature("b()"))
        a1.add_callee(b1)
        assert a1 != a2
        a2.add_callee(b2)
        assert a1 == a2

    def test_remove_callee(self):
        a = CallGraphNode(Signature("a()"))
        b = CallGraphNode(Signature("b()"))
        a.add_callee(b)
        assert a.remove_callee(b)
        assert a.callees == []
        assert not a.remove_callee(b)

    def test_graph_lookup_and_order(self):
        graph = CallGraph()
        b = graph.get_or_create(Signature("b()"))
        a = graph.get_or_create(Signature("a()"))
        assert graph.get_or_create(Signature("b()")) is b
        assert graph.nodes == [b, a]
        assert Signature("a()") in graph
        assert graph.get(Signature("zzz()")) is None

    def test_to_dict(self, make_graph):
        graph = make_graph({"a()": ["b()"], "b()": []})
        assert graph.to_dict() == {"a()": ["b()"], "b()": []}
        assert graph.edge_count == 1


class TestCallGraphExtractor:
    """Tests for the call graph built from Java sources."""

    @pytest.fixture
    def graph(self, parse_java):
        return extract_call_graph(parse_java(SERVICE))

    def test_nodes(self, graph):
        """Test that every method and initializer of the top-level type becomes a node."""
        assert set(map(str, graph.signatures)) == {
            "#FIELD_INITIALIZER#_1", "compute()", "#INITIALIZER#_0", "bootstrap()",
            "Service()", "init()", "run(List)", "validate(List)", "format(int)",
            "format(String)", "log()", "cleanup()",
        }

    def test_unqualified_and_this_calls(self, graph):
        """Test that bare calls and this-calls are edges; other qualifiers are not."""
        assert callees(graph, "run(List)") == [
            "validate(List)", "format(int)", "format(String)", "log()"]

    def test_anonymous_class_is_skipped(self, graph):
        assert graph.get(Signature("cleanup()")).callers == []

    def test_nested_type_is_skipped(self, graph):
        """Test that the nested Helper contributes neither nodes nor edges."""
        assert graph.get(Signature("log()")).callers == [graph.get(Signature("run(List)"))]
        assert graph.get(Signature("validate(List)")).callees == []

    def test_initializers(self, graph):
        assert callees(graph, "#INITIALIZER#_0") == ["bootstrap()"]
        assert callees(graph, "Service()") == ["init()"]

    def test_field_initializer_has_synthetic_caller(self, graph):
        assert callees(graph, "#FIELD_INITIALIZER#_1") == ["compute()"]
        assert Signature("#FIELD_INITIALIZER#_0") not in graph

    def test_callers_mirror_callees(self, graph):
        """Test that every edge u -> v has u exactly once in v.callers."""
        for node in graph:
            for callee in node.callees:
                assert sum(1 for c in callee.callers if c is node) == 1

    def test_empty_unit(self, parse_java):
        assert len(extract_call_graph(parse_java(""))) == 0

    def test_only_first_top_level_type(self, parse_java):
        unit = parse_java("""
            class First {
                void a() { b(); }
                void b() {}
            }
            class Second {
                void c() {}
            }
        """)
        graph = extract_call_graph(unit)
        assert list(map(str, graph.signatures)) == ["a()", "b()"]

    def test_self_recursion(self, parse_java):
        graph = extract_call_graph(parse_java("""
            class Loop {
                int fact(int n) { return n <= 1 ? 1 : n * fact(n - 1); }
            }
        """))
        node = graph.get(Signature("fact(int)"))
        assert node.callees == [node]

    def test_identical_keys_collapse(self, parse_java):
        """Test that overloads with the same stripped types share one node."""
        graph = extract_call_graph(parse_java("""
            import java.util.List;
            class Erased {
                void f(List<String> a) {}
                void f(List<Integer> b) {}
            }
        """))
        assert list(map(str, graph.signatures)) == ["f(List)"]

    def test_unresolved_calls_are_ignored(self, parse_java):
        graph = extract_call_graph(parse_java("""
            class Calls {
                void a() { missing(); System.out.println("x"); }
            }
        """))
        assert list(map(str, graph.signatures)) == ["a()"]


class TestSubCallGraphExtractor:
    """Tests for the call graph restricted to a set of signatures."""

    def test_keeps_only_filtered_nodes_and_edges(self, parse_java):
        unit = parse_java("""
            class Sub {
                void a() { b(); c(); }
                void b() { c(); }
                void c() {}
                static { a(); }
            }
        """)
        full = extract_call_graph(unit)
        nodes = [full.get(Signature("a()")), full.get(Signature("c()"))]
        sub = extract_sub_call_graph(unit, nodes)
        assert list(map(str, sub.signatures)) == ["a()", "c()"]
        assert callees(sub, "a()") == ["c()"]

    def test_sub_graph_owns_its_nodes(self, parse_java):
        unit = parse_java("""
            class Sub {
                void a() { b(); }
                void b() {}
            }
        """)
        full = extract_call_graph(unit)
        sub = extract_sub_call_graph(unit, full.nodes)
        assert sub.get(Signature("a()")) is not full.get(Signature("a()"))
        assert sub.get(Signature("a()")) == full.get(Signature("a()"))
