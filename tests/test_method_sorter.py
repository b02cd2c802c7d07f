"""
End-to-end tests for MethodSorter: Java source in, reordered source out.
"""
import pytest

from StepDown.errors import JavaParseError, MalformedDeclarationError
from StepDown.method_sorter import MethodSorter, RandomMethodSorter
from StepDown.preferences import Preferences
from StepDown.syntax.java_parser import JavaUnitParser

from conftest import java, method_names


def sort(text, **options):
    return MethodSorter(Preferences(**options)).sort_source(java(text), "Test.java")


def sorted_names(result):
    return method_names(JavaUnitParser().parse(result.sorted_source))


class TestScenarios:
    """The reference scenarios of the stepdown ordering."""

    def test_stepdown_depth_first(self):
        """Callers come before their callees."""
        result = sort("""
            class Scenario {
                void c() {}
                void b() {}
                void a() { b(); c(); }
            }
        """, ordering_priorities=["INVOCATION", "SOURCE_POSITION"])
        assert result.sorted_source == java("""
            class Scenario {
                void a() { b(); c(); }
                void b() {}
                void c() {}
            }
        """)
        assert [str(s) for s in result.ordered_signatures] == ["a()", "b()", "c()"]

    def test_overload_clustering(self):
        result = sort("""
            class Overloads {
                void foo() {}
                void bar() {}
                void foo(int a) {}
            }
        """, cluster_overloaded=True)
        assert [str(s) for s in result.ordered_signatures] == ["foo()", "foo(int)", "bar()"]
        assert sorted_names(result) == ["foo", "foo", "bar"]
        assert [c.to_dict()["members"] for c in result.clusters] == [["foo()", "foo(int)"], ["bar()"]]

    def test_overloads_are_sorted_inside_their_cluster(self):
        result = sort("""
            class Overloads {
                void foo() {}
                void bar() {}
                void foo(int x) { foo(); }
            }
        """, cluster_overloaded=True)
        assert [str(s) for s in result.ordered_signatures] == ["foo(int)", "foo()", "bar()"]
        assert result.clusters[0].to_dict() == {"main": "foo()", "members": ["foo(int)", "foo()"]}

    def test_getter_setter_pairing(self):
        result = sort("""
            class Bean {
                private int x;
                private int y;
                public void setX(int x) { this.x = x; }
                public int getY() { return y; }
                public int getX() { return x; }
            }
        """, cluster_getter_setter=True, ordering_priorities=["SOURCE_POSITION"])
        assert [str(s) for s in result.ordered_signatures] == ["setX(int)", "getX()", "getY()"]
        assert sorted_names(result) == ["setX", "getX", "getY"]

    def test_access_level_tie_break(self):
        result = sort("""
            class Access {
                private void priv() {}
                public void pub() {}
            }
        """, ordering_priorities=["INVOCATION", "ACCESS_LEVEL", "SOURCE_POSITION"])
        assert sorted_names(result) == ["pub", "priv"]

    def test_non_method_order_preserved(self):
        source = java("""
            class Holder {
                int f;
                void m() {}
                class T {}
            }
        """)
        preferences = Preferences(member_category_order={"fields": 0, "methods": 1, "types": 2})
        result = MethodSorter(preferences).sort_source(source)
        assert result.sorted_source == source
        assert not result.changed

    def test_cycle_falls_back_to_source_position(self):
        result = sort("""
            class Cycle {
                void b() { a(); }
                void a() { b(); }
            }
        """, ordering_priorities=["REACHABILITY", "SOURCE_POSITION"])
        assert not result.changed
        assert [str(s) for s in result.ordered_signatures] == ["b()", "a()"]


class TestProperties:
    """Permutation, idempotence and determinism."""

    SOURCE = """
        public class Report {
            private static final String TITLE = "report";

            /**
             * Entry point.
             */
            public String render() {
                return header() + body();
            }

            private String body() {
                return rows(3);
            }

            // the header line
            private String header() {
                return TITLE;
            }

            public Report() {
                reset();
            }

            private String rows(int count) {
                return String.valueOf(count);
            }

            private void reset() {}
        }
    """

    def test_order(self):
        result = sort(self.SOURCE)
        assert sorted_names(result) == ["Report", "reset", "render", "header", "body", "rows"]

    def test_comments_travel_with_their_member(self):
        result = sort(self.SOURCE)
        text = result.sorted_source
        assert text.index("// the header line") < text.index("private String header()")
        assert text.index("Entry point.") < text.index("public String render()")
        assert text.index("private static final String TITLE") < text.index("public Report()")

    def test_permutation(self):
        """Test that the output holds exactly the input members."""
        result = sort(self.SOURCE)
        before = JavaUnitParser().parse(result.source).top_level_type.members
        after = JavaUnitParser().parse(result.sorted_source).top_level_type.members
        source, sorted_source = result.source, result.sorted_source
        assert sorted(source[m.start:m.end] for m in before) == sorted(sorted_source[m.start:m.end] for m in after)
        assert len(sorted_source) == len(source)

    def test_idempotent(self):
        first = sort(self.SOURCE)
        second = MethodSorter().sort_source(first.sorted_source)
        assert second.sorted_source == first.sorted_source
        assert not second.changed

    def test_idempotent_without_cycles(self):
        """Test that an acyclic class under the start-point heuristic is stable after one pass."""
        source = java("""
            class Calls {
                void m0() {}
                void m1() {}
                void m2() { m1(); m0(); }
            }
        """)
        first = MethodSorter().sort_source(source)
        assert sorted_names(first) == ["m2", "m1", "m0"]
        assert MethodSorter().sort_source(first.sorted_source).sorted_source == first.sorted_source

    def test_user_startpoints_need_a_second_pass(self):
        """Test that source-position start points are re-seeded from the sorted text."""
        preferences = Preferences(startpoint_strategy="user")
        first = MethodSorter(preferences).sort_source(java("""
            class Calls {
                void m0() {}
                void m1() {}
                void m2() { m1(); m0(); }
            }
        """))
        second = MethodSorter(preferences).sort_source(first.sorted_source)
        third = MethodSorter(preferences).sort_source(second.sorted_source)
        assert sorted_names(first) == ["m2", "m0", "m1"]
        assert sorted_names(second) == ["m2", "m1", "m0"]
        assert not third.changed

    def test_cycles_need_a_second_pass(self):
        """Test that a cycle reached from a later start point settles on the second pass."""
        first = MethodSorter().sort_source(java("""
            class Cycles {
                void s() { t(); z(); }
                void t() { s(); }
                void z() { s(); }
                void v() { w(); s(); }
                void w() { v(); }
            }
        """))
        second = MethodSorter().sort_source(first.sorted_source)
        third = MethodSorter().sort_source(second.sorted_source)
        assert sorted_names(first) == ["v", "s", "t", "z", "w"]
        assert sorted_names(second) == ["v", "w", "s", "t", "z"]
        assert not third.changed

    def test_deterministic(self):
        assert sort(self.SOURCE).sorted_source == sort(self.SOURCE).sorted_source

    def test_breadth_first(self):
        result = sort("""
            class Tree {
                void leaf2() {}
                void leaf1() {}
                void mid() { leaf1(); }
                void root() { mid(); leaf2(); }
            }
        """, invocation_strategy="breadth-first", ordering_priorities=["INVOCATION"])
        assert sorted_names(result) == ["root", "mid", "leaf2", "leaf1"]

    def test_user_startpoints(self):
        """Test that with user start points the working list follows source order."""
        result = sort("""
            class Access {
                private void priv() {}
                public void pub() {}
            }
        """, startpoint_strategy="user", ordering_priorities=["INVOCATION"])
        assert sorted_names(result) == ["priv", "pub"]


class TestBoundaries:
    def test_empty_unit(self):
        result = MethodSorter().sort_source("")
        assert result.sorted_source == ""
        assert result.ordered_signatures == []

    def test_single_method(self):
        result = sort("""
            class One {
                void only() {}
            }
        """)
        assert not result.changed
        assert [str(s) for s in result.ordered_signatures] == ["only()"]

    def test_self_recursion(self):
        result = sort("""
            class Rec {
                int down(int n) { return n == 0 ? 0 : down(n - 1); }
                void start() { down(3); }
            }
        """)
        assert sorted_names(result) == ["start", "down"]
        assert result.call_graph["down(int)"] == ["down(int)"]

    def test_identical_keys(self):
        source = java("""
            import java.util.List;
            class Erased {
                void f(List<String> a) {}
                void f(List<Integer> b) {}
            }
        """)
        result = MethodSorter().sort_source(source)
        assert result.sorted_source == source
        assert [str(s) for s in result.ordered_signatures] == ["f(List)"]

    def test_interface(self):
        result = sort("""
            interface Api {
                void second();
                default void first() { second(); }
            }
        """)
        assert sorted_names(result) == ["first", "second"]

    def test_enum_constants_stay(self):
        result = sort("""
            enum Level {
                LOW, HIGH;

                void b() {}

                void a() { b(); }
            }
        """)
        assert result.sorted_source == java("""
            enum Level {
                LOW, HIGH;

                void a() { b(); }

                void b() {}
            }
        """)

    def test_empty_declarations_stay_with_their_member(self):
        result = sort("""
            class Semi {
                void b() {};
                void a() { b(); };
            }
        """)
        assert result.sorted_source == java("""
            class Semi {
                void a() { b(); };
                void b() {};
            }
        """)

    def test_members_sharing_a_line_are_split(self):
        result = sort("""
            class Line {
                int x = 1;
                void b() {} void a() { b(); }
            }
        """)
        assert result.sorted_source == java("""
            class Line {
                int x = 1;
                void a() { b(); }
                void b() {}
            }
        """)
        assert MethodSorter().sort_source(result.sorted_source).sorted_source == result.sorted_source


class TestFailures:
    def test_parse_error_propagates(self):
        with pytest.raises(JavaParseError):
            MethodSorter().sort_source("class { }")

    def test_malformed_declaration_leaves_text(self, monkeypatch):
        source = java("""
            class M {
                void b() {}
                void a() { b(); }
            }
        """)

        def broken(*args, **kwargs):
            raise MalformedDeclarationError("overlapping members")

        monkeypatch.setattr("StepDown.method_sorter.reorder_members", broken)
        result = MethodSorter().sort_source(source)
        assert result.sorted_source == source
        assert result.skipped == "overlapping members"


class TestRandomMethodSorter:
    SOURCE = """
        class Shuffle {
            int field;
            Shuffle() {}
            void a() {}
            void b() {}
            class Inner {}
            void c() {}
            void d() {}
        }
    """

    def test_only_methods_move(self):
        result = RandomMethodSorter(seed=3).sort_source(java(self.SOURCE))
        members = JavaUnitParser().parse(result.sorted_source).top_level_type.members
        kinds = [m.kind for m in members]
        assert kinds == ["field_declaration", "method_declaration", "method_declaration",
                         "method_declaration", "type_declaration", "method_declaration",
                         "method_declaration"]
        assert members[1].is_constructor
        assert sorted(m.name for m in members if m.kind == "method_declaration" and not m.is_constructor) == [
            "a", "b", "c", "d"]

    def test_seed_is_reproducible(self):
        first = RandomMethodSorter(seed=11).sort_source(java(self.SOURCE))
        second = RandomMethodSorter(seed=11).sort_source(java(self.SOURCE))
        assert first.sorted_source == second.sorted_source
