"""
Shared fixtures for the StepDown tests.
"""
import textwrap

import pytest

from StepDown.callgraph.node import CallGraph
from StepDown.callgraph.signature import Signature
from StepDown.syntax.ast_view import MethodDeclarationNode
from StepDown.syntax.java_parser import JavaUnitParser


def java(text: str) -> str:
    """Dedent an inline Java snippet."""
    return textwrap.dedent(text).lstrip("\n")


@pytest.fixture
def parse_java():
    """Parse an inline Java snippet into the syntax view."""
    def _parse(text: str, path: str = None):
        return JavaUnitParser(path).parse(java(text))
    return _parse


@pytest.fixture
def make_graph():
    """
    Build a call graph from ``{"a()": ["b()", "c()"], ...}``.

    Nodes are created in key order first, then callees as they appear.
    """
    def _make(edges):
        graph = CallGraph()
        for caller in edges:
            graph.get_or_create(Signature(caller))
        for caller, callees in edges.items():
            node = graph.get(Signature(caller))
            for callee in callees:
                node.add_callee(graph.get_or_create(Signature(callee)))
        return graph
    return _make


def method_names(unit):
    """Method names of the top-level type in member order."""
    return [m.name for m in unit.top_level_type.members if isinstance(m, MethodDeclarationNode)]
