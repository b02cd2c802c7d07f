import logging
from typing import List, Set

from StepDown.callgraph.signature import Signature
from StepDown.comparator import factory
from StepDown.comparator.base import Comparator, StackableSignatureComparator
from StepDown.errors import PreferenceError
from StepDown.invocation.ordering import get_node_ordering
from StepDown.preferences import (
    ACCESS_LEVEL,
    CONSTRUCTOR,
    FAN_IN,
    FAN_IN_FAN_OUT_RATIO,
    FAN_OUT,
    INITIALIZER,
    INVOCATION,
    LEAVES,
    LEXICAL,
    REACHABILITY,
    ROOTS,
    SOURCE_POSITION,
    Preferences,
)
from StepDown.syntax.ast_view import CompilationUnitNode

logger = logging.getLogger(__name__)


class ComparatorBuilder:
    """Turns the configured ordering priorities into a tie-breaking stack."""

    def __init__(self, nodes: List, unit: CompilationUnitNode, preferences: Preferences):
        self.nodes = nodes
        self.unit = unit
        self.preferences = preferences
        self.known_signatures: Set[Signature] = {n.signature for n in nodes}

    def get_method_ordering_comparator(self) -> StackableSignatureComparator:
        comparator = StackableSignatureComparator(self.known_signatures)
        logger.debug(f"Start-points: {factory.describe(self.nodes)}")
        for priority in self.preferences.ordering_priorities:
            logger.debug(f"Adding comparator for [{priority}] to stackable comparator")
            comparator.add(self.get_comparator(priority))
        return comparator

    def get_comparator(self, priority: str) -> Comparator:
        if priority == INVOCATION:
            node_ordering = get_node_ordering(self.preferences.respect_before_after)
            return factory.get_invocation_comparator(
                node_ordering, self.nodes, self.preferences.invocation_strategy)
        if priority == ACCESS_LEVEL:
            return factory.get_access_level_comparator(self.unit)
        if priority == CONSTRUCTOR:
            return factory.get_constructor_comparator(self.unit)
        if priority == FAN_OUT:
            return factory.get_fan_out_comparator(self.nodes)
        if priority == INITIALIZER:
            return factory.get_initializer_invocation_comparator(self.unit)
        if priority == LEXICAL:
            return factory.get_lexical_comparator()
        if priority == ROOTS:
            return factory.get_root_separation_comparator(self.nodes)
        if priority == SOURCE_POSITION:
            return factory.get_source_position_comparator(self.unit)
        if priority == REACHABILITY:
            return factory.get_reachability_comparator(self.nodes)
        if priority == FAN_IN:
            return factory.get_fan_in_comparator(self.nodes)
        if priority == FAN_IN_FAN_OUT_RATIO:
            return factory.get_fan_in_fan_out_ratio_comparator(self.nodes)
        if priority == LEAVES:
            return factory.get_leaf_separation_comparator(self.nodes)
        raise PreferenceError(f"Unknown ordering priority: {priority}")


def get_working_list_comparator(nodes: List, unit: CompilationUnitNode) -> StackableSignatureComparator:
    """Fixed pre-sort of the working list: start points first, then by source position."""
    comparator = StackableSignatureComparator(n.signature for n in nodes)
    comparator.add(factory.get_initializer_invocation_comparator(unit))
    comparator.add(factory.get_constructor_comparator(unit))
    comparator.add(factory.get_root_separation_comparator(nodes))
    comparator.add(factory.get_access_level_comparator(unit))
    comparator.add(factory.get_fan_out_comparator(nodes))
    comparator.add(factory.get_source_position_comparator(unit))
    return comparator
