import logging
from abc import ABC, abstractmethod
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional, Set

from StepDown.callgraph.signature import Signature

logger = logging.getLogger(__name__)


class Comparator(ABC):
    """A three-way comparison over signatures."""

    @abstractmethod
    def compare(self, signature1: Signature, signature2: Signature) -> int:
        ...

    def __call__(self, signature1: Signature, signature2: Signature) -> int:
        return self.compare(signature1, signature2)

    def key(self, extract: Optional[Callable] = None):
        """Sort key for ``sorted``; ``extract`` maps an item to its signature."""
        if extract is None:
            return cmp_to_key(self.compare)
        return cmp_to_key(lambda a, b: self.compare(extract(a), extract(b)))


class SignatureComparator(Comparator):
    """
    Orders signatures by a numeric rank.

    Signatures without a rank sort before ranked ones when ``unknown_first``
    is set, after them otherwise; two unranked signatures compare equal.
    """

    def __init__(self, ranks: Optional[Dict[Signature, float]] = None, unknown_first: bool = False):
        self.ranks: Dict[Signature, float] = {}
        self.unknown_first = unknown_first
        for signature, rank in (ranks or {}).items():
            self.put(signature, rank)

    def put(self, signature, rank: float):
        if isinstance(signature, str):
            signature = Signature(signature)
        self.ranks[signature] = float(rank)

    def compare(self, signature1: Signature, signature2: Signature) -> int:
        value1 = self.ranks.get(signature1)
        value2 = self.ranks.get(signature2)
        if value1 is None and value2 is None:
            return 0
        if value1 is None:
            return -1 if self.unknown_first else 1
        if value2 is None:
            return 1 if self.unknown_first else -1
        if value1 < value2:
            return -1
        if value1 > value2:
            return 1
        return 0

    def __contains__(self, signature: Signature) -> bool:
        return signature in self.ranks


class LexicalComparator(Comparator):
    def compare(self, signature1: Signature, signature2: Signature) -> int:
        if signature1 < signature2:
            return -1
        if signature1 > signature2:
            return 1
        return 0


class NullComparator(Comparator):
    def compare(self, signature1: Signature, signature2: Signature) -> int:
        return 0


class StackableSignatureComparator(Comparator):
    """
    Tie-breaking stack of partial comparators.

    Layers are consulted in order and the first non-zero verdict wins.
    Pairs involving a signature outside ``known_signatures`` compare 0.
    """

    def __init__(self, known_signatures: Iterable[Signature], *comparators: Comparator):
        self.known_signatures: Set[Signature] = set(known_signatures)
        self.comparators: List[Comparator] = list(comparators)

    def compare(self, signature1: Signature, signature2: Signature) -> int:
        if signature1 not in self.known_signatures or signature2 not in self.known_signatures:
            return 0
        results = []
        for comparator in self.comparators:
            result = comparator.compare(signature1, signature2)
            results.append(result)
            if result != 0:
                return result
        if signature1 != signature2:
            if signature1.is_synthetic or signature2.is_synthetic:
                logger.debug(f"No ordering between [{signature1}] and [{signature2}]! CompResults: {results}")
            else:
                logger.warning(f"No ordering between [{signature1}] and [{signature2}]! CompResults: {results}")
                logger.warning(f"We have {len(self.comparators)} comparators in this stackable comparator.")
        return 0

    def add(self, comparator: Comparator):
        logger.debug(f"Adding comparator #{len(self.comparators)}")
        self.comparators.append(comparator)

    def __len__(self) -> int:
        return len(self.comparators)
