from dataclasses import dataclass
from typing import Iterable, Optional

from StepDown.syntax.ast_view import MethodDeclarationNode, MethodInvocationNode

INITIALIZER_PREFIX = "#INITIALIZER#_"
FIELD_INITIALIZER_PREFIX = "#FIELD_INITIALIZER#_"


def strip_type_arguments(type_text: str) -> str:
    """``Map<K, V>`` -> ``Map``; everything from the first ``<`` is dropped."""
    return type_text.split("<", 1)[0]


def _render(name: str, parameter_types: Iterable[str]) -> str:
    return f"{name}({', '.join(strip_type_arguments(t) for t in parameter_types)})"


@dataclass(frozen=True, order=True)
class Signature:
    """
    Canonical key of a method or initializer within one compilation unit.

    Equality, hashing and ordering are all on ``key``; ``str()`` returns it.
    """
    key: str

    @classmethod
    def from_declaration(cls, method: MethodDeclarationNode) -> "Signature":
        return cls(_render(method.name, method.parameter_types))

    @classmethod
    def from_invocation(cls, invocation: MethodInvocationNode) -> Optional["Signature"]:
        """Signature of the bound callee, or None when the call is unresolved."""
        binding = invocation.binding
        if binding is None:
            return None
        return cls(_render(binding.name, binding.parameter_types))

    @classmethod
    def for_initializer(cls, index: int) -> "Signature":
        return cls(f"{INITIALIZER_PREFIX}{index}")

    @classmethod
    def for_field_initializer(cls, index: int) -> "Signature":
        return cls(f"{FIELD_INITIALIZER_PREFIX}{index}")

    @property
    def is_synthetic(self) -> bool:
        return self.key.startswith(INITIALIZER_PREFIX) or self.key.startswith(FIELD_INITIALIZER_PREFIX)

    @property
    def name(self) -> str:
        return self.key.split("(", 1)[0]

    def __str__(self) -> str:
        return self.key
