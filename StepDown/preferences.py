"""
Ordering preferences.

Preferences are a plain value handed to the sorter; they can be read from
and written to a YAML file. ``ordering_priorities`` is persisted as a
single ``#``-joined string.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml  # from PyYAML

from StepDown.errors import PreferenceError
from StepDown.invocation.sorter import BREADTH_FIRST, DEPTH_FIRST, INVOCATION_STRATEGIES

logger = logging.getLogger(__name__)

DELIMITER = "#"
DEFAULT_CONFIG_PATH = "config/stepdown.yaml"

# -------------------- Ordering priorities --------------------
INVOCATION = "INVOCATION"
ACCESS_LEVEL = "ACCESS_LEVEL"
CONSTRUCTOR = "CONSTRUCTOR"
FAN_OUT = "FAN_OUT"
INITIALIZER = "INITIALIZER"
LEXICAL = "LEXICAL"
ROOTS = "ROOTS"
SOURCE_POSITION = "SOURCE_POSITION"
REACHABILITY = "REACHABILITY"
# evaluation criteria, not part of the default set
FAN_IN = "FAN_IN"
FAN_IN_FAN_OUT_RATIO = "FAN_IN_FAN_OUT_RATIO"
LEAVES = "LEAVES"

ORDERING_PRIORITIES = (
    INVOCATION, ACCESS_LEVEL, CONSTRUCTOR, FAN_OUT, INITIALIZER,
    LEXICAL, ROOTS, SOURCE_POSITION, REACHABILITY,
    FAN_IN, FAN_IN_FAN_OUT_RATIO, LEAVES,
)
DEFAULT_ORDERING_PRIORITIES = [INVOCATION, ACCESS_LEVEL, SOURCE_POSITION, LEXICAL]

# -------------------- Startpoint strategies --------------------
HEURISTIC = "heuristic"
USER = "user"
STARTPOINT_STRATEGIES = (HEURISTIC, USER)

# -------------------- Member categories --------------------
ENUM_CONSTANTS = "enum_constants"
TYPES = "types"
STATIC_INITIALIZERS = "static_initializers"
FIELDS = "fields"
INITIALIZERS = "initializers"
CONSTRUCTORS = "constructors"
METHODS = "methods"
ANNOTATION_MEMBERS = "annotation_members"

MEMBER_CATEGORIES = (
    ENUM_CONSTANTS, TYPES, STATIC_INITIALIZERS, FIELDS,
    INITIALIZERS, CONSTRUCTORS, METHODS, ANNOTATION_MEMBERS,
)
DEFAULT_MEMBER_CATEGORY_ORDER: Dict[str, int] = {
    ENUM_CONSTANTS: 0,
    TYPES: 1,
    STATIC_INITIALIZERS: 2,
    FIELDS: 3,
    INITIALIZERS: 4,
    CONSTRUCTORS: 5,
    METHODS: 6,
    ANNOTATION_MEMBERS: 6,
}


def encode_priorities(priorities: Iterable[str]) -> str:
    return DELIMITER.join(priorities)


def decode_priorities(encoded: str) -> List[str]:
    """``"INVOCATION#LEXICAL"`` -> ``["INVOCATION", "LEXICAL"]``; validates every token."""
    tokens = [t.strip() for t in encoded.split(DELIMITER) if t.strip()]
    return validate_priorities(tokens)


def validate_priorities(priorities: Iterable[str]) -> List[str]:
    result = []
    for priority in priorities:
        if not isinstance(priority, str):
            raise PreferenceError(f"Ordering priority must be a string, got {priority!r}")
        token = priority.strip().upper()
        if token not in ORDERING_PRIORITIES:
            raise PreferenceError(
                f"Unknown ordering priority '{priority}'; expected one of {', '.join(ORDERING_PRIORITIES)}")
        result.append(token)
    return result


@dataclass
class Preferences:
    ordering_priorities: List[str] = field(default_factory=lambda: list(DEFAULT_ORDERING_PRIORITIES))
    invocation_strategy: str = DEPTH_FIRST
    startpoint_strategy: str = HEURISTIC
    respect_before_after: bool = True
    cluster_getter_setter: bool = False
    cluster_overloaded: bool = False
    member_category_order: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_MEMBER_CATEGORY_ORDER))

    def __post_init__(self):
        self.validate()

    def validate(self):
        if isinstance(self.ordering_priorities, str):
            self.ordering_priorities = decode_priorities(self.ordering_priorities)
        else:
            self.ordering_priorities = validate_priorities(self.ordering_priorities)
        if self.invocation_strategy not in INVOCATION_STRATEGIES:
            raise PreferenceError(
                f"Unknown invocation strategy '{self.invocation_strategy}'; "
                f"expected {DEPTH_FIRST} or {BREADTH_FIRST}")
        if self.startpoint_strategy not in STARTPOINT_STRATEGIES:
            raise PreferenceError(
                f"Unknown startpoint strategy '{self.startpoint_strategy}'; expected {HEURISTIC} or {USER}")
        for name in ("respect_before_after", "cluster_getter_setter", "cluster_overloaded"):
            if not isinstance(getattr(self, name), bool):
                raise PreferenceError(f"{name} must be a boolean, got {getattr(self, name)!r}")
        self.member_category_order = self._complete_category_order(self.member_category_order)

    @staticmethod
    def _complete_category_order(order: Optional[Dict[str, Any]]) -> Dict[str, int]:
        merged = dict(DEFAULT_MEMBER_CATEGORY_ORDER)
        for category, rank in (order or {}).items():
            if category not in MEMBER_CATEGORIES:
                raise PreferenceError(
                    f"Unknown member category '{category}'; expected one of {', '.join(MEMBER_CATEGORIES)}")
            if isinstance(rank, bool) or not isinstance(rank, int):
                raise PreferenceError(f"Rank of member category '{category}' must be an integer, got {rank!r}")
            merged[category] = rank
        return merged

    # -------------------- Derived flags --------------------

    @property
    def apply_working_list_heuristics(self) -> bool:
        return self.startpoint_strategy == HEURISTIC

    @property
    def is_clustering(self) -> bool:
        return self.cluster_getter_setter or self.cluster_overloaded

    # -------------------- Serialization --------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ordering_priorities": encode_priorities(self.ordering_priorities),
            "invocation_strategy": self.invocation_strategy,
            "startpoint_strategy": self.startpoint_strategy,
            "respect_before_after": self.respect_before_after,
            "cluster_getter_setter": self.cluster_getter_setter,
            "cluster_overloaded": self.cluster_overloaded,
            "member_category_order": dict(self.member_category_order),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Preferences":
        known = set(Preferences.__dataclass_fields__)
        unknown = [k for k in data if k not in known]
        if unknown:
            raise PreferenceError(f"Unknown preference option(s): {', '.join(sorted(unknown))}")
        return Preferences(**data)

    def replace(self, **overrides: Any) -> "Preferences":
        """Copy with the given options overridden; ``None`` values are ignored."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return Preferences.from_dict(data)


def load_preferences(path: Optional[Union[str, os.PathLike]] = None) -> Preferences:
    """
    Read preferences from a YAML file.

    A missing file yields the defaults; a malformed one or an unknown
    value raises PreferenceError.
    """
    if path is None or not os.path.isfile(path):
        if path is not None:
            logger.info(f"No preference file at {path}; using defaults")
        return Preferences()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PreferenceError(f"Error parsing YAML preference file {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PreferenceError(f"Preference file {path} must hold a mapping")
    logger.info(f"Loaded preferences from {path}")
    return Preferences.from_dict(data)


def save_preferences(preferences: Preferences, path: Union[str, os.PathLike]):
    directory = os.path.dirname(os.fspath(path))
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(preferences.to_dict(), f, sort_keys=False, indent=2)
