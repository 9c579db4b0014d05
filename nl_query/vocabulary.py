"""
Entity and predicate vocabulary for the query parser.

The vocabulary is static configuration: it is built once per process (from the
defaults below or from a JSON file) and never mutated afterwards.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

OPERATORS = ("eq", "neq", "gt", "lt")

FILTER_PATTERN = re.compile(r"^(\w+)=(eq|neq|gt|lt)\.([^&=]+)$")

TOKEN_PATTERN = re.compile(r"-?\d+(?:\.\d+)?(?![a-z_\d])|[a-z0-9_]+")

INTEGER_PATTERN = re.compile(r"-?\d+")

NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

BOOLEAN_OPPOSITES = {"true": "false", "false": "true"}

DEFAULT_NEGATIONS = ("not", "never")

DEFAULT_ENTITIES = {
    "todos": ["todo", "todos", "task", "tasks"],
    "users": ["user", "users"],
    "posts": ["post", "posts"],
}

DEFAULT_PREDICATES = {
    "completed": "is_done=eq.true",
    "complete": "is_done=eq.true",
    "done": "is_done=eq.true",
    "finished": "is_done=eq.true",
    "incomplete": "is_done=eq.false",
    "unfinished": "is_done=eq.false",
    "pending": "is_done=eq.false",
    "open": "is_done=eq.false",
    "not done": "is_done=eq.false",
    "not completed": "is_done=eq.false",
    "not finished": "is_done=eq.false",
}

# Words between "id" and the number that pick a comparison operator
DEFAULT_COMPARISONS = {
    "greater": "gt",
    "above": "gt",
    "over": "gt",
    "more": "gt",
    "less": "lt",
    "below": "lt",
    "under": "lt",
    "fewer": "lt",
    "not": "neq",
    "except": "neq",
}


@dataclass(frozen=True)
class Predicate:
    """A single filter condition, rendered as ``column=operator.value``."""

    column: str
    operator: str
    value: str

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported operator '{self.operator}'")

    @classmethod
    def parse(cls, expression: str) -> "Predicate":
        match = FILTER_PATTERN.match(expression.strip())
        if not match:
            raise ValueError(f"Invalid filter expression '{expression}'")
        return cls(*match.groups())

    def to_filter(self) -> str:
        return f"{self.column}={self.operator}.{self.value}"

    def negated(self) -> Optional["Predicate"]:
        """Logical opposite, or None when there is no single-predicate opposite."""
        if self.value in BOOLEAN_OPPOSITES:
            return Predicate(self.column, self.operator, BOOLEAN_OPPOSITES[self.value])
        if self.operator in ("eq", "neq"):
            operator = "neq" if self.operator == "eq" else "eq"
            return Predicate(self.column, operator, self.value)
        return None


def tokenize(text: str) -> Tuple[str, ...]:
    """
    Lowercase and split text into word tokens.

    Numbers keep their sign and decimal part ("-3", "1.5") so they are never
    read as a different integer.
    """
    return tuple(TOKEN_PATTERN.findall(text.lower()))


@dataclass(frozen=True)
class Vocabulary:
    """Immutable synonym tables shared by every parser in the process."""

    entities: Mapping[str, str]
    predicates: Mapping[Tuple[str, ...], Predicate]
    comparisons: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_COMPARISONS))
    )
    negations: Tuple[str, ...] = DEFAULT_NEGATIONS
    id_column: str = "id"
    id_window: int = 3

    @property
    def tables(self) -> Tuple[str, ...]:
        return tuple(sorted(set(self.entities.values())))

    @property
    def max_phrase_length(self) -> int:
        return max((len(p) for p in self.predicates), default=0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vocabulary":
        """
        Build a vocabulary from plain data.

        Args:
            data: {"entities": {table: [synonym, ...]},
                   "predicates": {phrase: "column=op.value"},
                   "comparisons": {word: op}, "negations": [word, ...],
                   "id_column": str, "id_window": int}

        Raises:
            ValueError: on duplicate synonyms or invalid predicates
        """
        entities: Dict[str, str] = {}
        for table, synonyms in data.get("entities", {}).items():
            for synonym in list(synonyms) + [table]:
                key = synonym.strip().lower()
                if not re.fullmatch(r"[a-z0-9_]+", key):
                    raise ValueError(f"Entity synonym '{synonym}' must be a single word")
                if entities.get(key, table) != table:
                    raise ValueError(
                        f"Synonym '{key}' maps to both '{entities[key]}' and '{table}'"
                    )
                entities[key] = table

        predicates: Dict[Tuple[str, ...], Predicate] = {}
        for phrase, expression in data.get("predicates", {}).items():
            tokens = tokenize(phrase)
            if not tokens:
                raise ValueError(f"Empty predicate phrase for '{expression}'")
            predicates[tokens] = Predicate.parse(expression)

        comparisons = data.get("comparisons", DEFAULT_COMPARISONS)
        for word, operator in comparisons.items():
            if operator not in OPERATORS:
                raise ValueError(f"Unsupported operator '{operator}' for '{word}'")

        id_column = str(data.get("id_column", "id")).strip().lower()
        if not re.fullmatch(r"[a-z0-9_]+", id_column):
            raise ValueError(f"id_column '{id_column}' must be a single word")

        negations = tuple(w.strip().lower() for w in data.get("negations", DEFAULT_NEGATIONS))

        id_window = int(data.get("id_window", 3))
        if id_window < 1:
            raise ValueError("id_window must be at least 1")

        return cls(
            entities=MappingProxyType(entities),
            predicates=MappingProxyType(predicates),
            comparisons=MappingProxyType(
                {w.lower(): op for w, op in comparisons.items()}
            ),
            negations=negations,
            id_column=id_column,
            id_window=id_window,
        )

    @classmethod
    def default(cls) -> "Vocabulary":
        return cls.from_dict({
            "entities": DEFAULT_ENTITIES,
            "predicates": DEFAULT_PREDICATES,
        })


def load_vocabulary(path: Optional[str] = None) -> Vocabulary:
    """Load a vocabulary from a JSON file, or the defaults when no path is given."""
    if not path:
        return Vocabulary.default()

    with open(Path(path), encoding="utf-8") as f:
        data = json.load(f)

    vocabulary = Vocabulary.from_dict(data)
    logger.info(
        f"Loaded vocabulary from {path}: {len(vocabulary.entities)} synonyms, "
        f"{len(vocabulary.predicates)} predicate phrases"
    )
    return vocabulary


# Singleton instance
_vocabulary: Optional[Vocabulary] = None


def get_vocabulary() -> Vocabulary:
    """Get the process-wide vocabulary, loading it on first use."""
    global _vocabulary
    if _vocabulary is None:
        from .config import get_config

        _vocabulary = load_vocabulary(get_config().vocabulary_path)
    return _vocabulary
