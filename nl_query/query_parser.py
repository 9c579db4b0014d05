"""
Rule-based natural language query parser.

Converts questions like "show completed todos" into a table name and a
PostgREST filter such as ``is_done=eq.true``.

Resolution rules:
    - The first entity synonym in reading order picks the table. Later
      entities are ignored and reported in ``diagnostics``.
    - ``id`` followed by an integer within ``id_window`` tokens wins over any
      completion-state phrase.
    - A negation word directly before a completion phrase flips it.
    - Completion phrases resolving to different predicates are ambiguous.
    - No predicate at all means "every row of the table".
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import AmbiguousPredicateError, EmptyInputError, UnknownEntityError
from .vocabulary import (
    INTEGER_PATTERN,
    NUMBER_PATTERN,
    Predicate,
    Vocabulary,
    get_vocabulary,
    tokenize,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedQuery:
    """Result of parsing one question."""

    table: str
    filter: str = ""
    matched_table_synonym: str = ""
    matched_predicate_phrase: Optional[str] = None
    diagnostics: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "filter": self.filter,
            "matched_table_synonym": self.matched_table_synonym,
            "matched_predicate_phrase": self.matched_predicate_phrase,
            "diagnostics": list(self.diagnostics),
        }


class QueryParser:
    """Parses natural language questions against a fixed vocabulary."""

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or get_vocabulary()

    def parse(self, text: str) -> ParsedQuery:
        """
        Parse a question into a ParsedQuery.

        Args:
            text: Natural language question

        Returns:
            ParsedQuery with the resolved table and filter

        Raises:
            EmptyInputError: text has no words
            UnknownEntityError: no known table is mentioned
            AmbiguousPredicateError: contradictory completion phrases
        """
        text = text or ""
        tokens = tokenize(" ".join(text.split()))
        if not tokens:
            raise EmptyInputError(text)

        diagnostics: List[str] = []

        table, synonym = self._resolve_table(text, tokens, diagnostics)
        predicate, phrase = self._resolve_predicate(text, tokens, diagnostics)

        parsed = ParsedQuery(
            table=table,
            filter=predicate.to_filter() if predicate else "",
            matched_table_synonym=synonym,
            matched_predicate_phrase=phrase,
            diagnostics=tuple(diagnostics),
        )
        logger.debug(f"Parsed '{text}' -> table={parsed.table} filter={parsed.filter!r}")
        return parsed

    def _resolve_table(
        self, text: str, tokens: Tuple[str, ...], diagnostics: List[str]
    ) -> Tuple[str, str]:
        entities = self.vocabulary.entities
        matches = [(token, entities[token]) for token in tokens if token in entities]
        if not matches:
            raise UnknownEntityError(text, self.vocabulary.tables)

        synonym, table = matches[0]
        ignored = sorted({t for _, t in matches[1:] if t != table})
        if ignored:
            diagnostics.append(
                f"multiple tables mentioned; using '{table}' (first), ignoring {', '.join(ignored)}"
            )
        return table, synonym

    def _resolve_predicate(
        self, text: str, tokens: Tuple[str, ...], diagnostics: List[str]
    ) -> Tuple[Optional[Predicate], Optional[str]]:
        completion = self._match_completion_phrases(tokens)

        identity = self._match_identity(tokens, diagnostics)
        if identity:
            if completion:
                ignored = ", ".join(f"'{phrase}'" for phrase, _ in completion)
                diagnostics.append(f"id filter takes precedence over {ignored}")
            return identity

        if not completion:
            return None, None

        distinct = {predicate for _, predicate in completion}
        if len(distinct) > 1:
            raise AmbiguousPredicateError(text, [phrase for phrase, _ in completion])

        phrase, predicate = completion[0]
        return predicate, phrase

    def _match_identity(
        self, tokens: Tuple[str, ...], diagnostics: List[str]
    ) -> Optional[Tuple[Predicate, str]]:
        """
        Find ``id`` followed by an integer, with optional comparison words.

        Only the first number in the window counts. A number that is not an
        integer ("1.5") yields no id filter rather than a truncated one.
        """
        vocab = self.vocabulary
        for i, token in enumerate(tokens):
            if token != vocab.id_column:
                continue

            operator = "eq"
            window = tokens[i + 1:i + 1 + vocab.id_window]
            for offset, candidate in enumerate(window, start=1):
                if INTEGER_PATTERN.fullmatch(candidate):
                    predicate = Predicate(vocab.id_column, operator, str(int(candidate)))
                    return predicate, " ".join(tokens[i:i + offset + 1])
                if NUMBER_PATTERN.fullmatch(candidate):
                    diagnostics.append(f"ignoring non-integer {vocab.id_column} '{candidate}'")
                    break
                operator = vocab.comparisons.get(candidate, operator)
        return None

    def _match_completion_phrases(
        self, tokens: Tuple[str, ...]
    ) -> List[Tuple[str, Predicate]]:
        """
        Scan for predicate phrases, preferring the longest phrase at each position.

        A negation word right before a phrase ("not complete") flips it.
        """
        vocab = self.vocabulary
        predicates = vocab.predicates
        longest = vocab.max_phrase_length
        found = []

        i = 0
        consumed = 0
        while i < len(tokens):
            for length in range(min(longest, len(tokens) - i), 0, -1):
                candidate = tokens[i:i + length]
                if candidate not in predicates:
                    continue

                phrase, predicate = " ".join(candidate), predicates[candidate]
                if i > consumed and tokens[i - 1] in vocab.negations:
                    negated = predicate.negated()
                    if negated:
                        phrase, predicate = f"{tokens[i - 1]} {phrase}", negated
                found.append((phrase, predicate))
                i += length
                consumed = i
                break
            else:
                i += 1
        return found


def parse(text: str) -> ParsedQuery:
    """Parse a question with the process-wide vocabulary."""
    return QueryParser().parse(text)
