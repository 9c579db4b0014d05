"""Error types raised while parsing and executing natural-language queries."""


class NLQueryError(Exception):
    """Base class for all query errors."""

    error_type = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "error_type": self.error_type}


class ParseError(NLQueryError):
    """The question could not be turned into a query. Carries the input text."""

    error_type = "parse_error"

    def __init__(self, text: str, message: str):
        super().__init__(message)
        self.text = text


class EmptyInputError(ParseError):
    error_type = "empty_input"

    def __init__(self, text: str = ""):
        super().__init__(text, "Query is empty. Try 'show all todos'.")


class UnknownEntityError(ParseError):
    error_type = "unknown_entity"

    def __init__(self, text: str, known_tables=()):
        hint = ", ".join(f"'{t}'" for t in known_tables) or "a known table"
        super().__init__(
            text,
            f"Could not determine table from query '{text}'. Please specify {hint}.",
        )


class AmbiguousPredicateError(ParseError):
    error_type = "ambiguous_predicate"

    def __init__(self, text: str, phrases=()):
        detail = f" (conflicting phrases: {', '.join(phrases)})" if phrases else ""
        super().__init__(
            text,
            f"Query '{text}' asks for contradictory filters{detail}.",
        )
        self.phrases = tuple(phrases)


class ExecError(NLQueryError):
    """Executing a parsed query against the backend failed."""

    error_type = "exec_error"


class BackendError(ExecError):
    """The backend or the transport reported an error."""

    error_type = "backend_error"


class BackendTimeoutError(ExecError):
    """The backend did not answer within the configured timeout."""

    error_type = "timeout"
