"""
Natural Language Query

Rule-based natural language querying for PostgREST-compatible backends.
"""

__version__ = "1.0.0"

from .backend_client import BackendClient, BackendResponse
from .config import NLQueryConfig, get_config
from .errors import (
    AmbiguousPredicateError,
    BackendError,
    BackendTimeoutError,
    EmptyInputError,
    ExecError,
    NLQueryError,
    ParseError,
    UnknownEntityError,
)
from .query_executor import QueryExecutor
from .query_parser import ParsedQuery, QueryParser, parse
from .vocabulary import Predicate, Vocabulary, load_vocabulary

__all__ = [
    "NLQueryConfig",
    "get_config",
    "BackendClient",
    "BackendResponse",
    "QueryExecutor",
    "ParsedQuery",
    "QueryParser",
    "parse",
    "Predicate",
    "Vocabulary",
    "load_vocabulary",
    "NLQueryError",
    "ParseError",
    "EmptyInputError",
    "UnknownEntityError",
    "AmbiguousPredicateError",
    "ExecError",
    "BackendError",
    "BackendTimeoutError",
]
