"""
Handles the business logic of answering a question: parse, then execute.
"""

import logging
from typing import Any, Dict, Optional

from ..backend_client import BackendClient
from ..config import get_config
from ..errors import NLQueryError, ParseError
from ..query_executor import QueryExecutor
from ..query_parser import QueryParser

logger = logging.getLogger(__name__)


def default_executor() -> QueryExecutor:
    return QueryExecutor(BackendClient(get_config().backend))


async def answer(
    question: str,
    parser: Optional[QueryParser] = None,
    executor: Optional[QueryExecutor] = None,
    execute: bool = True,
) -> Dict[str, Any]:
    """
    Answer a natural language question.

    Args:
        question: Natural language question
        parser: Parser to use (process vocabulary by default)
        executor: Executor to use (configured backend by default)
        execute: If False, only parse

    Returns:
        Dict with "success" plus either results or "error"/"error_type"
    """
    parser = parser or QueryParser()

    try:
        parsed = parser.parse(question)
    except ParseError as e:
        logger.info(f"Could not parse question: {e.message}")
        return {"success": False, "question": question, **e.to_dict()}

    response = {
        "success": True,
        "question": question,
        "table": parsed.table,
        "filter": parsed.filter,
        "parsed": parsed.to_dict(),
    }

    if not execute:
        return response

    executor = executor or default_executor()
    try:
        records = await executor.execute(parsed)
    except NLQueryError as e:
        logger.error(f"Execution failed for '{question}': {e.message}")
        response["success"] = False
        response.update(e.to_dict())
        return response

    response["results"] = records
    response["count"] = len(records)
    return response
