"""
Query executor for the tabular backend.

Executes parsed queries and normalizes the backend envelope into a list of
records.
"""

import json
import logging
from typing import Any, Dict, List

from .backend_client import BackendClient, BackendResponse
from .errors import BackendError
from .query_parser import ParsedQuery

logger = logging.getLogger(__name__)


def _as_record(item: Any) -> Dict[str, Any]:
    if isinstance(item, dict):
        return item
    return {"value": item}


def normalize_response(response: BackendResponse) -> List[Dict[str, Any]]:
    """
    Turn a backend envelope into a list of records.

    An error wins over any payload. A payload that is not valid JSON becomes a
    single ``{"value": raw}`` record. No payload means no rows.

    Raises:
        BackendError: the envelope carries a non-empty error
    """
    if response.error:
        raise BackendError(response.error)

    if not response.data:
        return []

    try:
        payload = json.loads(response.data)
    except json.JSONDecodeError:
        logger.warning("Backend payload is not valid JSON, returning it as text")
        return [{"value": response.data}]

    if payload is None:
        return []
    if isinstance(payload, list):
        return [_as_record(item) for item in payload]
    return [_as_record(payload)]


class QueryExecutor:
    """Executes parsed queries and formats results."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def execute(self, parsed: ParsedQuery) -> List[Dict[str, Any]]:
        """
        Execute a parsed query.

        Args:
            parsed: Output of the query parser

        Returns:
            List of records (possibly empty)

        Raises:
            BackendError: transport or backend reported an error
            BackendTimeoutError: backend did not answer in time
        """
        response = await self.client.read(parsed.table, parsed.filter)
        try:
            records = normalize_response(response)
        except BackendError as e:
            logger.warning(f"Query on {parsed.table} failed: {e.message}")
            raise

        logger.info(f"Query on {parsed.table} returned {len(records)} record(s)")
        return records

    def format_results_as_table(self, results: List[Dict]) -> str:
        """Format results as a simple text table."""
        if not results:
            return "No results"

        columns = _columns(results)

        # Calculate column widths
        widths = {col: len(col) for col in columns}
        for row in results:
            for col in columns:
                value_str = _cell(row.get(col))
                widths[col] = max(widths[col], len(value_str))

        header = " | ".join(col.ljust(widths[col]) for col in columns)
        separator = "-+-".join("-" * widths[col] for col in columns)

        rows = []
        for row in results:
            row_str = " | ".join(
                _cell(row.get(col)).ljust(widths[col]) for col in columns
            )
            rows.append(row_str)

        return f"{header}\n{separator}\n" + "\n".join(rows)

    def format_results_as_markdown(self, results: List[Dict]) -> str:
        """Format results as a markdown table."""
        if not results:
            return "_No results_"

        columns = _columns(results)

        header = "| " + " | ".join(columns) + " |"
        separator = "| " + " | ".join("---" for _ in columns) + " |"

        rows = []
        for row in results:
            row_str = "| " + " | ".join(_cell(row.get(col)) for col in columns) + " |"
            rows.append(row_str)

        return f"{header}\n{separator}\n" + "\n".join(rows)


def _columns(results: List[Dict]) -> List[str]:
    # Records are unordered and may differ in shape; keep first-seen order
    columns: List[str] = []
    for row in results:
        for col in row:
            if col not in columns:
                columns.append(col)
    return columns


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
