"""
API routes for the natural language query service.
"""

import json
import logging

from flask import Blueprint, current_app, jsonify, request

from ..errors import ExecError, ParseError
from ..query_executor import normalize_response
from ..services.query_service import answer

logger = logging.getLogger(__name__)
api_bp = Blueprint("api", __name__, url_prefix="/api")

ERROR_STATUS = {
    "empty_input": 400,
    "unknown_entity": 400,
    "ambiguous_predicate": 400,
    "backend_error": 502,
    "timeout": 504,
}


def _components() -> dict:
    return current_app.extensions["nl_query"]


def _question():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    question = data.get("question")
    if not isinstance(question, str):
        question = None
    return data, question


@api_bp.route("/parse", methods=["POST"])
def parse_question():
    """Parse a question without executing it, with matching diagnostics."""
    _, question = _question()
    if question is None:
        return jsonify({"success": False, "error": "Missing 'question' parameter"}), 400

    try:
        parsed = _components()["parser"].parse(question)
    except ParseError as e:
        return jsonify({"success": False, "question": question, **e.to_dict()}), 400

    return jsonify({"success": True, "question": question, **parsed.to_dict()})


@api_bp.route("/query", methods=["POST"])
async def natural_language_query():
    """
    Convert natural language to a query and execute it.

    Request body:
    {
        "question": "show completed todos",
        "execute": true  // If false, just parse without executing
    }
    """
    data, question = _question()
    if question is None:
        return jsonify({"success": False, "error": "Missing 'question' parameter"}), 400

    execute = data.get("execute", True)
    if not isinstance(execute, bool):
        return jsonify({"success": False, "error": "'execute' must be true or false"}), 400

    components = _components()
    result = await answer(
        question,
        parser=components["parser"],
        executor=components["executor"],
        execute=execute,
    )

    if result["success"]:
        return jsonify(result)
    return jsonify(result), ERROR_STATUS.get(result.get("error_type"), 500)


@api_bp.route("/tables/<table>/records", methods=["POST"])
async def insert_records(table: str):
    """
    Insert records into a known table.

    Request body:
    {
        "records": [{"title": "Buy groceries", "is_done": false}]
    }
    """
    components = _components()
    if table not in components["parser"].vocabulary.tables:
        return jsonify({"success": False, "error": f"Unknown table '{table}'"}), 404

    data = request.get_json(silent=True) or {}
    records = data.get("records")
    if not records:
        return jsonify({"success": False, "error": "Missing 'records' parameter"}), 400

    try:
        response = await components["client"].write(table, json.dumps(records))
        inserted = normalize_response(response)
    except ExecError as e:
        logger.error(f"Insert into {table} failed: {e.message}")
        return jsonify({"success": False, **e.to_dict()}), ERROR_STATUS.get(e.error_type, 502)

    return jsonify({"success": True, "table": table, "records": inserted, "count": len(inserted)}), 201
