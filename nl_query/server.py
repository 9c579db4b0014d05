"""
Flask server for the natural language query service.

Provides REST API endpoints for parsing and answering questions.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from .api.routes import api_bp
from .backend_client import BackendClient
from .config import NLQueryConfig, get_config
from .query_executor import QueryExecutor
from .query_parser import QueryParser
from .vocabulary import Vocabulary, load_vocabulary

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[NLQueryConfig] = None,
    client: Optional[BackendClient] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Service configuration (environment by default)
        client: Backend client (built from config by default)
        vocabulary: Parser vocabulary (loaded from config by default)
    """
    config = config or get_config()
    client = client or BackendClient(config.backend)
    vocabulary = vocabulary or load_vocabulary(config.vocabulary_path)

    app = Flask(__name__)
    CORS(app)

    app.extensions["nl_query"] = {
        "config": config,
        "client": client,
        "parser": QueryParser(vocabulary),
        "executor": QueryExecutor(client),
    }
    app.register_blueprint(api_bp)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        issues = config.validate()
        return jsonify({
            "status": "healthy" if not issues else "unhealthy",
            "issues": issues,
            "backend_url": config.backend.url,
            "tables": list(vocabulary.tables),
        })

    return app


def run_server(config: Optional[NLQueryConfig] = None):
    """Run the Flask server."""
    config = config or get_config()

    logger.info("Starting natural language query server")
    logger.info(f"   Server: http://{config.server.host}:{config.server.port}")
    logger.info(f"   Backend: {config.backend.url}")

    issues = config.validate()
    for issue in issues:
        logger.warning(f"Configuration issue: {issue}")

    app = create_app(config)
    app.run(
        host=config.server.host,
        port=config.server.port,
        debug=config.server.debug,
    )
