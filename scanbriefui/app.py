#!/usr/bin/env python3
"""ScanBriefUI - Flask API server for ScanBrief host-data analysis."""

import os
import sys

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, request
from flask_cors import CORS

from scanbrief import __version__
from scanbrief.services.ai import model_table
from scanbrief.services.ai_analyzer import SecurityAnalyzer, SummaryService
from scanbrief.utils.config_loader import ConfigLoader
from scanbrief.utils.logger import get_logger, setup_logging

log = get_logger("scanbrief.ui")

# Upload limit for pasted or uploaded scan exports
MAX_CONTENT_LENGTH = 50 * 1024 * 1024


def create_app(service=None):
    """Build the Flask application.

    Args:
        service: SummaryService to use (default: one built from config and
                 environment, created once for the lifetime of the app)

    Returns:
        Configured :class:`flask.Flask` instance.
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH
    app.extensions["scanbrief"] = service or SummaryService(SecurityAnalyzer())
    CORS(app)

    app.add_url_rule("/", "index", index)
    app.add_url_rule("/models", "models", list_models)
    app.add_url_rule("/summarize", "summarize", summarize, methods=["POST"])
    return app


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

def index():
    """Health/status endpoint."""
    return jsonify({
        "message": "ScanBrief AI Summarization API is running!",
        "version": __version__,
        "api": "chat_completions",
    })


def list_models():
    """Return the model capability table and the configured default."""
    service = current_app.extensions["scanbrief"]
    analyzer = service.analyzer
    return jsonify({
        "default": analyzer.settings.default_model,
        "models": [m.to_dict() for m in model_table.list_models(analyzer.table)],
    })


async def summarize():
    """Analyze the posted ``{data, model}`` body."""
    service = current_app.extensions["scanbrief"]
    body = request.get_json(silent=True)
    status, payload = await service.summarize(body)
    return jsonify(payload), status


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    """Entry point for the ``scanbriefui`` console script."""
    load_dotenv()
    setup_logging(
        verbose="--verbose" in sys.argv,
        style="server",
        secrets=ConfigLoader.get_credentials(model_table.credential_envs()),
    )

    config = ConfigLoader.load_config_json()
    host = os.environ.get("HOST", config["server_host"])
    port = int(config["server_port"])

    app = create_app()
    log.info("Server running on http://%s:%d", host, port)
    app.run(host=host, port=port)


if __name__ == "__main__":
    main()
