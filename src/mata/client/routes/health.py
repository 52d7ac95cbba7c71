"""Liveness and Mata server connectivity routes."""

import logging

from flask import Blueprint, jsonify

from mata import __version__
from mata.client.routes.config import get_config
from mata.service.mcp_helpers import check_mcp_server, run_async

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Liveness probe; does not contact the Mata server."""
    return jsonify(
        {
            "status": "healthy",
            "version": __version__,
            "mcp_server": get_config().mcp_server_url or "not configured",
        }
    )


@health_bp.route("/api/mcp-status", methods=["GET"])
def mcp_status():
    """Probe the Mata server.

    Returns:
        The check_mcp_server report; 503 when the server is not configured
        or cannot be reached
    """
    url = get_config().mcp_server_url
    if not url:
        return jsonify({"status": "failed", "error": "MCP server URL not configured"}), 503

    logger.debug(f"Probing Mata server at {url}")
    report = run_async(check_mcp_server(url))
    if report["status"] != "connected":
        return jsonify(report), 503
    return jsonify(report)
