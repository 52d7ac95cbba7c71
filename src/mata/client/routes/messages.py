"""Chat history indexing and search routes."""

import logging

from flask import Blueprint, jsonify, request

from mata.client.routes.config import get_config
from mata.constants import DEFAULT_CHAT_SEARCH_LIMIT
from mata.service.mcp_helpers import call_mcp_tool, run_async

logger = logging.getLogger(__name__)

messages_bp = Blueprint("messages", __name__)

REQUIRED_MESSAGE_FIELDS = ("id", "chat_id", "role", "content")


def _call(tool_name: str, params: dict | None = None):
    return run_async(call_mcp_tool(get_config().mcp_server_url, tool_name, params))


@messages_bp.route("/api/messages", methods=["POST"])
def index_message():
    """Add a message that was just committed to chat storage to the search index.

    Request:
        {"id": "...", "chat_id": "...", "role": "user", "content": "...", "timestamp": 1700000000000}
    """
    data = request.get_json(silent=True) or {}
    missing = [name for name in REQUIRED_MESSAGE_FIELDS if name not in data]
    if missing:
        return jsonify({"success": False, "error": f"Missing fields: {', '.join(missing)}"}), 400

    try:
        result = _call(
            "index_message",
            {
                "message_id": data["id"],
                "chat_id": data["chat_id"],
                "role": data["role"],
                "content": data["content"],
                "timestamp": data.get("timestamp"),
            },
        )
    except Exception as e:
        logger.error(f"❌ Error indexing message: {e}", exc_info=True)
        return jsonify({"success": False, "error": f"Internal server error: {str(e)}"}), 500

    if not result.get("success"):
        return jsonify({"success": False, "error": result.get("message")}), 400
    return jsonify(result)


@messages_bp.route("/api/messages/<message_id>", methods=["DELETE"])
def remove_message(message_id: str):
    """Remove one message from the search index."""
    try:
        result = _call("remove_message", {"message_id": message_id})
    except Exception as e:
        logger.error(f"❌ Error removing message: {e}", exc_info=True)
        return jsonify({"success": False, "error": f"Internal server error: {str(e)}"}), 500
    return jsonify(result), 200 if result.get("success") else 404


@messages_bp.route("/api/chats/<chat_id>/index", methods=["DELETE"])
def clear_chat(chat_id: str):
    """Drop a deleted chat's messages from the search index."""
    try:
        result = _call("clear_chat_index", {"chat_id": chat_id})
    except Exception as e:
        logger.error(f"❌ Error clearing chat index: {e}", exc_info=True)
        return jsonify({"success": False, "error": f"Internal server error: {str(e)}"}), 500
    return jsonify(result)


@messages_bp.route("/api/chats/search", methods=["GET"])
def search_chats():
    """Search chat history.

    Query parameters:
        q: Words to search for
        limit: Maximum number of messages (default 5)
    """
    query = request.args.get("q", "").strip()
    if not query:
        return jsonify({"error": "Missing 'q' query parameter"}), 400

    limit = request.args.get("limit", DEFAULT_CHAT_SEARCH_LIMIT, type=int)
    if limit < 0:
        return jsonify({"error": "'limit' must not be negative"}), 400

    try:
        results = _call("search_messages", {"query": query, "limit": limit})
    except Exception as e:
        logger.error(f"❌ Error searching chats: {e}", exc_info=True)
        return jsonify({"error": f"Internal server error: {str(e)}"}), 500

    return jsonify({"query": query, "results": results})
