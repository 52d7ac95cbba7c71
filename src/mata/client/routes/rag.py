"""Context retrieval route used by the chat front end before generation."""

import logging

from flask import Blueprint, jsonify, request

from mata.client.routes.config import get_config
from mata.service.mcp_helpers import call_mcp_tool, run_async

logger = logging.getLogger(__name__)

rag_bp = Blueprint("rag", __name__)

# Request field -> build_context_prompt argument
CONTEXT_OPTIONS = {
    "limit": "limit",
    "threshold": "threshold",
    "source": "source",
    "type": "doc_type",
}


@rag_bp.route("/api/context", methods=["POST"])
def build_context():
    """Retrieve knowledge base context for a query and assemble the RAG prompt.

    The caller hands the prompt to its generation backend; no reply is
    generated here.

    Request:
        {
            "query": "How is authentication handled?",
            "limit": 5,            # Optional
            "threshold": 0.75,     # Optional
            "source": "auth.ts",   # Optional metadata filter
            "type": "code"         # Optional metadata filter
        }

    Response:
        {
            "prompt": "Context information is below. ...",
            "sources": [{"source": "auth.ts", "content": "...", "score": 0.91, ...}]
        }
    """
    body = request.get_json(silent=True) or {}
    query = body.get("query")
    if not query:
        return jsonify({"error": "Missing 'query' field in request"}), 400

    params = {"query": query}
    params.update({arg: body.get(name) for name, arg in CONTEXT_OPTIONS.items()})

    try:
        result = run_async(
            call_mcp_tool(get_config().mcp_server_url, "build_context_prompt", params)
        )
    except Exception as e:
        logger.error(f"❌ Context retrieval failed for '{query[:100]}': {e}", exc_info=True)
        return jsonify({"error": f"Internal server error: {str(e)}"}), 500

    logger.info(f"🧩 Built prompt from {len(result['sources'])} sources")
    return jsonify(result)
