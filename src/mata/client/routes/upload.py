"""Document upload route: save, ingest through the Mata server, discard."""

import logging
from pathlib import Path
from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from mata.client.ingest import load_document_payloads
from mata.client.routes.config import RouteConfig, get_config
from mata.service.mcp_helpers import call_mcp_tool, run_async

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__)


def allowed_file(filename: str, allowed_extensions: set[str]) -> bool:
    """True if the filename's suffix (case-insensitive) is in allowed_extensions."""
    return Path(filename).suffix.lower() in allowed_extensions


def ingest_file(filepath: Path, source: str, mcp_url: str) -> dict[str, Any]:
    """Send every payload of a saved file to the add_document tool.

    Returns:
        dict with 'stored' and 'failed' chunk counts and the 'errors'
        reported by calls that stored nothing
    """
    totals: dict[str, Any] = {"stored": 0, "failed": 0, "errors": []}
    for payload in load_document_payloads(filepath, source=source):
        reply = run_async(call_mcp_tool(mcp_url, "add_document", payload))
        totals["stored"] += reply.get("stored", 0)
        totals["failed"] += reply.get("failed", 0) + reply.get("rejected", 0)
        if not reply.get("success"):
            totals["errors"].append(reply.get("message", "Unknown error"))
    return totals


def _process_upload(upload: FileStorage, config: RouteConfig) -> dict[str, Any]:
    if not allowed_file(upload.filename, config.allowed_extensions):
        return {"filename": upload.filename, "status": "error", "error": "File type not allowed."}

    filename = secure_filename(upload.filename)
    staged = config.upload_folder / filename
    try:
        upload.save(staged)
        outcome = ingest_file(staged, filename, config.mcp_server_url)
    except Exception as e:
        logger.error(f"❌ Ingestion of {filename} failed: {e}", exc_info=True)
        return {"filename": filename, "status": "error", "error": str(e)}
    finally:
        staged.unlink(missing_ok=True)

    if outcome["errors"] and not outcome["stored"]:
        return {"filename": filename, "status": "error", "error": "; ".join(outcome["errors"])}

    logger.info(f"📥 {filename}: {outcome['stored']} chunks stored, {outcome['failed']} failed")
    return {
        "filename": filename,
        "status": "partial" if outcome["failed"] else "success",
        "chunks": outcome["stored"],
        "failed": outcome["failed"],
    }


@upload_bp.route("/api/upload", methods=["POST"])
def upload_documents():
    """Ingest uploaded files into the knowledge base.

    Expects multipart form data with one or more 'files': text, markdown,
    source code or PDF.

    Returns:
        JSON with one entry per file under 'details'. A file whose chunks
        partly failed to embed has status "partial" and a 'failed' count;
        those chunks are not retrievable until the file is uploaded again.
    """
    uploads = [f for f in request.files.getlist("files") if f.filename]
    if "files" not in request.files:
        return jsonify({"success": False, "error": "No files provided"}), 400
    if not uploads:
        return jsonify({"success": False, "error": "No files selected"}), 400

    config = get_config()
    details = [_process_upload(upload, config) for upload in uploads]
    ingested = sum(1 for detail in details if detail["status"] != "error")

    return jsonify(
        {
            "success": ingested > 0,
            "message": f"Successfully ingested {ingested} of {len(uploads)} documents",
            "details": details,
        }
    )
