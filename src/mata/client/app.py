"""Flask web API for the chat front end.

The front end calls it to build RAG prompts, upload documents and search
chat history. The knowledge base and chat index live in the Mata MCP
server; this app only forwards to it.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from mata.client.routes import BLUEPRINTS, configure_routes
from mata.config import ServiceConfig
from mata.constants import MAX_UPLOAD_SIZE_BYTES

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO")),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

load_dotenv()

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_SIZE_BYTES
for blueprint in BLUEPRINTS:
    app.register_blueprint(blueprint)


def initialize_services() -> None:
    """Create the upload folder and point the routes at the Mata server."""
    upload_folder = Path(os.getenv("UPLOAD_FOLDER", "/tmp/mata_uploads"))
    upload_folder.mkdir(parents=True, exist_ok=True)

    config = configure_routes(
        mcp_server_url=ServiceConfig.get_mcp_url(), upload_folder=upload_folder
    )
    logger.info(f"🔧 Routes use Mata server {config.mcp_server_url}, uploads in {upload_folder}")


def create_app() -> Flask:
    """WSGI entry point, e.g. `gunicorn 'mata.client.app:create_app()'`."""
    initialize_services()
    return app


def main() -> None:
    """Run the development server (mata-web)."""
    initialize_services()

    host = os.getenv("FLASK_HOST", "127.0.0.1")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "production") == "development"

    logger.info(f"🌐 Serving Mata API on http://{host}:{port} (debug={debug})")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
