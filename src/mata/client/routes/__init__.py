"""HTTP routes of the Mata web API, one blueprint per concern."""

from mata.client.routes.config import RouteConfig, configure_routes, get_config
from mata.client.routes.health import health_bp
from mata.client.routes.messages import messages_bp
from mata.client.routes.rag import rag_bp
from mata.client.routes.upload import upload_bp

BLUEPRINTS = (health_bp, rag_bp, upload_bp, messages_bp)

__all__ = [
    "BLUEPRINTS",
    "RouteConfig",
    "configure_routes",
    "get_config",
    "health_bp",
    "messages_bp",
    "rag_bp",
    "upload_bp",
]
