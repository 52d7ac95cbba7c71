"""Settings shared by the route blueprints."""

from dataclasses import dataclass, field
from pathlib import Path

from mata.client.ingest import SUPPORTED_EXTENSIONS


@dataclass
class RouteConfig:
    """Where the routes find the Mata server and stage uploads.

    Attributes:
        mcp_server_url: SSE endpoint of the Mata MCP server
        upload_folder: Directory uploads are written to before ingestion
        allowed_extensions: File suffixes (with the dot) accepted for upload
    """

    mcp_server_url: str | None = None
    upload_folder: Path | None = None
    allowed_extensions: set[str] = field(default_factory=lambda: set(SUPPORTED_EXTENSIONS))


_config = RouteConfig()


def get_config() -> RouteConfig:
    return _config


def configure_routes(
    mcp_server_url: str | None = None,
    upload_folder: Path | None = None,
) -> RouteConfig:
    """Update the shared settings; arguments left as None keep their value."""
    if mcp_server_url is not None:
        _config.mcp_server_url = mcp_server_url
    if upload_folder is not None:
        _config.upload_folder = upload_folder
    return _config
