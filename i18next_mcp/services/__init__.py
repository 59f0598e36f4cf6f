"""Services exposing translation operations to the MCP server and CLI."""

from .project_service import ProjectService

__all__ = ["ProjectService"]
