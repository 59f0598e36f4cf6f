"""MCP server and CLI for inspecting and syncing i18next translation files."""

__version__ = "0.1.0"
