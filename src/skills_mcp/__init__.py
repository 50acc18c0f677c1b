"""Local skills MCP server: discover, install and update agent skills."""

__version__ = "0.1.0"
