"""Command line interface for skills-mcp."""
