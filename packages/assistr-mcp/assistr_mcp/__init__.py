"""
Assistr MCP server package.
"""
