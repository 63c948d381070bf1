"""
Tool groups registered on the Assistr MCP server.
"""
