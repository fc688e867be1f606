"""MCP server exposing the narrative analyzers as tools."""
