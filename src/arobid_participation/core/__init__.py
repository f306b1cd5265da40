"""Core participation engine: transport, validation, discovery, search, aggregation.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or any server framework; the server module is a thin layer on top of it.
"""
