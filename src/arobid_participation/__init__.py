"""Arobid Event Participation MCP Server.

Find out which Arobid exhibitions a business takes part in: event discovery,
batched exhibitor search across events, and a single participation report.
"""

__version__ = "0.1.0"
