"""
Health Wiki Proxy.

Server-side proxy that screens free-text health questions and answers them
with short Wikipedia summaries.
"""

__version__ = "1.0.0"
