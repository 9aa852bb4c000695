"""
Web presentation layer for the deploy notifier.

Architectural Intent:
- Receives stage events from pipeline steps as plain GET requests
- Uses Python stdlib only (http.server + asyncio)
"""
