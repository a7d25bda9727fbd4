"""
Top-level package for the Dev Events API.

All functionality lives in submodules under ``app``; run the service
with ``uvicorn dev_events_api.app.main:app``.
"""

__all__ = []
