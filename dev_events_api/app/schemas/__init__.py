"""
Pydantic schema definitions for API payloads.

Schemas are kept separate from the SQLite rows they are built from so
that the API representation does not leak storage details such as the
JSON-encoded ``agenda`` and ``tags`` columns.
"""
