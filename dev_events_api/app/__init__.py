"""
Application package initializer.

The API is organised into ``core`` (configuration, logging, database),
``schemas`` (pydantic models), ``services`` (validation and storage) and
``api`` (versioned routers).
"""

from .main import app  # noqa: F401
