"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When a new domain is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import events

router = APIRouter()

router.include_router(events.router, prefix="/events", tags=["events"])
