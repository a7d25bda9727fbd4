"""
Event endpoints for API v1.

Submissions arrive as a multipart form (or a JSON object) and are run
through ``validate_event`` before anything touches the database.  A
rejected submission is answered with 400 and the complete list of
validation errors.  Events are addressed by slug.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from dev_events_api.app.schemas.event import EventListResponse, EventResponse
from dev_events_api.app.services.event_service import EventService
from dev_events_api.app.services.event_validator import (
    ValidationResult,
    to_raw_submission,
    validate_event,
)
from dev_events_api.app.utils.text import is_valid_slug


logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_submission(request: Request) -> Dict[str, Any]:
    """Turn the request body into a raw field mapping.

    JSON lists (``agenda``, ``tags``) are re-encoded as JSON strings so
    the validator sees the same shape a multipart form would produce.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Invalid form data"},
            ) from e
        if not isinstance(payload, dict):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Invalid form data"},
            )
        return {
            key: json.dumps(value) if isinstance(value, list) else value
            for key, value in payload.items()
        }
    form = await request.form()
    return dict(form)


def _check_slug(slug: str) -> None:
    if not is_valid_slug(slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Invalid slug format. Slug must contain only lowercase letters, numbers, and hyphens."
            },
        )


def _reject(result: ValidationResult) -> HTTPException:
    logger.info("Rejected event submission with %d error(s)", len(result.errors))
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": "Validation failed", "errors": result.errors},
    )


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(request: Request) -> EventResponse:
    """Create a new event from a form submission.

    The image must already be hosted; the ``image`` field carries its
    HTTPS URL.  The slug is derived from the title and made unique.
    """
    result = validate_event(await _read_submission(request))
    if not result.is_valid:
        raise _reject(result)
    try:
        event = await EventService.create_event(result.event)
    except sqlite3.Error as e:
        logger.exception("Event creation failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Event Creation Failed", "error": str(e)},
        ) from e
    return EventResponse(message="Event Created Successfully", event=event)


@router.get("/", response_model=EventListResponse)
async def list_events(
    limit: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
) -> EventListResponse:
    """List events, newest first.

    - **limit**: page size, default 20, clamped to 1..100.
    - **page**: zero-based page number, default 0.

    Values that are not integers fall back to the defaults.
    """
    events = await EventService.list_events(limit=limit, page=page)
    return EventListResponse(message="Events fetched successfully", events=events)


@router.get("/{slug}", response_model=EventResponse)
async def get_event(slug: str) -> EventResponse:
    """Retrieve a single event by its slug."""
    _check_slug(slug)
    try:
        event = await EventService.get_event(slug)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": str(e)}) from e
    return EventResponse(message="Event fetched successfully", event=event)


@router.get("/{slug}/similar", response_model=EventListResponse)
async def list_similar_events(slug: str, limit: Optional[str] = Query(None)) -> EventListResponse:
    """List other events that share at least one tag with this one."""
    _check_slug(slug)
    try:
        events = await EventService.list_similar_events(slug, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": str(e)}) from e
    return EventListResponse(message="Similar events fetched successfully", events=events)


@router.put("/{slug}", response_model=EventResponse)
async def update_event(slug: str, request: Request) -> EventResponse:
    """Update an existing event.

    Submitted fields are merged over the stored ones and the merged
    record is validated exactly like a new submission.  The slug does
    not change.
    """
    _check_slug(slug)
    try:
        existing = await EventService.get_event(slug)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": str(e)}) from e

    merged = to_raw_submission(existing)
    merged.update(await _read_submission(request))
    result = validate_event(merged)
    if not result.is_valid:
        raise _reject(result)
    try:
        event = await EventService.update_event(slug, result.event)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": str(e)}) from e
    except sqlite3.Error as e:
        logger.exception("Event update failed for %s", slug)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Event Update Failed", "error": str(e)},
        ) from e
    return EventResponse(message="Event Updated Successfully", event=event)


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(slug: str) -> None:
    """Delete an event by its slug."""
    _check_slug(slug)
    try:
        await EventService.delete_event(slug)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": str(e)}) from e
    return None
