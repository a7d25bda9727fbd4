"""
Business logic for events.

``EventService`` stores sanitized events in SQLite, keyed by a slug
derived from the title.  It never validates input itself: callers run
``validate_event`` first and only hand over a ``SanitizedEvent``, so no
database work is done for a submission that would be rejected.
"""

import json
import logging
import sqlite3
from typing import Any, List, Optional, Tuple

from dev_events_api.app.core.config import settings
from dev_events_api.app.core.db import get_connection
from dev_events_api.app.schemas.event import EventRead, SanitizedEvent
from dev_events_api.app.services.audit_service import AuditService
from dev_events_api.app.utils.text import slugify


logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id, slug, title, description, overview, image, venue, location, date, time, "
    "mode, audience, agenda, organizer, tags, created_at, updated_at"
)

MAX_SIMILAR_EVENTS = 20

# Largest OFFSET SQLite accepts as a 64-bit INTEGER.
MAX_OFFSET = 2**63 - 1


def _parse_int(value: Any, default: int) -> int:
    """Interpret ``value`` as an integer, falling back to ``default``."""
    if value is None:
        return default
    try:
        return int(str(value).strip(), 10)
    except ValueError:
        return default


def parse_pagination(limit: Any = None, page: Any = None) -> Tuple[int, int]:
    """Return a ``(limit, page)`` pair from raw query values.

    ``limit`` defaults to ``settings.default_page_size`` and is clamped to
    ``1..settings.max_page_size``; ``page`` defaults to 0, is never
    negative and is capped so that ``page * limit`` fits in ``MAX_OFFSET``.
    Values that are not integers are replaced by the defaults.
    """
    parsed_limit = _parse_int(limit, settings.default_page_size)
    parsed_limit = max(1, min(settings.max_page_size, parsed_limit))
    parsed_page = max(0, min(MAX_OFFSET // parsed_limit, _parse_int(page, 0)))
    return parsed_limit, parsed_page


def parse_similar_limit(limit: Any = None) -> int:
    return max(1, min(MAX_SIMILAR_EVENTS, _parse_int(limit, settings.similar_events_limit)))


def _row_to_event(row: sqlite3.Row) -> EventRead:
    return EventRead(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        description=row["description"],
        overview=row["overview"],
        image=row["image"],
        venue=row["venue"],
        location=row["location"],
        date=row["date"],
        time=row["time"],
        mode=row["mode"],
        audience=row["audience"],
        agenda=json.loads(row["agenda"]),
        organizer=row["organizer"],
        tags=json.loads(row["tags"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _unique_slug(cursor: sqlite3.Cursor, title: str) -> str:
    """Slug for ``title``, suffixed with ``-2``, ``-3``... if already taken."""
    base = slugify(title)
    taken = {
        row["slug"]
        for row in cursor.execute(
            "SELECT slug FROM events WHERE slug = ? OR slug LIKE ?",
            (base, f"{base}-%"),
        ).fetchall()
    }
    slug = base
    suffix = 2
    while slug in taken:
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


class EventService:
    """Service for storing and querying events."""

    @classmethod
    async def create_event(cls, data: SanitizedEvent) -> EventRead:
        """Insert a sanitized event under a fresh unique slug and return it."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            slug = _unique_slug(cursor, data.title)
            cursor.execute(
                """
                INSERT INTO events (slug, title, description, overview, image, venue, location,
                                    date, time, mode, audience, agenda, organizer, tags)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    slug,
                    data.title,
                    data.description,
                    data.overview,
                    data.image,
                    data.venue,
                    data.location,
                    data.date,
                    data.time,
                    data.mode,
                    data.audience,
                    json.dumps(data.agenda),
                    data.organizer,
                    json.dumps(data.tags),
                ),
            )
            event_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(
                f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)
            ).fetchone()
        finally:
            conn.close()

        logger.info("Created event %s (%s)", slug, event_id)
        await AuditService.log(
            action="create",
            object_type="event",
            object_id=event_id,
            details={"slug": slug, "title": data.title},
        )
        return _row_to_event(row)

    @classmethod
    async def list_events(cls, limit: Any = None, page: Any = None) -> List[EventRead]:
        """Return one page of events, newest first.

        ``limit`` and ``page`` are raw query values; see
        ``parse_pagination`` for defaults and clamping.  The offset is
        ``page * limit``.
        """
        limit, page = parse_pagination(limit, page)
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {EVENT_COLUMNS} FROM events ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (limit, page * limit),
            ).fetchall()
            return [_row_to_event(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_event(cls, slug: str) -> EventRead:
        """Retrieve a single event by slug.

        Raises ``ValueError`` if no event has this slug.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {EVENT_COLUMNS} FROM events WHERE slug = ?", (slug,)
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise ValueError(f"Event with slug '{slug}' not found")
        return _row_to_event(row)

    @classmethod
    async def update_event(cls, slug: str, data: SanitizedEvent) -> EventRead:
        """Replace the stored fields of an event.

        The slug is left unchanged even when the title changes, so
        existing links keep working.  Raises ``ValueError`` if the event
        does not exist.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE events
                SET title = ?, description = ?, overview = ?, image = ?, venue = ?, location = ?,
                    date = ?, time = ?, mode = ?, audience = ?, agenda = ?, organizer = ?, tags = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE slug = ?
                """,
                (
                    data.title,
                    data.description,
                    data.overview,
                    data.image,
                    data.venue,
                    data.location,
                    data.date,
                    data.time,
                    data.mode,
                    data.audience,
                    json.dumps(data.agenda),
                    data.organizer,
                    json.dumps(data.tags),
                    slug,
                ),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Event with slug '{slug}' not found")
            conn.commit()
            row = cursor.execute(
                f"SELECT {EVENT_COLUMNS} FROM events WHERE slug = ?", (slug,)
            ).fetchone()
        finally:
            conn.close()

        logger.info("Updated event %s", slug)
        await AuditService.log(
            action="update",
            object_type="event",
            object_id=row["id"],
            details={"slug": slug},
        )
        return _row_to_event(row)

    @classmethod
    async def delete_event(cls, slug: str) -> None:
        """Delete an event by slug.

        Raises ``ValueError`` if the event does not exist.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id FROM events WHERE slug = ?", (slug,)).fetchone()
            if not row:
                raise ValueError(f"Event with slug '{slug}' not found")
            cursor.execute("DELETE FROM events WHERE id = ?", (row["id"],))
            conn.commit()
        finally:
            conn.close()

        logger.info("Deleted event %s", slug)
        await AuditService.log(
            action="delete",
            object_type="event",
            object_id=row["id"],
            details={"slug": slug},
        )

    @classmethod
    async def list_similar_events(cls, slug: str, limit: Optional[Any] = None) -> List[EventRead]:
        """Return other events sharing at least one tag with ``slug``.

        Tags are compared case-insensitively.  Results are newest first
        and capped by ``parse_similar_limit``.  Raises ``ValueError`` if
        the source event does not exist.
        """
        source = await cls.get_event(slug)
        wanted = {tag.casefold() for tag in source.tags}
        limit = parse_similar_limit(limit)

        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {EVENT_COLUMNS} FROM events WHERE slug != ? ORDER BY created_at DESC, id DESC",
                (slug,),
            ).fetchall()
        finally:
            conn.close()

        similar: List[EventRead] = []
        for row in rows:
            event = _row_to_event(row)
            if wanted & {tag.casefold() for tag in event.tags}:
                similar.append(event)
                if len(similar) >= limit:
                    break
        return similar
