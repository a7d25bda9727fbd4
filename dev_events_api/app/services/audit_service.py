"""
Audit service for recording changes to events.

Every create, update and delete performed through the API writes a row
to the ``audit_logs`` table.  Audit writes are best effort: a database
error while recording one is logged and does not undo or fail the
change being audited.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Optional

from dev_events_api.app.core.db import get_connection


logger = logging.getLogger(__name__)


class AuditService:
    """Service class for writing audit records."""

    @classmethod
    async def log(
        cls,
        action: str,
        object_type: str,
        object_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Insert a new audit record.

        Parameters
        ----------
        action : str
            Short description of the action (e.g. "create", "update", "delete").
        object_type : str
            Type of object affected (e.g. "event").
        object_id : Optional[int]
            Primary key of the affected object, if applicable.
        details : Optional[dict]
            Additional structured data about the action, stored as JSON.
        """
        details_json = json.dumps(details) if details else None
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO audit_logs (action, object_type, object_id, details)
                VALUES (?, ?, ?, ?)
                """,
                (action, object_type, object_id, details_json),
            )
            conn.commit()
        except sqlite3.Error as exc:
            logger.warning("Could not record audit entry %s %s %s: %s", action, object_type, object_id, exc)
        finally:
            conn.close()

