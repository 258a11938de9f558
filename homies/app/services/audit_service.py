"""
Audit service for recording and querying actions on events.

This module writes audit records to the ``audit_logs`` table and
retrieves them with filters and pagination.  ``EventService`` records
every creation, edit, join and leave through it.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from homies.app.core.db import Database


class AuditService:
    """Service class for writing and retrieving audit logs."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def log(
        self,
        user_id: Optional[str],
        action: str,
        object_type: str,
        object_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Insert a new audit record.

        Parameters
        ----------
        user_id : Optional[str]
            ID of the user performing the action.  May be ``None`` for
            system‑initiated actions.
        action : str
            Short description of the action (e.g. "create", "join").
        object_type : str
            Type of object affected (e.g. "event").
        object_id : Optional[int]
            Primary key of the affected object, if applicable.
        details : Optional[dict]
            Additional structured data about the action, stored as JSON.
        """
        details_json = json.dumps(details, default=str) if details else None
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO audit_logs (user_id, action, object_type, object_id, details)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, action, object_type, object_id, details_json),
            )

    async def list_logs(
        self,
        user_id: Optional[str] = None,
        object_type: Optional[str] = None,
        action: Optional[str] = None,
        object_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Retrieve audit records with optional filters and pagination.

        Records are returned newest first.
        """
        where_clauses: List[str] = []
        params: List[Any] = []
        if user_id is not None:
            where_clauses.append("user_id = ?")
            params.append(user_id)
        if object_type:
            where_clauses.append("object_type = ?")
            params.append(object_type)
        if action:
            where_clauses.append("action = ?")
            params.append(action)
        if object_id is not None:
            where_clauses.append("object_id = ?")
            params.append(object_id)
        query = "SELECT id, user_id, action, object_type, object_id, timestamp, details FROM audit_logs"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        # Several records can share a second, so id breaks the tie.
        query += " ORDER BY timestamp DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self.db.cursor() as cursor:
            rows = cursor.execute(query, tuple(params)).fetchall()

        logs = []
        for row in rows:
            details_data = None
            if row["details"]:
                try:
                    details_data = json.loads(row["details"])
                except json.JSONDecodeError:
                    details_data = row["details"]
            logs.append(
                {
                    "id": row["id"],
                    "user_id": row["user_id"],
                    "action": row["action"],
                    "object_type": row["object_type"],
                    "object_id": row["object_id"],
                    "timestamp": row["timestamp"],
                    "details": details_data,
                }
            )
        return logs
