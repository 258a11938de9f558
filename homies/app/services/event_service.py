"""
Business logic for events.

``EventService`` creates, lists and edits events and manages which
users have joined them.  Only the organiser of an event may edit it.
Lookups of a missing event return ``None``; operations that can be
refused (join, leave, update) return a ``ServiceResult`` describing
why.  Storage errors are not caught here and reach the caller.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from homies.app.core.db import Database
from homies.app.schemas.event import EventDetails, EventForm, EventRead
from homies.app.schemas.event_type import TypeRead
from homies.app.services.audit_service import AuditService
from homies.app.services.results import ServiceResult

logger = logging.getLogger(__name__)

# Type and organiser names are resolved with outer joins: an organiser
# missing from ``users`` is shown by id.
_EVENT_SUMMARY_COLUMNS = """
    e.id, e.name, e.start_time,
    t.name AS type_name,
    COALESCE(u.user_name, e.organiser_id) AS organiser
"""

_EVENT_JOINS = """
    LEFT JOIN types t ON t.id = e.type_id
    LEFT JOIN users u ON u.id = e.organiser_id
"""


def _summary_from_row(row: sqlite3.Row) -> EventRead:
    return EventRead(
        id=row["id"],
        name=row["name"],
        start=row["start_time"],
        type=row["type_name"],
        organiser=row["organiser"],
    )


class EventService:
    """Service for managing events and their participants.

    Parameters
    ----------
    db : Database
        Storage handle all queries run against.
    audit : Optional[AuditService]
        Where create/update/join/leave actions are recorded.  Defaults
        to an ``AuditService`` on the same database.
    """

    def __init__(self, db: Database, audit: Optional[AuditService] = None) -> None:
        self.db = db
        self.audit = audit or AuditService(db)

    async def _record(self, user_id: str, action: str, event_id: int, details: Optional[dict] = None) -> None:
        # A failed audit write must not undo an operation that already
        # committed.
        try:
            await self.audit.log(
                user_id=user_id,
                action=action,
                object_type="event",
                object_id=event_id,
                details=details,
            )
        except sqlite3.Error:
            logger.exception("Could not record audit entry '%s' for event %s", action, event_id)

    async def add_event(self, form: EventForm, user_id: str) -> int:
        """Create a new event organised by ``user_id`` and return its id.

        No duplicate check is made: two events may share a name.  A
        ``type_id`` without a matching category violates the foreign key
        and raises ``sqlite3.IntegrityError``.
        """
        logger.info("User %s is creating event '%s'", user_id, form.name)
        created_on = datetime.now(timezone.utc)
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO events (name, description, organiser_id, created_on, start_time, end_time, type_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    form.name,
                    form.description,
                    user_id,
                    created_on.isoformat(),
                    form.start.isoformat(),
                    form.end.isoformat(),
                    form.type_id,
                ),
            )
            event_id = cursor.lastrowid
        await self._record(user_id, "create", event_id, {"name": form.name})
        return event_id

    async def get_all_events(self) -> List[EventRead]:
        """Return every event, ordered by id."""
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {_EVENT_SUMMARY_COLUMNS} FROM events e {_EVENT_JOINS} ORDER BY e.id"
            ).fetchall()
        return [_summary_from_row(row) for row in rows]

    async def get_event_details(self, event_id: int) -> Optional[EventDetails]:
        """Return the full view of an event, or ``None`` if it does not exist."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"""
                SELECT {_EVENT_SUMMARY_COLUMNS}, e.description, e.end_time, e.created_on
                FROM events e {_EVENT_JOINS}
                WHERE e.id = ?
                """,
                (event_id,),
            ).fetchone()
        if not row:
            return None
        return EventDetails(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            start=row["start_time"],
            end=row["end_time"],
            organiser=row["organiser"],
            created_on=row["created_on"],
            type=row["type_name"],
        )

    async def get_event_for_edit(self, event_id: int) -> Optional[EventForm]:
        """Project an event into an edit form.

        The form's ``types`` are filled with every category so the
        caller can offer a selection.  Returns ``None`` if the event
        does not exist.  Stored values are not re-validated against
        the form limits, so rows written outside the form still load.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT name, description, start_time, end_time, type_id FROM events WHERE id = ?",
                (event_id,),
            ).fetchone()
        if not row:
            return None
        return EventForm.model_construct(
            name=row["name"],
            description=row["description"],
            start=datetime.fromisoformat(row["start_time"]),
            end=datetime.fromisoformat(row["end_time"]),
            type_id=row["type_id"],
            types=await self.get_all_types(),
        )

    async def get_event_organizer_id(self, event_id: int) -> Optional[str]:
        """Return the organiser id of an event, or ``None`` if it does not exist."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT organiser_id FROM events WHERE id = ?",
                (event_id,),
            ).fetchone()
        return row["organiser_id"] if row else None

    async def get_user_joined_events(self, user_id: str) -> List[EventRead]:
        """Return the events ``user_id`` has joined."""
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                f"""
                SELECT {_EVENT_SUMMARY_COLUMNS}
                FROM events_participants p
                JOIN events e ON e.id = p.event_id
                {_EVENT_JOINS}
                WHERE p.helper_id = ?
                ORDER BY e.id
                """,
                (user_id,),
            ).fetchall()
        return [_summary_from_row(row) for row in rows]

    async def join_event(self, event_id: int, user_id: str) -> ServiceResult:
        """Add ``user_id`` to the participants of an event.

        Returns ``not_found`` if the event does not exist and
        ``conflict`` if the user has already joined it.
        """
        with self.db.cursor() as cursor:
            event = cursor.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
            if not event:
                logger.info("User %s tried to join missing event %s", user_id, event_id)
                return ServiceResult.not_found()
            joined = cursor.execute(
                "SELECT 1 FROM events_participants WHERE event_id = ? AND helper_id = ?",
                (event_id, user_id),
            ).fetchone()
            if joined:
                logger.info("User %s has already joined event %s", user_id, event_id)
                return ServiceResult.conflict()

        try:
            with self.db.cursor() as cursor:
                cursor.execute(
                    "INSERT INTO events_participants (event_id, helper_id) VALUES (?, ?)",
                    (event_id, user_id),
                )
        except sqlite3.IntegrityError:
            # Lost a race: either another request added the same row or
            # the event was removed in between.
            if await self.is_user_joined_event(event_id, user_id):
                logger.warning("Concurrent join of event %s by user %s", event_id, user_id)
                return ServiceResult.conflict()
            logger.warning("Event %s disappeared while user %s was joining", event_id, user_id)
            return ServiceResult.not_found()

        logger.info("User %s joined event %s", user_id, event_id)
        await self._record(user_id, "join", event_id)
        return ServiceResult.ok()

    async def leave_event(self, event_id: int, user_id: str) -> ServiceResult:
        """Remove ``user_id`` from the participants of an event.

        A missing event and a user who never joined are both reported
        as ``not_found``.
        """
        with self.db.cursor() as cursor:
            cursor.execute(
                "DELETE FROM events_participants WHERE event_id = ? AND helper_id = ?",
                (event_id, user_id),
            )
            removed = cursor.rowcount
        if not removed:
            logger.info("User %s is not a participant of event %s", user_id, event_id)
            return ServiceResult.not_found()
        logger.info("User %s left event %s", user_id, event_id)
        await self._record(user_id, "leave", event_id)
        return ServiceResult.ok()

    async def update_event(self, event_id: int, form: EventForm, user_id: str) -> ServiceResult:
        """Overwrite the editable fields of an event.

        Returns ``not_found`` if the event does not exist and
        ``forbidden`` if ``user_id`` is not its organiser.  Concurrent
        edits are last‑writer‑wins.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT organiser_id FROM events WHERE id = ?",
                (event_id,),
            ).fetchone()
            if not row:
                logger.info("User %s tried to edit missing event %s", user_id, event_id)
                return ServiceResult.not_found()
            if row["organiser_id"] != user_id:
                logger.warning(
                    "User %s is not the organiser of event %s and cannot edit it", user_id, event_id
                )
                return ServiceResult.forbidden()
            cursor.execute(
                """
                UPDATE events
                SET name = ?, description = ?, start_time = ?, end_time = ?, type_id = ?
                WHERE id = ?
                """,
                (
                    form.name,
                    form.description,
                    form.start.isoformat(),
                    form.end.isoformat(),
                    form.type_id,
                    event_id,
                ),
            )
        logger.info("User %s updated event %s", user_id, event_id)
        await self._record(
            user_id,
            "update",
            event_id,
            form.model_dump(include={"name", "description", "start", "end", "type_id"}),
        )
        return ServiceResult.ok(event_id)

    async def get_all_types(self) -> List[TypeRead]:
        """Return every event category, ordered by id."""
        with self.db.cursor() as cursor:
            rows = cursor.execute("SELECT id, name FROM types ORDER BY id").fetchall()
        return [TypeRead(id=row["id"], name=row["name"]) for row in rows]

    async def is_user_joined_event(self, event_id: int, user_id: str) -> bool:
        """Return whether ``user_id`` has joined the event."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT 1 FROM events_participants WHERE event_id = ? AND helper_id = ?",
                (event_id, user_id),
            ).fetchone()
        return row is not None
