"""
Shared fixtures for the test suite.

Every test gets its own in-memory SQLite database with the schema
created and no default categories, so counts in assertions only
reflect what the test inserted.
"""

import itertools
from datetime import datetime, timedelta

import pytest

from homies.app.core.db import Database, init_db
from homies.app.schemas.event import EventForm
from homies.app.services.event_service import EventService

EVENT_START = datetime(2025, 9, 1, 10, 0, 0, 123456)

_type_counter = itertools.count(1)


@pytest.fixture
def db():
    """Fresh in-memory database with the schema applied."""
    database = Database.connect(":memory:")
    init_db(database, seed_types=False)
    yield database
    database.close()


@pytest.fixture
def event_service(db):
    """Create an EventService bound to the test database."""
    return EventService(db)


@pytest.fixture
def sample_type(db):
    """Factory inserting an event category and returning its id."""

    def _create(name="Test Name"):
        with db.cursor() as cursor:
            cursor.execute("INSERT INTO types (name) VALUES (?)", (name,))
            type_id = cursor.lastrowid
        return type_id

    return _create


@pytest.fixture
def sample_user(db):
    """Factory inserting a user into the identity table."""

    def _create(user_id="user-id", user_name="homie"):
        with db.cursor() as cursor:
            cursor.execute(
                "INSERT INTO users (id, user_name, email) VALUES (?, ?, ?)",
                (user_id, user_name, f"{user_name}@example.com"),
            )
        return user_id

    return _create


@pytest.fixture
def sample_event(db, sample_type):
    """Factory inserting an event row directly, bypassing the service."""

    def _create(
        organiser_id="placeholder-user",
        name="Test Event",
        description="Test Description",
        start=EVENT_START,
        end=None,
        type_id=None,
    ):
        if type_id is None:
            # Category names are unique, so each default event gets its own.
            type_id = sample_type(f"Type of {name} {next(_type_counter)}")
        end = end or start + timedelta(hours=2)
        with db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO events (name, description, organiser_id, created_on, start_time, end_time, type_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    name,
                    description,
                    organiser_id,
                    EVENT_START.isoformat(),
                    start.isoformat(),
                    end.isoformat(),
                    type_id,
                ),
            )
            event_id = cursor.lastrowid
        return event_id

    return _create


@pytest.fixture
def event_form():
    """Factory for valid EventForm instances."""

    def _create(**overrides):
        values = {
            "name": "Test Event",
            "description": "Test Description",
            "start": EVENT_START,
            "end": EVENT_START + timedelta(hours=2),
            "type_id": 1,
        }
        values.update(overrides)
        return EventForm(**values)

    return _create
