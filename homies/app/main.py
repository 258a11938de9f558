"""
Main entrypoint for the Homies events service.

``create_service`` performs the one‑time setup a caller needs before
using the service layer: it configures logging, opens the database,
creates the schema and returns an ``EventService`` bound to that
database, e.g.::

    service = create_service()
    event_id = await service.add_event(form, user_id)

Settings are provided via ``Settings`` from ``core.config``.
"""

import logging
from pathlib import Path
from typing import Optional

from .core.config import Settings, settings
from .core.db import Database, init_db
from .services.event_service import EventService

logger = logging.getLogger(__name__)


def configure_logging(config: Settings = settings) -> None:
    """Send log records to the console and, if configured, a log file.

    Does nothing when the root logger already has handlers, so an
    embedding application (or pytest) keeps its own setup.
    """
    if logging.getLogger().handlers:
        return

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(Path(config.log_file).resolve(), encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=config.log_format,
        datefmt=config.log_date_format,
        handlers=handlers,
    )


def create_service(database_url: Optional[str] = None) -> EventService:
    """Create and configure an ``EventService``.

    Parameters
    ----------
    database_url : Optional[str]
        Database to open instead of ``settings.database_url``.

    Returns
    -------
    EventService
        A service bound to an initialised database.
    """
    # Logging first, so the database setup below uses the configured
    # format.
    configure_logging()

    db = Database.connect(database_url)
    init_db(db)
    logger.info("%s event service ready", settings.project_name)
    return EventService(db)
