"""
Top‑level package for the Homies community events service.

The package provides no public exports; all functionality lives in
submodules under ``app`` and is imported using fully qualified names
like ``homies.app.services.event_service``.
"""

__all__ = []
