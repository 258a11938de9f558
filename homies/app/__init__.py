"""
Application package initializer.

The project is organised into small layers: ``core`` holds
configuration, logging and the storage handle, ``schemas`` holds the
pydantic models exchanged with callers and ``services`` holds the
business rules.  ``main.create_service`` wires these together.
"""

from .main import create_service  # noqa: F401
