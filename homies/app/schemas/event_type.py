"""Pydantic model for event categories."""

from pydantic import BaseModel


class TypeRead(BaseModel):
    """A selectable event category."""

    id: int
    name: str
