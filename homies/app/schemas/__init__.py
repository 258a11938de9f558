"""
Pydantic schema definitions for service payloads.

Schemas are separated from the database rows so that callers never
depend on column names or on how timestamps are stored.
"""
