"""
Engine error types.

Validation failures are synchronous and local: the engine raises before it
builds any output, so callers never receive a partially-computed price or a
half-applied renewal.
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """An input is out of range; `field` names the offending value."""

    def __init__(self, field: str, detail: str):
        self.field = field
        self.detail = detail
        super().__init__(f"Invalid '{field}': {detail}")
