from __future__ import annotations


class EngineError(Exception):
    """Base class for errors raised by the progress and habit engine."""


class NotFound(EngineError, LookupError):
    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidState(EngineError, ValueError):
    """The requested transition is not allowed in the current state."""


class ConstraintViolation(EngineError, ValueError):
    """A write would break an aggregate invariant."""
