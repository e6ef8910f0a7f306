"""Service layer: one class per resource, orchestrating repositories inside transactions."""

from .event_service import EventService

__all__ = ["EventService"]
