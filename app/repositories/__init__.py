"""Data access for the relational store."""

from .base import BaseRepository
from .event_repository import CreateEventParams, EventRepository

__all__ = ["BaseRepository", "CreateEventParams", "EventRepository"]
