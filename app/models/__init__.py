"""ORM models; importing this package registers every table on ``Base``."""

from app.models.event import Event

__all__ = ["Event"]
