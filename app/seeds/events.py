"""Sample events for local development.

Events are spread over consecutive days, starting five days before today, so
the list always holds past, current and upcoming entries. Start times are
wall-clock hours in Japan time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import TransactionManager
from app.repositories.event_repository import CreateEventParams, EventRepository
from app.utils.dates import TZ, add_days, add_hours, create_date, get_parts, now

DAYS_BEFORE_TODAY = 5


@dataclass(slots=True, frozen=True)
class EventTemplate:
    name: str
    description: Optional[str]
    start_hour: int
    duration: int
    capacity: int


EVENT_TEMPLATES: tuple[EventTemplate, ...] = (
    EventTemplate("Intro to React Workshop", "Hands-on introduction to components and state management.", 10, 2, 30),
    EventTemplate("Practical TypeScript", "Putting the type system to work in everyday code.", 14, 2, 25),
    EventTemplate("Building Web Apps with Next.js", "From routing basics to production deployment.", 10, 3, 40),
    EventTemplate("Docker and Kubernetes Basics", "Containers first, orchestration second.", 13, 2, 35),
    EventTemplate("Getting Started with AWS", "Core services for building cloud infrastructure.", 10, 2, 50),
    EventTemplate("Machine Learning with Python", "Data analysis and model building, hands on.", 14, 3, 20),
    EventTemplate("Designing GraphQL APIs", "Schema design and resolver patterns.", 11, 2, 30),
    EventTemplate("Microservice Architecture", "Design principles and integration patterns.", 15, 2, 25),
    EventTemplate("CI/CD Pipelines", None, 10, 2, 30),
    EventTemplate("Web Security Essentials", "Common attacks and how to defend against them.", 13, 2, 40),
    EventTemplate("Relational Database Design", "Modelling and normalisation fundamentals.", 10, 1, 35),
    EventTemplate("Frontend Performance", "Measuring and fixing slow pages.", 14, 2, 30),
    EventTemplate("Test-Driven Development", "Writing unit and integration tests first.", 15, 2, 30),
    EventTemplate("Git in Practice", None, 10, 1, 40),
    EventTemplate("DevOps Fundamentals", "Infrastructure as code and delivery practices.", 16, 2, 30),
)


def build_seed_events(
    today: Optional[datetime] = None,
    templates: Sequence[EventTemplate] = EVENT_TEMPLATES,
) -> list[CreateEventParams]:
    today = today or now()
    events: list[CreateEventParams] = []
    for index, template in enumerate(templates):
        parts = get_parts(add_days(today, index - DAYS_BEFORE_TODAY), time_zone=TZ.JST)
        start = create_date(
            parts.year,
            parts.month_index,
            parts.day,
            template.start_hour,
            time_zone=TZ.JST,
        )
        events.append(
            CreateEventParams(
                name=template.name,
                description=template.description,
                event_start_datetime=start,
                event_end_datetime=add_hours(start, template.duration),
                capacity=template.capacity,
            )
        )
    return events


async def create_events(
    transaction_manager: TransactionManager,
    repository: EventRepository,
    events: Optional[Sequence[CreateEventParams]] = None,
) -> int:
    """Insert the seed events in one transaction and return how many were written."""

    rows = list(events) if events is not None else build_seed_events()

    async def _insert(session: AsyncSession) -> int:
        for params in rows:
            await repository.create(params, session)
        return len(rows)

    return await transaction_manager.execute(_insert)
