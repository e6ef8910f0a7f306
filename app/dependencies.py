"""Wiring of controllers, services and repositories into the shared container."""

from app.container import container
from app.controllers.event_controller import EventController
from app.controllers.parrot_controller import ParrotController
from app.database import TransactionManager, new_session
from app.repositories.event_repository import EventRepository
from app.services.event_service import EventService


def register_dependencies() -> None:
    container.register(TransactionManager, lambda: TransactionManager(new_session))
    container.register(EventRepository, lambda: EventRepository(new_session))
    container.register(
        EventService,
        lambda: EventService(
            container.resolve(TransactionManager),
            container.resolve(EventRepository),
        ),
    )
    container.register(EventController, lambda: EventController(container.resolve(EventService)))
    container.register(ParrotController, ParrotController)


def get_event_controller() -> EventController:
    """FastAPI dependency returning the shared EventController."""
    return container.resolve(EventController)


def get_parrot_controller() -> ParrotController:
    return container.resolve(ParrotController)


register_dependencies()
