from .base import BaseController, Result
from .event_controller import EventController
from .parrot_controller import ParrotController

__all__ = ["BaseController", "EventController", "ParrotController", "Result"]
