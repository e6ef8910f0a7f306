from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.controllers.event_controller import EventController
from app.dependencies import get_event_controller

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("")
async def list_events(
    request: Request,
    controller: EventController = Depends(get_event_controller),
) -> JSONResponse:
    return await controller.get_events(request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    request: Request,
    controller: EventController = Depends(get_event_controller),
) -> JSONResponse:
    return await controller.create_event(request)
