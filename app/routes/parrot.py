from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.controllers.parrot_controller import ParrotController
from app.dependencies import get_parrot_controller

router = APIRouter(prefix="/api/parrot", tags=["parrot"])


@router.get("")
async def get_parrot(
    request: Request,
    controller: ParrotController = Depends(get_parrot_controller),
) -> JSONResponse:
    return await controller.get_parrot(request)
