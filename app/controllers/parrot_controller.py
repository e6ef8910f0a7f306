from fastapi import Request
from fastapi.responses import JSONResponse

from app.controllers.base import BaseController, Result
from app.schemas import GetParrotRequest, ParrotRead
from app.utils.validation import validate_query_params


class ParrotController(BaseController):
    """Echoes the ``message`` query parameter back to the caller."""

    async def get_parrot(self, request: Request) -> JSONResponse:
        async def _handle() -> Result[dict]:
            params = await validate_query_params(request, GetParrotRequest)
            return Result(data=ParrotRead(message=params.message).model_dump(by_alias=True))

        return await self.handle_request(request, _handle)
