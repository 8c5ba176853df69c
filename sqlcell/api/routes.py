from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Annotated, List
import logging

from .schemas import CommandInfo, InvokeRequest, InvokeResponse
from .dependencies import get_command_router
from sqlcell.commands.router import CommandRouter
from sqlcell.core.constants import AppSettings
from sqlcell.core.errors import (
    CommandFailedError,
    CommandNotFoundError,
    InvalidArgsError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=AppSettings.API_VERSION, tags=["Commands"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=InvokeResponse(ok=False, error=message).model_dump(),
    )


@router.get("/commands", response_model=List[CommandInfo])
def list_commands(
    commands: Annotated[CommandRouter, Depends(get_command_router)],
) -> List[CommandInfo]:
    return [CommandInfo(**info) for info in commands.describe()]


@router.post(
    "/invoke",
    response_model=InvokeResponse,
    responses={
        400: {"model": InvokeResponse, "description": "Command rejected its input"},
        404: {"model": InvokeResponse, "description": "Unknown command"},
        422: {"model": InvokeResponse, "description": "Arguments do not match the command"},
    },
)
def invoke(
    request: InvokeRequest,
    commands: Annotated[CommandRouter, Depends(get_command_router)],
):
    """
    Bridge entry point: dispatch a named command with its arguments.
    """
    try:
        result = commands.dispatch(request.command, request.args)
    except CommandNotFoundError as exc:
        logger.warning("Unknown command requested: %s", request.command)
        return _error(404, str(exc))
    except InvalidArgsError as exc:
        return _error(422, str(exc))
    except CommandFailedError as exc:
        return _error(400, str(exc))

    return InvokeResponse(result=result)
