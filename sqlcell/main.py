from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sqlcell.api.schemas import InvokeResponse
from sqlcell.api.routes import router
from sqlcell.commands.router import default_router
from sqlcell.core.config import get_settings

import logging

settings = get_settings()

# Basic console logging configuration
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s  %(levelname)-7s  %(name)-20s │ %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    settings = get_settings()
    commands = default_router()

    logger.info(
        "Starting | app=%s | env=%s | bridge=%s:%d | commands=%s",
        settings.APP_NAME,
        settings.ENVIRONMENT,
        settings.BRIDGE_HOST,
        settings.BRIDGE_PORT,
        ",".join(commands.names),
    )

    try:
        yield
    finally:
        logger.info("Shutting down")


app = FastAPI(
    title="SQL Cell Backend",
    description="Command bridge between the SQL cell UI and the query backend",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

app.include_router(router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client_ip": request.client.host if request.client else "unknown",
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=InvokeResponse(ok=False, error="Internal server error").model_dump(),
    )


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"status": "healthy"}
