from contextlib import asynccontextmanager

import aiosqlite
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import (
    routes_admin,
    routes_auth,
    routes_cart,
    routes_messages,
    routes_modifications,
    routes_notifications,
    routes_orders,
    routes_payments,
    routes_products,
)
from db.database import connect
from utils import config
from utils.errors import MarketplaceError
from utils.logger import get_logger

_logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # first connection creates (and optionally seeds) the schema
    async with connect():
        pass
    _logger.info("Marketplace API ready.")
    yield


async def _marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        _logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _out_of_range(request: Request, exc: OverflowError) -> JSONResponse:
    # path ids too large to bind as an SQLite INTEGER
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request"},
    )


async def _storage_error(request: Request, exc: Exception) -> JSONResponse:
    _logger.exception(f"{request.method} {request.url.path} failed", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Marketplace API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MarketplaceError, _marketplace_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(aiosqlite.Error, _storage_error)
    app.add_exception_handler(OverflowError, _out_of_range)

    for module in (
        routes_auth,
        routes_products,
        routes_cart,
        routes_orders,
        routes_messages,
        routes_admin,
        routes_notifications,
        routes_payments,
        routes_modifications,
    ):
        app.include_router(module.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
