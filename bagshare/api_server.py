"""
Bagshare API Server
Peer-to-peer luggage space marketplace

Wires the routers, the injected store, the notification channel/worker and
the error handlers into one FastAPI app.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bagshare import __version__, config
from bagshare.airports.router import router as airports_router
from bagshare.health.router import router as health_router
from bagshare.listings.router import router as listings_router
from bagshare.matching.router import router as matching_router
from bagshare.notifications import (
    NotificationChannel,
    NotificationDispatcher,
    NotificationWorker,
    SmsDispatcher,
)
from bagshare.shared.errors import MarketErrorCode, MarketException
from bagshare.store import create_store
from bagshare.store.base import MarketStore

logger = logging.getLogger(__name__)


async def market_exception_handler(request: Request, exc: MarketException) -> JSONResponse:
    if exc.http_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.http_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": MarketErrorCode.VALIDATION_FAILED.value,
            "detail": "Invalid request",
            "details": {"errors": jsonable_errors(exc)},
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def create_app(
    store: Optional[MarketStore] = None,
    channel: Optional[NotificationChannel] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> FastAPI:
    app = FastAPI(
        title="Bagshare API",
        description="Peer-to-peer luggage space marketplace",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.store = store or create_store()
    app.state.notification_channel = channel or NotificationChannel()
    app.state.notification_worker = NotificationWorker(
        app.state.notification_channel,
        dispatcher or SmsDispatcher(),
    )

    app.add_exception_handler(MarketException, market_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(listings_router)
    app.include_router(matching_router)
    app.include_router(airports_router)
    app.include_router(health_router)

    @app.get("/")
    def root():
        return {
            "service": "Bagshare API",
            "version": __version__,
            "docs": "/docs",
        }

    logger.info(f"Bagshare API {__version__} ready (store={type(app.state.store).__name__})")
    return app
