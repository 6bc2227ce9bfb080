# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sup_notifier.logging import logger
from sup_notifier.managers.notification_server import NotificationServer
from sup_notifier.routing import collect_subrouters


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Creates the application's single NotificationServer on startup and shuts
    it down on exit: liveness checks are cancelled, open connections are
    closed and the registry is cleared.
    """
    logger.info("Application startup initiated")
    app.state.notification_server = NotificationServer()
    logger.info("WebSocket server initialized")

    try:
        yield
    finally:
        logger.info("Application shutdown initiated")
        await app.state.notification_server.shutdown()
        logger.info("Application shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Routers are collected from `api/http` and `api/ws/consumers` by
    `collect_subrouters()`; the notification channel is served at
    `/ws/notifications`.
    """
    app = FastAPI(
        title="Sup notification server",
        description="Real-time notification and presence channel",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(collect_subrouters())

    return app


app = application()  # Need for fastapi cli
