from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.email_client import NotificationError
from src.app.config import get_settings
from src.app.dependencies import get_demo_request_store, get_email_client, get_mongo_factory
from src.app.errors import register_exception_handlers
from src.app.routes import router
from src.services.store import PersistenceError
from src.utils.logging import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Mail configuration: transport=%s host=%s port=%s user=%s password=%s companyEmail=%s",
        settings.mail_transport,
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        "Set" if settings.smtp_password else "Not Set",
        settings.company_email,
    )
    try:
        get_email_client().verify()
        logger.info("Mail channel is ready to send emails")
    except NotificationError as exc:
        logger.error("Mail channel connection error: %s", exc)

    mongo_factory = get_mongo_factory()
    store = get_demo_request_store(settings=settings, mongo_factory=mongo_factory)
    try:
        store.ping()
        logger.info("Connected to MongoDB")
    except PersistenceError as exc:
        logger.error("MongoDB connection error: %s", exc)

    yield
    mongo_factory.close()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


def run() -> None:
    import uvicorn

    logger.info("Server is running on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
