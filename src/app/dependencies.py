from __future__ import annotations

from functools import lru_cache
from typing import Union

from fastapi import Depends

from src.app.config import Settings, get_settings
from src.adapters.email_client import SendGridEmailClient, SmtpEmailClient
from src.adapters.mongo_client import MongoClientFactory
from src.services.demo_request import DemoRequestService
from src.services.store import DemoRequestStore

EmailClient = Union[SmtpEmailClient, SendGridEmailClient]


@lru_cache(maxsize=1)
def get_mongo_factory() -> MongoClientFactory:
    settings = get_settings()
    return MongoClientFactory(settings.mongo_uri, settings.mongo_database, settings.mongo_timeout_ms)


@lru_cache(maxsize=1)
def get_email_client() -> EmailClient:
    settings = get_settings()
    if settings.mail_transport == "sendgrid":
        return SendGridEmailClient(api_key=settings.email_api_key, timeout=settings.smtp_timeout)
    return SmtpEmailClient(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        secure=settings.smtp_secure,
        starttls=settings.smtp_starttls,
        timeout=settings.smtp_timeout,
    )


def get_demo_request_store(
    settings: Settings = Depends(get_settings),
    mongo_factory: MongoClientFactory = Depends(get_mongo_factory),
) -> DemoRequestStore:
    return DemoRequestStore(collection=mongo_factory.get_collection(settings.demo_requests_collection))


def get_demo_request_service(
    settings: Settings = Depends(get_settings),
    store: DemoRequestStore = Depends(get_demo_request_store),
    email_client: EmailClient = Depends(get_email_client),
) -> DemoRequestService:
    return DemoRequestService(
        store=store,
        email_client=email_client,
        sender_email=settings.sender_address,
        company_email=settings.company_email,
        brand_name=settings.brand_name,
        support_email=settings.support_email,
    )
