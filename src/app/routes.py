from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.app.config import Settings, get_settings
from src.app.dependencies import get_demo_request_service, get_demo_request_store
from src.schemas.demo_request import (
    DemoRequest,
    DemoRequestSubmission,
    MessageResponse,
    StatusUpdate,
)
from src.services.demo_request import DemoRequestService
from src.services.store import DemoRequestStore, PersistenceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _server_error(message: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": message, "error": str(exc)},
    )


@router.get("/health", status_code=status.HTTP_200_OK)
def health(settings: Settings = Depends(get_settings)) -> dict:
    return {"app": settings.app_name, "status": "ok"}


@router.post("/api/request-demo", response_model=MessageResponse, response_model_exclude_none=True)
def request_demo(
    payload: DemoRequestSubmission,
    service: DemoRequestService = Depends(get_demo_request_service),
):
    try:
        result = service.submit(payload.model_dump())
    except PersistenceError as exc:
        logger.error("Database Error: %s", exc)
        return _server_error("Failed to save demo request", exc)

    return MessageResponse(message=result.message, error=result.error)


@router.get("/api/demo-requests", response_model=List[DemoRequest])
def list_demo_requests(store: DemoRequestStore = Depends(get_demo_request_store)):
    try:
        return store.list_all()
    except PersistenceError as exc:
        logger.error("Error fetching demo requests: %s", exc)
        return _server_error("Error fetching demo requests", exc)


@router.patch("/api/demo-requests/{request_id}", response_model=DemoRequest)
def update_demo_request(
    request_id: str,
    payload: StatusUpdate,
    store: DemoRequestStore = Depends(get_demo_request_store),
):
    try:
        updated = store.update_status(request_id, payload.status)
    except PersistenceError as exc:
        logger.error("Error updating demo request %s: %s", request_id, exc)
        return _server_error("Error updating demo request", exc)

    if updated is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "Demo request not found", "error": f"No demo request with id {request_id}"},
        )
    logger.info("Demo request %s marked %s", request_id, updated.status.value)
    return updated
