from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

REQUIRED_FIELDS = ("name", "email", "phone", "company", "message")


class DemoRequestStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    COMPLETED = "completed"


class DemoRequestSubmission(BaseModel):
    """Inbound form payload; emptiness is checked by the intake service."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None


class DemoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str
    company: str
    message: str
    status: DemoRequestStatus = DemoRequestStatus.PENDING
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "DemoRequest":
        return cls(
            id=str(document["_id"]),
            name=document["name"],
            email=document["email"],
            phone=document["phone"],
            company=document["company"],
            message=document["message"],
            status=document.get("status", DemoRequestStatus.PENDING.value),
            created_at=document["createdAt"],
        )


class StatusUpdate(BaseModel):
    status: DemoRequestStatus


class MessageResponse(BaseModel):
    message: str
    error: Optional[str] = None
